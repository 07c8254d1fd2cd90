"""Structured resume document, as built field-by-field in the resume builder."""

import uuid

from pydantic import BaseModel, Field


def generate_id() -> str:
    return str(uuid.uuid4())


class PersonalInfo(BaseModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""


class Education(BaseModel):
    id: str = Field(default_factory=generate_id)
    school: str = ""
    degree: str = ""
    field: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    gpa: str = ""


class Experience(BaseModel):
    id: str = Field(default_factory=generate_id)
    title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    bullets: list[str] = Field(default_factory=lambda: [""], min_length=1)


class Project(BaseModel):
    id: str = Field(default_factory=generate_id)
    name: str = ""
    technologies: str = ""
    start_date: str = ""
    end_date: str = ""
    bullets: list[str] = Field(default_factory=lambda: [""], min_length=1)


class Skills(BaseModel):
    languages: str = ""
    frameworks: str = ""
    tools: str = ""
    other: str = ""


class ResumeData(BaseModel):
    """Top-level structured resume.

    Field names double as the vocabulary of suggestion field paths,
    e.g. ``experience[0].bullets[2]`` or ``skills.tools``.
    """
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    education: list[Education] = []
    experience: list[Experience] = []
    projects: list[Project] = []
    skills: Skills = Field(default_factory=Skills)
