"""Pydantic contracts shared between the API and the service layer."""

from models.schemas.analysis import (
    AnalysisResult,
    KeywordFound,
    KeywordMissing,
    Suggestion,
)
from models.schemas.resume_data import (
    Education,
    Experience,
    PersonalInfo,
    Project,
    ResumeData,
    Skills,
)

__all__ = [
    "AnalysisResult",
    "KeywordFound",
    "KeywordMissing",
    "Suggestion",
    "Education",
    "Experience",
    "PersonalInfo",
    "Project",
    "ResumeData",
    "Skills",
]
