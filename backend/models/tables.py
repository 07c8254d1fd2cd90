"""SQLAlchemy tables: users, resumes, job postings and analyses."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=_now)

    resume = relationship("Resume", back_populates="user", uselist=False)


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    resume_type = Column(String(20), nullable=False)  # structured | pdf
    file_name = Column(String(255), nullable=True)
    extracted_text = Column(Text, nullable=False, default="")
    structured_data = Column(JSON, nullable=True)  # ResumeData.model_dump()
    created_at = Column(DateTime, nullable=False, default=_now)
    updated_at = Column(DateTime, nullable=False, default=_now, onupdate=_now)

    user = relationship("User", back_populates="resume")


class JobPosting(Base):
    __tablename__ = "job_postings"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False, default="Untitled Position")
    company = Column(String(255), nullable=True)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_now)


class Analysis(Base):
    __tablename__ = "analyses"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    resume_id = Column(String(36), ForeignKey("resumes.id"), nullable=True)
    job_posting_id = Column(String(36), ForeignKey("job_postings.id"), nullable=False)

    overall_score = Column(Integer, nullable=False)
    suggestions = Column(JSON, nullable=False, default=list)
    keywords_found = Column(JSON, nullable=False, default=list)
    keywords_missing = Column(JSON, nullable=False, default=list)
    summary = Column(Text, nullable=False, default="")

    # Base resume as analysed; never changes after creation
    resume_text = Column(Text, nullable=False, default="")
    resume_data = Column(JSON, nullable=True)

    # ReviewSession.to_state(), null until the first decision
    review_state = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=_now)

    job_posting = relationship("JobPosting")
