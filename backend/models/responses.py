from datetime import datetime

from pydantic import BaseModel

from models.schemas.analysis import KeywordFound, KeywordMissing, Suggestion
from models.schemas.resume_data import ResumeData


class ExtractTextResponse(BaseModel):
    extracted_text: str
    file_name: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ResumeResponse(BaseModel):
    id: str
    resume_type: str
    file_name: str | None = None
    extracted_text: str = ""
    structured_data: ResumeData | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AnalysisSummary(BaseModel):
    id: str
    overall_score: int
    job_title: str
    job_company: str | None = None
    created_at: datetime


class AnalysisResponse(AnalysisSummary):
    resume_id: str | None = None
    job_description: str
    summary: str = ""
    suggestions: list[Suggestion] = []
    keywords_found: list[KeywordFound] = []
    keywords_missing: list[KeywordMissing] = []


class ReviewResponse(BaseModel):
    """Current state of the interactive suggestion review."""
    analysis_id: str
    base_score: int
    current_score: int
    score_delta: int
    is_structured: bool
    resume_data: ResumeData | None = None
    resume_text: str = ""
    active: list[Suggestion] = []
    accepted: list[Suggestion] = []
    dismissed: list[Suggestion] = []
    selected_id: str | None = None
    can_export: bool = False
