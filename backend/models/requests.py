from pydantic import BaseModel, Field

from models.schemas.resume_data import ResumeData


class AnalyzeResumeRequest(BaseModel):
    resume_text: str = Field(..., max_length=50000, description="Plain text resume content")
    job_description: str = Field(..., max_length=10000, description="Job description text")
    resume_data: ResumeData | None = Field(None, description="Structured resume, if built in the app")


class RegisterRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=6)
    confirm_password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class CreateAnalysisRequest(BaseModel):
    job_description: str = Field(..., max_length=10000)
    title: str = Field("", max_length=255)
    company: str = Field("", max_length=255)
