from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import settings
from models.requests import AnalyzeResumeRequest
from models.responses import ExtractTextResponse
from models.schemas.analysis import AnalysisResult
from services import pdf_parser, resume_analyzer
from services.exceptions import AnalysisError, ExtractionError

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


async def read_upload(resume_file: UploadFile) -> bytes:
    """Read an uploaded resume, enforcing type and size limits."""
    if not pdf_parser.is_supported(resume_file.filename):
        raise HTTPException(status_code=400, detail="Only PDF or DOCX files are accepted")

    content = await resume_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )
    return content


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "gemini_configured": bool(settings.gemini_api_key),
    }


@router.post("/api/extract-pdf", response_model=ExtractTextResponse)
@limiter.limit("10/minute")
async def extract_pdf(request: Request, resume_file: UploadFile = File(...)):
    content = await read_upload(resume_file)
    try:
        text = pdf_parser.extract_upload_text(resume_file.filename, content)
    except ExtractionError:
        raise HTTPException(status_code=400, detail="Failed to extract PDF")
    return ExtractTextResponse(extracted_text=text, file_name=resume_file.filename)


@router.post("/api/analyze-resume", response_model=AnalysisResult)
@limiter.limit("10/minute")
async def analyze_resume(request: Request, body: AnalyzeResumeRequest):
    resume_data = body.resume_data.model_dump() if body.resume_data else None
    try:
        return await resume_analyzer.analyze(body.resume_text, body.job_description, resume_data)
    except AnalysisError:
        raise HTTPException(status_code=500, detail="Failed to analyze resume")
