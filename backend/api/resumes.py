"""Resume CRUD: one resume per user, either built field-by-field or uploaded."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from sqlalchemy.orm import Session

from api.dependencies import get_current_user
from api.router import read_upload
from database import get_db
from models.responses import ResumeResponse
from models.schemas.resume_data import ResumeData
from models.tables import Analysis, Resume, User
from services import pdf_parser
from services.exceptions import ExtractionError
from services.resume_text import resume_to_plain_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resume", tags=["resume"])


def _get_resume(db: Session, user: User) -> Resume | None:
    return db.query(Resume).filter(Resume.user_id == user.id).first()


def _upsert(db: Session, user: User, **fields) -> Resume:
    resume = _get_resume(db, user)
    if resume is None:
        resume = Resume(user_id=user.id, **fields)
        db.add(resume)
    else:
        for key, value in fields.items():
            setattr(resume, key, value)
    db.commit()
    db.refresh(resume)
    return resume


@router.get("", response_model=ResumeResponse)
def get_resume(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    resume = _get_resume(db, current_user)
    if resume is None:
        raise HTTPException(status_code=404, detail="No resume saved")
    return resume


@router.put("", response_model=ResumeResponse)
def save_resume(
    data: ResumeData,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Save a structured resume built in the resume builder."""
    if not data.personal_info.full_name.strip():
        raise HTTPException(status_code=400, detail="Please enter at least your full name")

    resume = _upsert(
        db, current_user,
        resume_type="structured",
        file_name=None,
        extracted_text=resume_to_plain_text(data),
        structured_data=data.model_dump(),
    )
    logger.info("Saved structured resume %s", resume.id)
    return resume


@router.post("/upload", response_model=ResumeResponse)
async def upload_resume(
    resume_file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content = await read_upload(resume_file)
    try:
        text = pdf_parser.extract_upload_text(resume_file.filename, content)
    except ExtractionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    resume = _upsert(
        db, current_user,
        resume_type="pdf",
        file_name=resume_file.filename,
        extracted_text=text,
        structured_data=None,
    )
    logger.info("Stored uploaded resume %s (%d chars)", resume.id, len(text))
    return resume


@router.delete("", status_code=204)
def delete_resume(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    resume = _get_resume(db, current_user)
    if resume is None:
        raise HTTPException(status_code=404, detail="No resume saved")

    # Analyses keep their own snapshot of the resume
    db.query(Analysis).filter(Analysis.resume_id == resume.id).update({"resume_id": None})
    db.delete(resume)
    db.commit()
    return Response(status_code=204)
