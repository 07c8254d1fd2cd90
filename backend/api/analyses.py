"""Analyses and the interactive suggestion review.

The review session is rebuilt from the analysis row on every request,
transitioned by the suggestion engine, and written back only when the
transition succeeded.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from api.dependencies import get_current_user
from database import get_db
from models.requests import CreateAnalysisRequest
from models.responses import AnalysisResponse, AnalysisSummary, ReviewResponse
from models.schemas.analysis import Suggestion
from models.tables import Analysis, JobPosting, Resume, User
from services import resume_analyzer
from services.exceptions import AnalysisError, FieldPathError, UnknownSuggestionError
from services.pdf_export import EXPORT_FILENAME, render_resume_pdf
from services.suggestion_engine import ReviewSession, SuggestionStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyses", tags=["analyses"])


def _summary(analysis: Analysis) -> AnalysisSummary:
    return AnalysisSummary(
        id=analysis.id,
        overall_score=analysis.overall_score,
        job_title=analysis.job_posting.title,
        job_company=analysis.job_posting.company,
        created_at=analysis.created_at,
    )


def _detail(analysis: Analysis) -> AnalysisResponse:
    return AnalysisResponse(
        **_summary(analysis).model_dump(),
        resume_id=analysis.resume_id,
        job_description=analysis.job_posting.description,
        summary=analysis.summary,
        suggestions=analysis.suggestions,
        keywords_found=analysis.keywords_found,
        keywords_missing=analysis.keywords_missing,
    )


def _analysis_query(db: Session, user: User, analysis_id: str, for_update: bool = False):
    query = db.query(Analysis).filter(Analysis.id == analysis_id, Analysis.user_id == user.id)
    # Review transitions read-modify-write review_state; hold the row until commit
    return query.with_for_update() if for_update else query


def _get_analysis(db: Session, user: User, analysis_id: str, for_update: bool = False) -> Analysis:
    analysis = _analysis_query(db, user, analysis_id, for_update).first()
    if analysis is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return analysis


def _load_session(analysis: Analysis) -> ReviewSession:
    suggestions = [Suggestion.model_validate(s) for s in analysis.suggestions]
    if analysis.review_state:
        return ReviewSession.from_state(analysis.overall_score, suggestions, analysis.review_state)
    return ReviewSession.start(
        analysis.overall_score,
        suggestions,
        resume_data=analysis.resume_data,
        resume_text=analysis.resume_text,
    )


def _save_session(db: Session, analysis: Analysis, session: ReviewSession) -> None:
    analysis.review_state = session.to_state()
    db.commit()


def _review(analysis: Analysis, session: ReviewSession) -> ReviewResponse:
    return ReviewResponse(
        analysis_id=analysis.id,
        base_score=session.base_score,
        current_score=session.current_score,
        score_delta=session.current_score - session.base_score,
        is_structured=session.is_structured,
        resume_data=session.document,
        resume_text=session.text,
        active=session.active_suggestions,
        accepted=session.accepted_suggestions,
        dismissed=session.dismissed_suggestions,
        selected_id=session.selected_id,
        can_export=bool(session.accepted),
    )


def _lookup(session: ReviewSession, suggestion_id: str) -> Suggestion:
    try:
        return session.get(suggestion_id)
    except UnknownSuggestionError:
        raise HTTPException(status_code=404, detail="Suggestion not found")


@router.post("", response_model=AnalysisResponse, status_code=201)
async def create_analysis(
    req: CreateAnalysisRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    resume = db.query(Resume).filter(Resume.user_id == current_user.id).first()
    if resume is None or not req.job_description.strip():
        raise HTTPException(
            status_code=400, detail="Please save a resume and enter a job description"
        )

    try:
        result = await resume_analyzer.analyze(
            resume.extracted_text, req.job_description, resume.structured_data
        )
    except AnalysisError as e:
        logger.error("Analysis for user %s failed: %s", current_user.id, e)
        raise HTTPException(status_code=502, detail="Analysis failed")

    job_posting = JobPosting(
        user_id=current_user.id,
        title=req.title.strip() or "Untitled Position",
        company=req.company.strip() or None,
        description=req.job_description,
    )
    db.add(job_posting)
    db.flush()

    analysis = Analysis(
        user_id=current_user.id,
        resume_id=resume.id,
        job_posting_id=job_posting.id,
        overall_score=result.overall_score,
        suggestions=[s.model_dump() for s in result.suggestions],
        keywords_found=[k.model_dump() for k in result.keywords_found],
        keywords_missing=[k.model_dump() for k in result.keywords_missing],
        summary=result.summary,
        resume_text=resume.extracted_text,
        resume_data=resume.structured_data,
    )
    db.add(analysis)
    db.commit()
    db.refresh(analysis)
    logger.info("Created analysis %s (score %d)", analysis.id, analysis.overall_score)
    return _detail(analysis)


@router.get("", response_model=list[AnalysisSummary])
def list_analyses(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    analyses = (
        db.query(Analysis)
        .filter(Analysis.user_id == current_user.id)
        .order_by(Analysis.created_at.desc())
        .all()
    )
    return [_summary(a) for a in analyses]


@router.get("/{analysis_id}", response_model=AnalysisResponse)
def get_analysis(
    analysis_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _detail(_get_analysis(db, current_user, analysis_id))


@router.get("/{analysis_id}/review", response_model=ReviewResponse)
def get_review(
    analysis_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysis = _get_analysis(db, current_user, analysis_id)
    return _review(analysis, _load_session(analysis))


@router.post("/{analysis_id}/review/reset", response_model=ReviewResponse)
def reset_review(
    analysis_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysis = _get_analysis(db, current_user, analysis_id, for_update=True)
    analysis.review_state = None
    db.commit()
    return _review(analysis, _load_session(analysis))


@router.post("/{analysis_id}/suggestions/{suggestion_id}/accept", response_model=ReviewResponse)
def accept_suggestion(
    analysis_id: str,
    suggestion_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysis = _get_analysis(db, current_user, analysis_id, for_update=True)
    session = _load_session(analysis)
    suggestion = _lookup(session, suggestion_id)
    if session.status(suggestion_id) == SuggestionStatus.DISMISSED:
        raise HTTPException(status_code=409, detail="Suggestion was dismissed")

    try:
        session = session.accept(suggestion)
    except FieldPathError as e:
        logger.warning("Could not apply suggestion %s: %s", suggestion_id, e)
        raise HTTPException(status_code=422, detail=str(e))

    _save_session(db, analysis, session)
    logger.info("Accepted suggestion %s on analysis %s", suggestion_id, analysis_id)
    return _review(analysis, session)


@router.post("/{analysis_id}/suggestions/{suggestion_id}/dismiss", response_model=ReviewResponse)
def dismiss_suggestion(
    analysis_id: str,
    suggestion_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysis = _get_analysis(db, current_user, analysis_id, for_update=True)
    session = _load_session(analysis)
    _lookup(session, suggestion_id)
    if session.status(suggestion_id) == SuggestionStatus.ACCEPTED:
        raise HTTPException(status_code=409, detail="Suggestion is applied; undo it first")

    session = session.dismiss(suggestion_id)
    _save_session(db, analysis, session)
    return _review(analysis, session)


@router.post("/{analysis_id}/suggestions/{suggestion_id}/undo", response_model=ReviewResponse)
def undo_suggestion(
    analysis_id: str,
    suggestion_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysis = _get_analysis(db, current_user, analysis_id, for_update=True)
    session = _load_session(analysis)
    suggestion = _lookup(session, suggestion_id)
    if session.status(suggestion_id) != SuggestionStatus.ACCEPTED:
        raise HTTPException(status_code=409, detail="Suggestion is not applied")

    try:
        session = session.undo(suggestion)
    except FieldPathError as e:
        logger.warning("Could not revert suggestion %s: %s", suggestion_id, e)
        raise HTTPException(status_code=422, detail=str(e))

    _save_session(db, analysis, session)
    logger.info("Reverted suggestion %s on analysis %s", suggestion_id, analysis_id)
    return _review(analysis, session)


@router.post("/{analysis_id}/suggestions/{suggestion_id}/select", response_model=ReviewResponse)
def select_suggestion(
    analysis_id: str,
    suggestion_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysis = _get_analysis(db, current_user, analysis_id, for_update=True)
    session = _load_session(analysis)
    _lookup(session, suggestion_id)

    session = session.select(suggestion_id)
    _save_session(db, analysis, session)
    return _review(analysis, session)


@router.get("/{analysis_id}/export")
def export_resume(
    analysis_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    analysis = _get_analysis(db, current_user, analysis_id)
    session = _load_session(analysis)
    if not session.accepted:
        raise HTTPException(status_code=409, detail="Apply at least one suggestion before exporting")

    pdf = render_resume_pdf(session.document, session.text)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
