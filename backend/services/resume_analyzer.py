"""Resume analysis: one Gemini call, validated against the AnalysisResult schema.

Pipeline:
1. Build the analysis prompt (embedding the structured document if any)
2. Gemini call returning JSON
3. Sanitize suggestions (unique ids, field paths that resolve in the resume)
4. Validate into AnalysisResult
"""

import logging

from pydantic import ValidationError

from models.schemas.analysis import AnalysisResult
from services import gemini_client, prompt_builder
from services.exceptions import AnalysisError, FieldPathError
from services.field_path import parse_field_path, read_field

logger = logging.getLogger(__name__)


def _sanitize_suggestions(raw: list, resume_data: dict | None) -> list[dict]:
    """Make ids unique and drop field paths the engine could never apply.

    A path is kept only if it parses and resolves to a text field of
    ``resume_data``; flat resumes carry no paths at all.
    """
    cleaned = []
    seen: set[str] = set()
    for i, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            logger.warning("Skipping non-object suggestion: %r", item)
            continue
        item = dict(item)

        sid = str(item.get("id") or "").strip()
        if not sid or sid in seen:
            sid = f"s{i}"
            while sid in seen:
                sid += "_"
        item["id"] = sid
        seen.add(sid)

        path = item.get("path")
        if resume_data is None:
            item.pop("path", None)
        elif isinstance(path, str) and path.strip():
            try:
                read_field(resume_data, parse_field_path(path))
            except FieldPathError as e:
                logger.warning("Dropping path from suggestion %s: %s", sid, e)
                item["path"] = None
        cleaned.append(item)
    return cleaned


async def analyze(
    resume_text: str,
    job_description: str,
    resume_data: dict | None = None,
) -> AnalysisResult:
    """Run the AI analysis. Raises AnalysisError on any failure."""
    prompt = prompt_builder.build_analysis_prompt(resume_text, job_description, resume_data)
    data = await gemini_client.generate_json(prompt)
    if data is None:
        raise AnalysisError("AI analysis unavailable")

    data = dict(data)
    suggestions = data.get("suggestions") or []
    if not isinstance(suggestions, list):
        suggestions = []
    data["suggestions"] = _sanitize_suggestions(suggestions, resume_data)

    try:
        result = AnalysisResult.model_validate(data)
    except ValidationError as e:
        logger.error("AI analysis failed schema validation: %s", e)
        raise AnalysisError("AI analysis returned an invalid payload") from e

    logger.info(
        "Analysis complete: score=%d suggestions=%d missing_keywords=%d",
        result.overall_score, len(result.suggestions), len(result.keywords_missing),
    )
    return result
