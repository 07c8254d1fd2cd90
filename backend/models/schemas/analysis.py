"""AI analysis payload: score, suggestions and keyword lists.

This is the schema the provider's JSON output is validated against.
"""

import math
from typing import Literal

from pydantic import BaseModel, PrivateAttr, field_validator

from services.field_path import PathSegment, parse_field_path

SuggestionType = Literal[
    "add_keyword", "improve_wording", "add_section", "remove_content", "formatting"
]
Priority = Literal["high", "medium", "low"]
Importance = Literal["critical", "important", "nice-to-have"]


class Suggestion(BaseModel):
    """A single proposed edit.

    ``original_text``/``suggested_text`` drive literal replacement on flat
    resumes; ``path`` addresses one field of a structured resume. A
    suggestion with neither is informational only.
    """
    id: str
    type: SuggestionType
    title: str
    description: str = ""
    priority: Priority = "medium"
    original_text: str | None = None
    suggested_text: str | None = None
    section: str | None = None
    path: str | None = None

    _path_tokens: tuple[PathSegment, ...] | None = PrivateAttr(default=None)

    @field_validator("original_text", "suggested_text", "section", "path", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("path")
    @classmethod
    def _check_path(cls, v: str | None) -> str | None:
        if v is not None:
            parse_field_path(v)
        return v

    def model_post_init(self, __context) -> None:
        if self.path is not None:
            self._path_tokens = parse_field_path(self.path)

    @property
    def path_tokens(self) -> tuple[PathSegment, ...] | None:
        return self._path_tokens

    @property
    def is_actionable(self) -> bool:
        return bool(self.suggested_text and (self.path or self.original_text))


class KeywordFound(BaseModel):
    keyword: str
    context: str | None = None


class KeywordMissing(BaseModel):
    keyword: str
    importance: Importance = "important"
    suggestion: str = ""


class AnalysisResult(BaseModel):
    overall_score: int
    suggestions: list[Suggestion] = []
    keywords_found: list[KeywordFound] = []
    keywords_missing: list[KeywordMissing] = []
    summary: str = ""

    @field_validator("overall_score", mode="before")
    @classmethod
    def _clamp_score(cls, v):
        # The model sometimes answers "85" instead of 85
        if isinstance(v, str):
            try:
                v = float(v.strip())
            except ValueError:
                return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            if not math.isfinite(v):
                raise ValueError("overall_score must be a finite number")
            return min(100, max(0, int(round(v))))
        return v
