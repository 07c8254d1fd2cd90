"""Suggestion review engine.

Holds the derived view of "base resume + suggestion list + user decisions"
for one analysis. ``ReviewSession`` is an immutable value: every transition
(accept / dismiss / undo / select) returns a new session and leaves the
previous one untouched, so callers can keep old revisions around or
persist the state between requests with ``to_state``/``from_state``.

Per suggestion the lifecycle is::

    Active --accept--> Accepted --undo--> Active
    Active --dismiss--> Dismissed   (terminal)
"""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from models.schemas.analysis import Suggestion
from services.exceptions import UnknownSuggestionError
from services.field_path import apply_change, read_field

logger = logging.getLogger(__name__)


class SuggestionStatus(str, Enum):
    ACTIVE = "active"
    ACCEPTED = "accepted"
    DISMISSED = "dismissed"


def compute_score(base_score: int, total_suggestions: int, accepted_count: int) -> int:
    """Spread the gap to 100 evenly over all suggestions.

    Pure function, rounds halves up. Returns ``base_score`` untouched when
    there are no suggestions.
    """
    if total_suggestions == 0:
        return base_score
    per_suggestion = (100 - base_score) / total_suggestions
    return min(100, math.floor(base_score + per_suggestion * accepted_count + 0.5))


@dataclass(frozen=True)
class AppliedEdit:
    """What an accepted suggestion changed, kept so undo can reverse it.

    Flat text: ``start``/``end`` delimit the inserted suggested text.
    Structured: ``previous`` is the field value that was overwritten.
    """
    start: int | None = None
    end: int | None = None
    previous: str | None = None

    def shifted(self, delta: int) -> "AppliedEdit":
        return replace(self, start=self.start + delta, end=self.end + delta)


def _replace_span(text: str, start: int, end: int, value: str) -> str:
    return text[:start] + value + text[end:]


def _reindex_spans(
    applied: dict[str, AppliedEdit], start: int, old_end: int, delta: int
) -> dict[str, AppliedEdit]:
    """Keep recorded spans in step with a replacement of text[start:old_end].

    Spans after the edit move by ``delta``; spans overlapping it can no
    longer be trusted and lose their offsets.
    """
    result = {}
    for sid, edit in applied.items():
        if edit.start is None:
            result[sid] = edit
        elif edit.start >= old_end:
            result[sid] = edit.shifted(delta)
        elif edit.end <= start:
            result[sid] = edit
        else:
            result[sid] = AppliedEdit()
    return result


@dataclass(frozen=True)
class ReviewSession:
    base_score: int
    suggestions: tuple[Suggestion, ...]
    document: dict | None = None
    text: str = ""
    accepted: frozenset[str] = frozenset()
    dismissed: frozenset[str] = frozenset()
    selected_id: str | None = None
    applied: dict[str, AppliedEdit] = field(default_factory=dict)

    @classmethod
    def start(
        cls,
        base_score: int,
        suggestions: list[Suggestion],
        resume_data: dict | None = None,
        resume_text: str = "",
    ) -> "ReviewSession":
        return cls(
            base_score=base_score,
            suggestions=tuple(suggestions),
            document=resume_data,
            text="" if resume_data is not None else (resume_text or ""),
        )

    @property
    def is_structured(self) -> bool:
        return self.document is not None

    # -- derived views ----------------------------------------------------

    def get(self, suggestion_id: str) -> Suggestion:
        for s in self.suggestions:
            if s.id == suggestion_id:
                return s
        raise UnknownSuggestionError(suggestion_id)

    def status(self, suggestion_id: str) -> SuggestionStatus:
        if suggestion_id in self.accepted:
            return SuggestionStatus.ACCEPTED
        if suggestion_id in self.dismissed:
            return SuggestionStatus.DISMISSED
        return SuggestionStatus.ACTIVE

    @property
    def active_suggestions(self) -> list[Suggestion]:
        return [
            s for s in self.suggestions
            if s.id not in self.accepted and s.id not in self.dismissed
        ]

    @property
    def accepted_suggestions(self) -> list[Suggestion]:
        return [s for s in self.suggestions if s.id in self.accepted]

    @property
    def dismissed_suggestions(self) -> list[Suggestion]:
        return [s for s in self.suggestions if s.id in self.dismissed]

    @property
    def current_score(self) -> int:
        return compute_score(self.base_score, len(self.suggestions), len(self.accepted))

    # -- transitions ------------------------------------------------------

    def accept(self, suggestion: Suggestion) -> "ReviewSession":
        if suggestion.id in self.accepted:
            return replace(self, selected_id=None)

        document, text, applied = self.document, self.text, self.applied

        if self.is_structured:
            if suggestion.path_tokens and suggestion.suggested_text is not None:
                previous = read_field(document, suggestion.path_tokens)
                document = apply_change(document, suggestion.path_tokens, suggestion.suggested_text)
                applied = {**applied, suggestion.id: AppliedEdit(previous=previous)}
        elif suggestion.original_text and suggestion.suggested_text is not None:
            start = text.find(suggestion.original_text)
            if start == -1:
                logger.debug("Original text of %s not found, resume unchanged", suggestion.id)
            else:
                old_end = start + len(suggestion.original_text)
                text = _replace_span(text, start, old_end, suggestion.suggested_text)
                delta = len(suggestion.suggested_text) - len(suggestion.original_text)
                applied = _reindex_spans(applied, start, old_end, delta)
                applied[suggestion.id] = AppliedEdit(
                    start=start, end=start + len(suggestion.suggested_text)
                )

        return replace(
            self,
            document=document,
            text=text,
            accepted=self.accepted | {suggestion.id},
            selected_id=None,
            applied=applied,
        )

    def dismiss(self, suggestion_id: str) -> "ReviewSession":
        return replace(self, dismissed=self.dismissed | {suggestion_id}, selected_id=None)

    def undo(self, suggestion: Suggestion) -> "ReviewSession":
        if suggestion.id not in self.accepted:
            return self

        document, text = self.document, self.text
        applied = {k: v for k, v in self.applied.items() if k != suggestion.id}
        edit = self.applied.get(suggestion.id)

        if self.is_structured:
            restore = edit.previous if edit and edit.previous is not None else suggestion.original_text
            if suggestion.path_tokens and restore is not None:
                document = apply_change(document, suggestion.path_tokens, restore)
        elif suggestion.original_text and suggestion.suggested_text:
            start = None
            if (
                edit is not None
                and edit.start is not None
                and text[edit.start:edit.end] == suggestion.suggested_text
            ):
                start = edit.start
            else:
                found = text.find(suggestion.suggested_text)
                if found != -1:
                    start = found
            if start is not None:
                old_end = start + len(suggestion.suggested_text)
                text = _replace_span(text, start, old_end, suggestion.original_text)
                delta = len(suggestion.original_text) - len(suggestion.suggested_text)
                applied = _reindex_spans(applied, start, old_end, delta)

        return replace(
            self,
            document=document,
            text=text,
            accepted=self.accepted - {suggestion.id},
            applied=applied,
        )

    def select(self, suggestion_id: str | None) -> "ReviewSession":
        return replace(self, selected_id=suggestion_id)

    # -- persistence ------------------------------------------------------

    def to_state(self) -> dict[str, Any]:
        """JSON-serialisable snapshot of everything that is not base input."""
        return {
            "document": self.document,
            "text": self.text,
            "accepted": sorted(self.accepted),
            "dismissed": sorted(self.dismissed),
            "selected_id": self.selected_id,
            "applied": {
                sid: {"start": e.start, "end": e.end, "previous": e.previous}
                for sid, e in self.applied.items()
            },
        }

    @classmethod
    def from_state(
        cls, base_score: int, suggestions: list[Suggestion], state: dict[str, Any]
    ) -> "ReviewSession":
        return cls(
            base_score=base_score,
            suggestions=tuple(suggestions),
            document=state.get("document"),
            text=state.get("text") or "",
            accepted=frozenset(state.get("accepted", [])),
            dismissed=frozenset(state.get("dismissed", [])),
            selected_id=state.get("selected_id"),
            applied={
                sid: AppliedEdit(**edit) for sid, edit in state.get("applied", {}).items()
            },
        )
