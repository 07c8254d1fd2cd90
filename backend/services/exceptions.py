"""Domain exceptions raised by the service layer.

Routers translate these into HTTP errors; services never build responses.
"""


class JoblyError(Exception):
    """Base class for all service-level errors."""


class AnalysisError(JoblyError):
    """The AI provider was unavailable or returned an unusable payload."""


class ExtractionError(JoblyError):
    """No text could be extracted from an uploaded resume file."""


class FieldPathError(JoblyError, ValueError):
    """A field path is malformed or does not address a scalar in the document."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid field path '{path}': {reason}")


class UnknownSuggestionError(JoblyError, KeyError):
    """A suggestion id is not part of the review session."""

    def __init__(self, suggestion_id: str):
        self.suggestion_id = suggestion_id
        super().__init__(suggestion_id)

    def __str__(self) -> str:
        return f"Unknown suggestion: {self.suggestion_id}"
