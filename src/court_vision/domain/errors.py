"""Error taxonomy for the analysis pipeline.

Every failure carries a stable `ErrorKind` so callers can branch on it
(retry on timeout, surface schema violations, ...) instead of parsing
message strings.
"""

from collections.abc import Sequence
from uuid import UUID

from court_vision.domain.enums import ErrorKind


class CourtVisionError(Exception):
    """Base class for all pipeline errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(CourtVisionError):
    """Raised when a referenced record or object does not exist."""

    kind = ErrorKind.NOT_FOUND


class JobNotFoundError(NotFoundError):
    """Raised when a video job does not exist."""

    def __init__(self, job_id: UUID | str) -> None:
        super().__init__(f"Video job not found: {job_id}")
        self.job_id = job_id


class ArtifactNotFoundError(NotFoundError):
    """Raised when a blob key has no stored object."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Artifact not found: {key}")
        self.key = key


class JobConflictError(CourtVisionError):
    """Raised when a job is not in a state that allows the requested change."""

    kind = ErrorKind.CONFLICT

    def __init__(self, message: str, job_id: UUID | str | None = None) -> None:
        super().__init__(message)
        self.job_id = job_id


class AnalysisTimeoutError(CourtVisionError):
    """Raised when the annotation operation exceeds its wait bound."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, timeout_seconds: float | None = None) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds


class UpstreamError(CourtVisionError):
    """Raised when the annotation or language-model service fails."""

    kind = ErrorKind.UPSTREAM_ERROR


class MalformedResponseError(CourtVisionError):
    """Raised when model output cannot be parsed as a JSON object."""

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class SchemaViolationError(CourtVisionError):
    """Raised when parsed model output is missing required summary keys."""

    kind = ErrorKind.SCHEMA_VIOLATION

    def __init__(self, message: str, raw_text: str, missing_keys: Sequence[str]) -> None:
        super().__init__(message)
        self.raw_text = raw_text
        self.missing_keys = list(missing_keys)


class StoreError(CourtVisionError):
    """Raised when the job database or blob store fails."""

    kind = ErrorKind.STORE_ERROR
