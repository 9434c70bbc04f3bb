"""Domain enumerations."""

from enum import StrEnum


class JobStatus(StrEnum):
    """Status of a video analysis job."""

    UPLOADED = "uploaded"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether an analysis run can end in this status."""
        return self in (JobStatus.ANALYZED, JobStatus.FAILED)


class ErrorKind(StrEnum):
    """Stable failure categories reported to callers."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"
    UPSTREAM_ERROR = "upstream_error"
    MALFORMED_RESPONSE = "malformed_response"
    SCHEMA_VIOLATION = "schema_violation"
    STORE_ERROR = "store_error"


# Target status -> statuses a job may be in when moving to it.
# ANALYZING -> ANALYZING only happens when a stale claim is taken over.
ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.UPLOADED: frozenset(),
    JobStatus.ANALYZING: frozenset(
        {JobStatus.UPLOADED, JobStatus.ANALYZING, JobStatus.ANALYZED, JobStatus.FAILED}
    ),
    JobStatus.ANALYZED: frozenset({JobStatus.ANALYZING}),
    JobStatus.FAILED: frozenset({JobStatus.ANALYZING}),
}


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    """Check whether a job may move from `current` to `target`."""
    return current in ALLOWED_TRANSITIONS[target]
