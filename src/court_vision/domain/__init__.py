"""Domain models and business logic."""

from court_vision.domain.enums import ALLOWED_TRANSITIONS, ErrorKind, JobStatus, can_transition
from court_vision.domain.errors import (
    AnalysisTimeoutError,
    ArtifactNotFoundError,
    CourtVisionError,
    JobConflictError,
    JobNotFoundError,
    MalformedResponseError,
    NotFoundError,
    SchemaViolationError,
    StoreError,
    UpstreamError,
)
from court_vision.domain.models import (
    REQUIRED_SUMMARY_KEYS,
    AnalysisResult,
    AnalysisSummary,
    AnnotationPayload,
    LabelAnnotation,
    Segment,
    VideoJob,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "REQUIRED_SUMMARY_KEYS",
    "AnalysisResult",
    "AnalysisSummary",
    "AnalysisTimeoutError",
    "AnnotationPayload",
    "ArtifactNotFoundError",
    "CourtVisionError",
    "ErrorKind",
    "JobConflictError",
    "JobNotFoundError",
    "JobStatus",
    "LabelAnnotation",
    "MalformedResponseError",
    "NotFoundError",
    "SchemaViolationError",
    "Segment",
    "StoreError",
    "UpstreamError",
    "VideoJob",
    "can_transition",
]
