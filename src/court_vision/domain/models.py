"""Domain models - pure Python classes independent of database."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from court_vision.domain.enums import ErrorKind, JobStatus

# Top-level keys every generated summary must carry.
REQUIRED_SUMMARY_KEYS: tuple[str, ...] = (
    "shotZones",
    "playStyle",
    "defense",
    "rimTendencies",
    "hotSpots",
    "handDominance",
)


@dataclass
class VideoJob:
    """One tracked video-analysis request."""

    id: UUID
    source_ref: str
    status: JobStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    analyzed_at: datetime | None = None
    analysis_started_at: datetime | None = None
    analysis_artifact_ref: str | None = None
    last_error: str | None = None
    last_error_kind: ErrorKind | None = None
    analysis_attempts: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API and CLI output."""
        return {
            "id": str(self.id),
            "source_ref": self.source_ref,
            "status": str(self.status),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "analyzed_at": self.analyzed_at.isoformat() if self.analyzed_at else None,
            "analysis_started_at": (
                self.analysis_started_at.isoformat() if self.analysis_started_at else None
            ),
            "analysis_artifact_ref": self.analysis_artifact_ref,
            "last_error": self.last_error,
            "last_error_kind": str(self.last_error_kind) if self.last_error_kind else None,
            "analysis_attempts": self.analysis_attempts,
            "metadata": self.metadata,
        }


@dataclass
class Segment:
    """A time range in which a label was detected."""

    start_seconds: float
    end_seconds: float


@dataclass
class LabelAnnotation:
    """A detected label and the segments it appears in."""

    description: str
    segments: list[Segment] = field(default_factory=list)
    confidence: float | None = None

    @property
    def segment_count(self) -> int:
        return len(self.segments)


@dataclass
class AnnotationPayload:
    """Raw label/segment data returned by the annotation service.

    Labels keep the order the service returned them in.
    """

    labels: list[LabelAnnotation] = field(default_factory=list)
    shot_count: int = 0
    text_snippets: list[str] = field(default_factory=list)
    object_descriptions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "labels": [
                {
                    "description": label.description,
                    "confidence": label.confidence,
                    "segments": [
                        {"start_seconds": s.start_seconds, "end_seconds": s.end_seconds}
                        for s in label.segments
                    ],
                }
                for label in self.labels
            ],
            "shot_count": self.shot_count,
            "text_snippets": self.text_snippets,
            "object_descriptions": self.object_descriptions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnnotationPayload":
        labels = [
            LabelAnnotation(
                description=item.get("description", ""),
                confidence=item.get("confidence"),
                segments=[
                    Segment(
                        start_seconds=float(s.get("start_seconds", 0.0)),
                        end_seconds=float(s.get("end_seconds", 0.0)),
                    )
                    for s in item.get("segments") or []
                ],
            )
            for item in data.get("labels") or []
        ]
        return cls(
            labels=labels,
            shot_count=int(data.get("shot_count", 0)),
            text_snippets=list(data.get("text_snippets") or []),
            object_descriptions=list(data.get("object_descriptions") or []),
        )


@dataclass
class AnalysisSummary:
    """Fixed-schema feature summary produced by the language model.

    Values are model-generated estimates formatted as percentage strings
    (distance string for avgDefDistance); only key presence is checked.
    """

    shot_zones: dict[str, Any]
    play_style: dict[str, Any]
    defense: dict[str, Any]
    rim_tendencies: dict[str, Any]
    hot_spots: list[Any]
    hand_dominance: dict[str, Any]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisSummary":
        return cls(
            shot_zones=data["shotZones"],
            play_style=data["playStyle"],
            defense=data["defense"],
            rim_tendencies=data["rimTendencies"],
            hot_spots=data["hotSpots"],
            hand_dominance=data["handDominance"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "shotZones": self.shot_zones,
            "playStyle": self.play_style,
            "defense": self.defense,
            "rimTendencies": self.rim_tendencies,
            "hotSpots": self.hot_spots,
            "handDominance": self.hand_dominance,
        }


@dataclass
class AnalysisResult:
    """Outcome of one analyze() call."""

    job_id: UUID
    status: JobStatus
    artifact_ref: str | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    resumed: bool = False
    error: Exception | None = field(default=None, repr=False, compare=False)

    @property
    def success(self) -> bool:
        return self.status == JobStatus.ANALYZED

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "video_job_id": str(self.job_id),
            "status": str(self.status),
            "artifact_ref": self.artifact_ref,
            "error_kind": str(self.error_kind) if self.error_kind else None,
            "error": self.error_message,
            "resumed": self.resumed,
        }
