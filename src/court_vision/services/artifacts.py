"""Analysis artifact storage."""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from court_vision.adapters.storage.base import BlobStore
from court_vision.domain.errors import StoreError
from court_vision.domain.models import AnalysisSummary, AnnotationPayload
from court_vision.logging import get_logger

logger = get_logger(__name__)

ANALYSIS_PREFIX = "analysis"


def summary_key(job_id: UUID) -> str:
    return f"{ANALYSIS_PREFIX}/{job_id}/summary.json"


def annotations_key(job_id: UUID) -> str:
    return f"{ANALYSIS_PREFIX}/{job_id}/annotations.json"


@dataclass
class SummaryEnvelope:
    """A stored summary plus the attempt that produced it."""

    job_id: UUID
    attempt: int
    generated_at: datetime
    model: str | None
    summary: AnalysisSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": str(self.job_id),
            "attempt": self.attempt,
            "generated_at": self.generated_at.isoformat(),
            "model": self.model,
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SummaryEnvelope":
        return cls(
            job_id=UUID(data["job_id"]),
            attempt=int(data["attempt"]),
            generated_at=datetime.fromisoformat(data["generated_at"]),
            model=data.get("model"),
            summary=AnalysisSummary.from_dict(data["summary"]),
        )


class ArtifactStore:
    """Stores derived JSON artifacts for a job under analysis/{job_id}/.

    Keys depend only on the job id, so re-analysis overwrites the previous
    artifacts instead of leaving orphans behind.
    """

    def __init__(self, blob_store: BlobStore) -> None:
        self.blob_store = blob_store

    def _put_json(self, key: str, data: dict[str, Any]) -> str:
        body = json.dumps(data, indent=2).encode("utf-8")
        return self.blob_store.put(key, body, content_type="application/json")

    def _get_json(self, key: str) -> dict[str, Any]:
        raw = self.blob_store.get(key)
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StoreError(f"Stored artifact {key} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Stored artifact {key} is not a JSON object")
        return data

    def put_summary(
        self,
        job_id: UUID,
        attempt: int,
        summary: AnalysisSummary,
        model: str | None = None,
    ) -> str:
        """Write the summary envelope and return its ref."""
        envelope = SummaryEnvelope(
            job_id=job_id,
            attempt=attempt,
            generated_at=datetime.now(UTC),
            model=model,
            summary=summary,
        )
        ref = self._put_json(summary_key(job_id), envelope.to_dict())
        logger.info("summary_artifact_written", video_job_id=str(job_id), attempt=attempt, ref=ref)
        return ref

    def get_summary_envelope(self, job_id: UUID) -> SummaryEnvelope:
        """Read the stored summary envelope.

        Raises:
            ArtifactNotFoundError: If no summary has been stored
            StoreError: If the stored object is unreadable
        """
        key = summary_key(job_id)
        data = self._get_json(key)
        try:
            return SummaryEnvelope.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Stored artifact {key} has an unexpected shape: {e}") from e

    def find_summary_envelope(self, job_id: UUID) -> SummaryEnvelope | None:
        """Read the stored summary envelope, or None if there is none."""
        if not self.blob_store.exists(summary_key(job_id)):
            return None
        return self.get_summary_envelope(job_id)

    def summary_ref(self, job_id: UUID) -> str:
        return self.blob_store.ref_for(summary_key(job_id))

    def put_annotations(self, job_id: UUID, payload: AnnotationPayload) -> str:
        """Write the raw annotation payload and return its ref."""
        ref = self._put_json(annotations_key(job_id), payload.to_dict())
        logger.info(
            "annotations_artifact_written",
            video_job_id=str(job_id),
            label_count=len(payload.labels),
        )
        return ref

    def get_annotations(self, job_id: UUID) -> AnnotationPayload:
        """Read the stored annotation payload.

        Raises:
            ArtifactNotFoundError: If no annotations have been stored
        """
        return AnnotationPayload.from_dict(self._get_json(annotations_key(job_id)))
