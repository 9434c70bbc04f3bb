"""Base interface for video job stores."""

from abc import ABC, abstractmethod
from collections.abc import Collection
from datetime import datetime
from typing import Any
from uuid import UUID

from court_vision.domain.enums import ErrorKind, JobStatus, can_transition
from court_vision.domain.errors import JobConflictError
from court_vision.domain.models import VideoJob

UPDATABLE_FIELDS = frozenset({"analysis_artifact_ref", "last_error", "last_error_kind"})


class JobStore(ABC):
    """Abstract base class for video job persistence.

    `update_status` is a conditional write: it only succeeds when the job's
    current status is a legal source for the target status (and matches
    `expected` / `expected_attempts` when given). Callers rely on this
    being atomic per job id; it is the only concurrency control the
    analysis pipeline uses.

    Implementations:
    - SqlJobStore: SQLAlchemy-backed store
    - InMemoryJobStore: Process-local store for tests and stub mode
    """

    @abstractmethod
    def create(self, source_ref: str, metadata: dict[str, Any] | None = None) -> UUID:
        """Create a job in UPLOADED status and return its id."""
        ...

    @abstractmethod
    def get(self, job_id: UUID) -> VideoJob:
        """Load a job.

        Raises:
            JobNotFoundError: If no job has this id
        """
        ...

    @abstractmethod
    def update_status(
        self,
        job_id: UUID,
        status: JobStatus,
        *,
        expected: Collection[JobStatus] | None = None,
        expected_attempts: int | None = None,
        **fields: Any,
    ) -> VideoJob:
        """Atomically move a job to `status` and apply `fields`.

        Args:
            job_id: Job to update
            status: Target status
            expected: Statuses the job must currently be in (narrows the
                legal source statuses for `status`)
            expected_attempts: Required current value of analysis_attempts
            **fields: analysis_artifact_ref, last_error, last_error_kind

        Returns:
            The updated job

        Raises:
            JobNotFoundError: If no job has this id
            JobConflictError: If the job's current state does not match
            StoreError: If the backing store fails
        """
        ...

    @abstractmethod
    def list_jobs(self, status: JobStatus | None = None, limit: int = 50) -> list[VideoJob]:
        """List jobs, newest first."""
        ...


def source_statuses(
    status: JobStatus, expected: Collection[JobStatus] | None
) -> frozenset[JobStatus]:
    """Statuses a job may currently be in for a move to `status`."""
    sources = frozenset(s for s in JobStatus if can_transition(s, status))
    if expected is not None:
        sources = sources & frozenset(expected)
    return sources


def status_changes(status: JobStatus, fields: dict[str, Any], now: datetime) -> dict[str, Any]:
    """Column values for moving a job to `status`.

    Keeps analysis_artifact_ref set only for ANALYZED and last_error set
    only for FAILED. Attempt counting and the set-once analyzed_at are
    left to the store, since they depend on the stored row.
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown job fields: {sorted(unknown)}")

    values: dict[str, Any] = {"status": status.value, "updated_at": now}

    if status == JobStatus.ANALYZING:
        values.update(
            analysis_artifact_ref=None,
            last_error=None,
            last_error_kind=None,
            analysis_started_at=now,
        )
    elif status == JobStatus.ANALYZED:
        if not fields.get("analysis_artifact_ref"):
            raise ValueError("analysis_artifact_ref is required for an analyzed job")
        values.update(
            analysis_artifact_ref=fields["analysis_artifact_ref"],
            last_error=None,
            last_error_kind=None,
        )
    elif status == JobStatus.FAILED:
        if not fields.get("last_error"):
            raise ValueError("last_error is required for a failed job")
        kind = fields.get("last_error_kind") or ErrorKind.UPSTREAM_ERROR
        values.update(
            analysis_artifact_ref=None,
            last_error=fields["last_error"],
            last_error_kind=str(kind),
        )
    else:
        raise ValueError(f"Jobs cannot be moved back to {status}")

    return values


def conflict_for(job: VideoJob, status: JobStatus) -> JobConflictError:
    """Build the conflict error for a rejected transition."""
    return JobConflictError(
        f"Video job {job.id} is {job.status} (attempt {job.analysis_attempts}); "
        f"cannot move to {status}",
        job_id=job.id,
    )
