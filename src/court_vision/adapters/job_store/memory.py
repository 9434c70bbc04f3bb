"""In-memory job store for tests and stub mode."""

import copy
import threading
from collections.abc import Collection
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from court_vision.adapters.job_store.base import (
    JobStore,
    conflict_for,
    source_statuses,
    status_changes,
)
from court_vision.domain.enums import ErrorKind, JobStatus
from court_vision.domain.errors import JobNotFoundError
from court_vision.domain.models import VideoJob
from court_vision.logging import get_logger

logger = get_logger(__name__)


class InMemoryJobStore(JobStore):
    """Process-local job store.

    A single lock guards every read-check-write, which gives the same
    per-job atomicity as the SQL store's conditional UPDATE.
    """

    def __init__(self) -> None:
        self._jobs: dict[UUID, VideoJob] = {}
        self._lock = threading.Lock()

    def create(self, source_ref: str, metadata: dict[str, Any] | None = None) -> UUID:
        job = VideoJob(
            id=uuid4(),
            source_ref=source_ref,
            status=JobStatus.UPLOADED,
            created_at=datetime.now(UTC),
            metadata=copy.deepcopy(metadata or {}),
        )
        with self._lock:
            self._jobs[job.id] = job
        logger.info("job_created", video_job_id=str(job.id), source_ref=source_ref)
        return job.id

    def get(self, job_id: UUID) -> VideoJob:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            return copy.deepcopy(job)

    def update_status(
        self,
        job_id: UUID,
        status: JobStatus,
        *,
        expected: Collection[JobStatus] | None = None,
        expected_attempts: int | None = None,
        **fields: Any,
    ) -> VideoJob:
        now = datetime.now(UTC)
        values = status_changes(status, fields, now)
        sources = source_statuses(status, expected)

        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            if job.status not in sources or (
                expected_attempts is not None and job.analysis_attempts != expected_attempts
            ):
                raise conflict_for(copy.deepcopy(job), status)

            values["status"] = JobStatus(values["status"])
            if values.get("last_error_kind"):
                values["last_error_kind"] = ErrorKind(values["last_error_kind"])
            if status == JobStatus.ANALYZING:
                values["analysis_attempts"] = job.analysis_attempts + 1
            elif status == JobStatus.ANALYZED:
                values["analyzed_at"] = job.analyzed_at or now

            updated = replace(job, **values)
            self._jobs[job_id] = updated
            result = copy.deepcopy(updated)

        logger.info(
            "job_status_updated",
            video_job_id=str(job_id),
            status=str(status),
            attempts=result.analysis_attempts,
        )
        return result

    def list_jobs(self, status: JobStatus | None = None, limit: int = 50) -> list[VideoJob]:
        with self._lock:
            jobs = [
                copy.deepcopy(job)
                for job in self._jobs.values()
                if status is None or job.status == status
            ]
        jobs.sort(key=lambda j: j.created_at or datetime.min.replace(tzinfo=UTC), reverse=True)
        return jobs[:limit]
