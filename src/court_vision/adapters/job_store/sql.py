"""SQLAlchemy job store implementation."""

from collections.abc import Callable, Collection
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from court_vision.adapters.job_store.base import (
    JobStore,
    conflict_for,
    source_statuses,
    status_changes,
)
from court_vision.db.models import VideoJobModel
from court_vision.domain.enums import ErrorKind, JobStatus
from court_vision.domain.errors import JobNotFoundError, StoreError
from court_vision.domain.models import VideoJob
from court_vision.logging import get_logger

logger = get_logger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; stored values are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def to_domain(row: VideoJobModel) -> VideoJob:
    """Convert an ORM row to a domain VideoJob."""
    return VideoJob(
        id=row.id,
        source_ref=row.source_ref,
        status=JobStatus(row.status),
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
        analyzed_at=_aware(row.analyzed_at),
        analysis_started_at=_aware(row.analysis_started_at),
        analysis_artifact_ref=row.analysis_artifact_ref,
        last_error=row.last_error,
        last_error_kind=ErrorKind(row.last_error_kind) if row.last_error_kind else None,
        analysis_attempts=row.analysis_attempts or 0,
        metadata=dict(row.metadata_ or {}),
    )


class SqlJobStore(JobStore):
    """Job store backed by the video_jobs table.

    Status changes are issued as a single conditional UPDATE; the affected
    row count decides between success and conflict, so two workers racing
    on the same job cannot both win.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        if session_factory is None:
            from court_vision.db.session import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    def create(self, source_ref: str, metadata: dict[str, Any] | None = None) -> UUID:
        job_id = uuid4()
        now = datetime.now(UTC)
        try:
            with self._session_factory() as session, session.begin():
                session.add(
                    VideoJobModel(
                        id=job_id,
                        source_ref=source_ref,
                        status=JobStatus.UPLOADED.value,
                        analysis_attempts=0,
                        metadata_=metadata or {},
                        created_at=now,
                    )
                )
        except SQLAlchemyError as e:
            logger.error("job_create_failed", source_ref=source_ref, error=str(e))
            raise StoreError(f"Failed to create video job: {e}") from e

        logger.info("job_created", video_job_id=str(job_id), source_ref=source_ref)
        return job_id

    def get(self, job_id: UUID) -> VideoJob:
        try:
            with self._session_factory() as session:
                row = session.get(VideoJobModel, job_id)
                if row is None:
                    raise JobNotFoundError(job_id)
                return to_domain(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load video job {job_id}: {e}") from e

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

        if status == JobStatus.ANALYZING:
            values["analysis_attempts"] = VideoJobModel.analysis_attempts + 1
        elif status == JobStatus.ANALYZED:
            values["analyzed_at"] = func.coalesce(VideoJobModel.analyzed_at, now)

        stmt = update(VideoJobModel).where(
            VideoJobModel.id == job_id,
            VideoJobModel.status.in_([s.value for s in sources]),
        )
        if expected_attempts is not None:
            stmt = stmt.where(VideoJobModel.analysis_attempts == expected_attempts)
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        try:
            with self._session_factory() as session, session.begin():
                result = session.execute(stmt)
                row = session.get(VideoJobModel, job_id)
                if row is None:
                    raise JobNotFoundError(job_id)
                job = to_domain(row)
                if result.rowcount == 0:
                    raise conflict_for(job, status)
        except SQLAlchemyError as e:
            logger.error(
                "job_status_update_failed",
                video_job_id=str(job_id),
                status=str(status),
                error=str(e),
            )
            raise StoreError(f"Failed to update video job {job_id}: {e}") from e

        logger.info(
            "job_status_updated",
            video_job_id=str(job_id),
            status=str(status),
            attempts=job.analysis_attempts,
        )
        return job

    def list_jobs(self, status: JobStatus | None = None, limit: int = 50) -> list[VideoJob]:
        stmt = select(VideoJobModel).order_by(VideoJobModel.created_at.desc()).limit(limit)
        if status is not None:
            stmt = stmt.where(VideoJobModel.status == status.value)
        try:
            with self._session_factory() as session:
                return [to_domain(row) for row in session.scalars(stmt)]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list video jobs: {e}") from e
