"""Video analysis pipeline.

Drives one job through annotation, summarisation and persistence:

1. Claim the job (conditional move to ANALYZING; the single-flight gate)
2. Submit the video to the annotation service and wait, bounded
3. Persist the raw annotations and generate the feature summary
4. Persist the summary artifact, then mark the job ANALYZED

Every run ends with the job ANALYZED or FAILED unless recording the
failure itself fails, in which case the job stays ANALYZING until a retry
takes over the stale claim. A run whose claim was taken over stops before
writing artifacts. No step is retried automatically.
"""

import asyncio
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from uuid import UUID

import structlog

from court_vision.adapters.annotation.base import AnnotationClient, OperationHandle
from court_vision.adapters.job_store.base import JobStore
from court_vision.config import settings
from court_vision.domain.enums import ErrorKind, JobStatus
from court_vision.domain.errors import (
    AnalysisTimeoutError,
    CourtVisionError,
    JobConflictError,
)
from court_vision.domain.models import AnalysisResult, VideoJob
from court_vision.logging import get_logger
from court_vision.services.artifacts import ArtifactStore, SummaryEnvelope
from court_vision.services.summary_generator import SummaryGenerator

logger = get_logger(__name__)


class AnalysisPipeline:
    """Orchestrates the analysis of a single video job."""

    def __init__(
        self,
        job_store: JobStore | None = None,
        artifact_store: ArtifactStore | None = None,
        annotator: AnnotationClient | None = None,
        generator: SummaryGenerator | None = None,
        annotation_timeout: float | None = None,
        stale_after: float | None = None,
        features: Sequence[str] | None = None,
    ) -> None:
        """Initialize the pipeline with its collaborators.

        Args:
            job_store: Job store (defaults to the configured store)
            artifact_store: Artifact store (defaults to one over the configured blob store)
            annotator: Annotation provider (defaults to the configured provider)
            generator: Summary generator (defaults to one over the configured LLM)
            annotation_timeout: Seconds to wait for annotation. Defaults to settings.
            stale_after: Age in seconds after which an ANALYZING claim may be
                taken over by a retry. Defaults to settings.
            features: Annotation features to request. Defaults to settings.
        """
        from court_vision.adapters import factory

        self.job_store = job_store or factory.get_job_store()
        self.artifact_store = artifact_store or ArtifactStore(factory.get_blob_store())
        self.annotator = annotator or factory.get_annotation_client()
        self.generator = generator or SummaryGenerator()
        if annotation_timeout is None:
            annotation_timeout = settings.annotation_timeout_seconds
        self.annotation_timeout = annotation_timeout
        self.stale_after = (
            settings.analysis_stale_after_seconds if stale_after is None else stale_after
        )
        self.features = list(features or settings.annotation_features)

        logger.info(
            "analysis_pipeline_initialized",
            annotator=self.annotator.name,
            llm=self.generator.llm.name,
            blob_store=self.artifact_store.blob_store.name,
        )

    async def analyze(self, job_id: UUID | str, *, retry: bool = False) -> AnalysisResult:
        """Analyze one job.

        Args:
            job_id: Job to analyze
            retry: Allow re-analysing an ANALYZED or FAILED job, or taking
                over a stale ANALYZING claim

        Returns:
            AnalysisResult with status ANALYZED and the artifact ref, or
            status FAILED with the error kind and message

        Raises:
            JobNotFoundError: If the job does not exist
            JobConflictError: If the job is being analyzed, or is already
                analyzed/failed and `retry` is False
        """
        job_id = UUID(str(job_id))
        with structlog.contextvars.bound_contextvars(video_job_id=str(job_id)):
            job = self.job_store.get(job_id)
            self._check_can_start(job, retry)

            # Conditional write: a concurrent caller that read the same
            # status/attempt loses here with JobConflictError.
            claimed = self.job_store.update_status(
                job_id,
                JobStatus.ANALYZING,
                expected={job.status},
                expected_attempts=job.analysis_attempts,
            )
            attempt = claimed.analysis_attempts
            logger.info(
                "analysis_started",
                attempt=attempt,
                previous_status=str(job.status),
                source_ref=job.source_ref,
            )

            try:
                envelope = self._resumable_artifact(job)
                if envelope is not None:
                    self._check_claim(job_id, attempt)
                    artifact_ref = self.artifact_store.put_summary(
                        job_id, attempt, envelope.summary, model=envelope.model
                    )
                    logger.info("analysis_resumed_from_artifact", previous_attempt=envelope.attempt)
                else:
                    artifact_ref = await self._annotate_and_summarize(
                        job_id, job.source_ref, attempt
                    )

                self.job_store.update_status(
                    job_id,
                    JobStatus.ANALYZED,
                    expected={JobStatus.ANALYZING},
                    expected_attempts=attempt,
                    analysis_artifact_ref=artifact_ref,
                )
            except asyncio.CancelledError:
                self._record_failure(
                    job_id, attempt, ErrorKind.TIMEOUT, "Analysis cancelled by caller"
                )
                raise
            except CourtVisionError as e:
                self._record_failure(job_id, attempt, e.kind, e.message)
                return AnalysisResult(
                    job_id=job_id,
                    status=JobStatus.FAILED,
                    error_kind=e.kind,
                    error_message=e.message,
                    error=e,
                )
            except Exception as e:
                self._record_failure(
                    job_id, attempt, ErrorKind.UPSTREAM_ERROR, f"Unexpected error: {e}"
                )
                raise

            logger.info("analysis_completed", attempt=attempt, artifact_ref=artifact_ref)
            return AnalysisResult(
                job_id=job_id,
                status=JobStatus.ANALYZED,
                artifact_ref=artifact_ref,
                resumed=envelope is not None,
            )

    def _check_can_start(self, job: VideoJob, retry: bool) -> None:
        """Reject runs that would duplicate or silently repeat an analysis."""
        if job.status == JobStatus.UPLOADED:
            return
        if job.status == JobStatus.ANALYZING:
            if retry and self._is_stale(job):
                logger.warning(
                    "analysis_taking_over_stale_claim",
                    attempt=job.analysis_attempts,
                    started_at=job.analysis_started_at.isoformat()
                    if job.analysis_started_at
                    else None,
                )
                return
            raise JobConflictError(f"Video job {job.id} is already being analyzed", job_id=job.id)
        if job.status.is_terminal and not retry:
            raise JobConflictError(
                f"Video job {job.id} is already {job.status}; retry to analyze it again",
                job_id=job.id,
            )

    def _is_stale(self, job: VideoJob) -> bool:
        if job.analysis_started_at is None:
            return True
        age = datetime.now(UTC) - job.analysis_started_at
        return age > timedelta(seconds=self.stale_after)

    def _resumable_artifact(self, job: VideoJob) -> SummaryEnvelope | None:
        """Summary left by the previous attempt if it stored one but never finished.

        Only attempts that did not reach ANALYZED qualify; a job coming from
        ANALYZED is always annotated again.
        """
        if job.status not in (JobStatus.ANALYZING, JobStatus.FAILED):
            return None
        envelope = self.artifact_store.find_summary_envelope(job.id)
        if envelope is None or envelope.attempt != job.analysis_attempts:
            return None
        return envelope

    async def _annotate_and_summarize(self, job_id: UUID, source_ref: str, attempt: int) -> str:
        handle = await self.annotator.submit(source_ref, self.features)
        logger.info("annotation_wait_started", operation=handle.name, attempt=attempt)

        try:
            payload = await self.annotator.wait(handle, self.annotation_timeout)
        except (AnalysisTimeoutError, asyncio.CancelledError):
            await self._cancel_operation(handle)
            raise

        self._check_claim(job_id, attempt)
        self.artifact_store.put_annotations(job_id, payload)
        summary = await self.generator.generate(payload)
        self._check_claim(job_id, attempt)
        return self.artifact_store.put_summary(
            job_id, attempt, summary, model=self.generator.llm.name
        )

    def _check_claim(self, job_id: UUID, attempt: int) -> None:
        """Raise if a retry has taken the job over since this run claimed it.

        Artifacts live under fixed per-job keys, so a superseded run must not
        write them.
        """
        job = self.job_store.get(job_id)
        if job.status == JobStatus.ANALYZING and job.analysis_attempts == attempt:
            return
        logger.warning(
            "analysis_claim_superseded",
            attempt=attempt,
            current_status=str(job.status),
            current_attempt=job.analysis_attempts,
        )
        raise JobConflictError(
            f"Video job {job_id} attempt {attempt} was superseded "
            f"(now {job.status}, attempt {job.analysis_attempts})",
            job_id=job_id,
        )

    async def _cancel_operation(self, handle: OperationHandle) -> None:
        """Best-effort stop of a remote operation we no longer wait for."""
        try:
            await self.annotator.cancel(handle)
        except CourtVisionError as e:
            logger.warning("annotation_cancel_failed", operation=handle.name, error=e.message)

    def _record_failure(self, job_id: UUID, attempt: int, kind: ErrorKind, message: str) -> None:
        """Mark the job FAILED. If that write fails the job stays ANALYZING."""
        logger.error("analysis_failed", attempt=attempt, error_kind=str(kind), error=message)
        try:
            self.job_store.update_status(
                job_id,
                JobStatus.FAILED,
                expected={JobStatus.ANALYZING},
                expected_attempts=attempt,
                last_error=message,
                last_error_kind=kind,
            )
        except CourtVisionError as e:
            logger.error(
                "analysis_failure_not_recorded",
                attempt=attempt,
                error_kind=str(e.kind),
                error=e.message,
            )

    async def health_check(self) -> dict[str, bool]:
        """Check health of the pipeline's external collaborators."""
        return {
            "annotator": await self.annotator.health_check(),
            "llm": await self.generator.health_check(),
            "blob_store": self.artifact_store.blob_store.health_check(),
        }
