"""Video upload, analysis and results endpoints."""

from datetime import datetime
from typing import Any
from uuid import UUID

from celery.result import AsyncResult
from fastapi import APIRouter, File, HTTPException, Query, Response, UploadFile, status
from pydantic import BaseModel, Field

from court_vision.api.deps import (
    HTTP_STATUS_FOR_KIND,
    AnalysisPipelineDep,
    ArtifactStoreDep,
    ChatServiceDep,
    JobStoreDep,
    UploadServiceDep,
    http_error,
)
from court_vision.domain.enums import JobStatus
from court_vision.domain.errors import CourtVisionError, JobConflictError
from court_vision.domain.models import VideoJob
from court_vision.jobs.analysis_tasks import analyze_video_task
from court_vision.logging import get_logger
from court_vision.worker import celery_app

router = APIRouter(prefix="/videos", tags=["Videos"])
logger = get_logger(__name__)


class VideoJobResponse(BaseModel):
    """Video job response model."""

    id: str
    source_ref: str
    status: str
    analysis_artifact_ref: str | None = None
    last_error: str | None = None
    last_error_kind: str | None = None
    analysis_attempts: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    analysis_started_at: datetime | None = None
    analyzed_at: datetime | None = None


class VideoJobListResponse(BaseModel):
    """List of video jobs."""

    jobs: list[VideoJobResponse]
    total: int


class AnalyzeQueuedResponse(BaseModel):
    """Response when an analysis is enqueued."""

    task_id: str
    video_job_id: str
    status: str
    message: str


class AnalysisResultResponse(BaseModel):
    """Outcome of an inline analysis."""

    success: bool
    video_job_id: str
    status: str
    artifact_ref: str | None = None
    error_kind: str | None = None
    error: str | None = None
    resumed: bool = False


class TaskStatusResponse(BaseModel):
    """Celery task status."""

    task_id: str
    status: str
    result: dict[str, Any] | None = None
    error: str | None = None


class SummaryResponse(BaseModel):
    """Stored feature summary of an analyzed video."""

    video_job_id: str
    attempt: int
    generated_at: datetime
    model: str | None = None
    summary: dict[str, Any]


class ChatRequest(BaseModel):
    """Question about an analyzed video."""

    question: str | None = Field(None, max_length=2000)


class ChatResponse(BaseModel):
    """Answer to a video question."""

    video_job_id: str
    answer: str


def _job_to_response(job: VideoJob) -> VideoJobResponse:
    return VideoJobResponse(
        id=str(job.id),
        source_ref=job.source_ref,
        status=str(job.status),
        analysis_artifact_ref=job.analysis_artifact_ref,
        last_error=job.last_error,
        last_error_kind=str(job.last_error_kind) if job.last_error_kind else None,
        analysis_attempts=job.analysis_attempts,
        metadata=job.metadata,
        created_at=job.created_at,
        updated_at=job.updated_at,
        analysis_started_at=job.analysis_started_at,
        analyzed_at=job.analyzed_at,
    )


@router.post(
    "",
    response_model=VideoJobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload video",
    description="Upload a video and register it for analysis.",
)
async def upload_video(
    uploads: UploadServiceDep,
    video: UploadFile = File(..., description="Video file"),
) -> VideoJobResponse:
    """Upload a video."""
    data = await video.read()

    try:
        job = uploads.register_upload(video.filename, data, video.content_type)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except CourtVisionError as e:
        raise http_error(e) from e

    return _job_to_response(job)


@router.get(
    "",
    response_model=VideoJobListResponse,
    summary="List videos",
    description="List video jobs, newest first.",
)
async def list_videos(
    job_store: JobStoreDep,
    status_filter: JobStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
) -> VideoJobListResponse:
    """List video jobs."""
    try:
        jobs = job_store.list_jobs(status=status_filter, limit=limit)
    except CourtVisionError as e:
        raise http_error(e) from e

    return VideoJobListResponse(jobs=[_job_to_response(j) for j in jobs], total=len(jobs))


@router.get(
    "/tasks/{task_id}",
    response_model=TaskStatusResponse,
    summary="Get analysis task status",
    description="Get the status and result of a queued analysis by task ID.",
)
async def get_task_status(task_id: str) -> TaskStatusResponse:
    """Get the status of an analysis task."""
    result = AsyncResult(task_id, app=celery_app)

    if result.state == "PENDING":
        return TaskStatusResponse(task_id=task_id, status="pending")
    elif result.state == "STARTED":
        return TaskStatusResponse(task_id=task_id, status="running")
    elif result.state == "SUCCESS":
        return TaskStatusResponse(task_id=task_id, status="completed", result=result.result)
    elif result.state == "FAILURE":
        return TaskStatusResponse(task_id=task_id, status="failed", error=str(result.result))
    else:
        return TaskStatusResponse(task_id=task_id, status=result.state.lower())


@router.get(
    "/{job_id}",
    response_model=VideoJobResponse,
    summary="Get video",
    description="Get a video job and its analysis status.",
)
async def get_video(job_id: UUID, job_store: JobStoreDep) -> VideoJobResponse:
    """Get a video job."""
    try:
        return _job_to_response(job_store.get(job_id))
    except CourtVisionError as e:
        raise http_error(e) from e


@router.post(
    "/{job_id}/analyze",
    response_model=AnalyzeQueuedResponse | AnalysisResultResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Analyze video",
    description=(
        "Enqueue the analysis of a video, or run it inline with wait=true. "
        "Use retry=true to analyze an analyzed or failed video again."
    ),
)
async def analyze_video(
    job_id: UUID,
    response: Response,
    job_store: JobStoreDep,
    pipeline: AnalysisPipelineDep,
    retry: bool = Query(False),
    wait: bool = Query(False),
) -> AnalyzeQueuedResponse | AnalysisResultResponse:
    """Trigger analysis of a video."""
    logger.info("analyze_video_triggered", video_job_id=str(job_id), retry=retry, wait=wait)

    if wait:
        try:
            result = await pipeline.analyze(job_id, retry=retry)
        except CourtVisionError as e:
            raise http_error(e) from e

        if result.error_kind is not None:
            response.status_code = HTTP_STATUS_FOR_KIND[result.error_kind]
        else:
            response.status_code = status.HTTP_200_OK
        return AnalysisResultResponse(**result.to_dict())

    try:
        job_store.get(job_id)
    except CourtVisionError as e:
        raise http_error(e) from e

    task = analyze_video_task.delay(video_job_id=str(job_id), retry=retry)

    return AnalyzeQueuedResponse(
        task_id=task.id,
        video_job_id=str(job_id),
        status="queued",
        message="Video analysis enqueued successfully",
    )


@router.get(
    "/{job_id}/summary",
    response_model=SummaryResponse,
    summary="Get feature summary",
    description="Get the stored feature summary of an analyzed video.",
)
async def get_summary(
    job_id: UUID,
    job_store: JobStoreDep,
    artifacts: ArtifactStoreDep,
) -> SummaryResponse:
    """Get the feature summary of a video."""
    try:
        job = job_store.get(job_id)
        if job.status != JobStatus.ANALYZED:
            raise JobConflictError(f"Video job {job_id} is {job.status}", job_id=job_id)
        envelope = artifacts.get_summary_envelope(job_id)
    except CourtVisionError as e:
        raise http_error(e) from e

    return SummaryResponse(
        video_job_id=str(envelope.job_id),
        attempt=envelope.attempt,
        generated_at=envelope.generated_at,
        model=envelope.model,
        summary=envelope.summary.to_dict(),
    )


@router.post(
    "/{job_id}/chat",
    response_model=ChatResponse,
    summary="Ask about a video",
    description="Ask a free-form question about an analyzed video.",
)
async def chat_about_video(
    job_id: UUID,
    request: ChatRequest,
    chat: ChatServiceDep,
) -> ChatResponse:
    """Ask a question about a video."""
    try:
        answer = await chat.ask(job_id, request.question)
    except CourtVisionError as e:
        raise http_error(e) from e

    return ChatResponse(video_job_id=str(job_id), answer=answer)
