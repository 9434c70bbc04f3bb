"""Video analysis Celery tasks.

Analysis is not retried automatically: a failed run leaves the job FAILED
with its error kind, and a retry is an explicit caller decision.
"""

from typing import Any

from court_vision.domain.errors import JobConflictError, JobNotFoundError
from court_vision.logging import get_logger
from court_vision.services.analysis_pipeline import AnalysisPipeline
from court_vision.utils import run_async
from court_vision.worker import celery_app

logger = get_logger(__name__)


@celery_app.task(bind=True, name="analysis.analyze_video")
def analyze_video_task(
    self: Any,
    video_job_id: str,
    retry: bool = False,
) -> dict[str, Any]:
    """Analyze one uploaded video.

    Args:
        video_job_id: UUID of the video job
        retry: Re-analyze an analyzed/failed job or take over a stale claim

    Returns:
        AnalysisResult as a dict; missing or busy jobs are reported the same
        way rather than raised
    """
    task_id = self.request.id
    logger.info(
        "analyze_video_task_started",
        task_id=task_id,
        video_job_id=video_job_id,
        retry=retry,
    )

    try:
        result = run_async(AnalysisPipeline().analyze(video_job_id, retry=retry))
    except (JobNotFoundError, JobConflictError) as e:
        logger.warning(
            "analyze_video_task_rejected",
            task_id=task_id,
            video_job_id=video_job_id,
            error_kind=str(e.kind),
            error=e.message,
        )
        return {
            "success": False,
            "video_job_id": video_job_id,
            "status": None,
            "artifact_ref": None,
            "error_kind": str(e.kind),
            "error": e.message,
            "resumed": False,
            "task_id": task_id,
        }

    logger.info(
        "analyze_video_task_completed",
        task_id=task_id,
        video_job_id=video_job_id,
        status=str(result.status),
    )
    return {**result.to_dict(), "task_id": task_id}
