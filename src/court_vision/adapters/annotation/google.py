"""Google Cloud Video Intelligence annotation provider."""

import asyncio
from collections.abc import Sequence
from typing import Any

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions

from court_vision.adapters.annotation.base import AnnotationClient, OperationHandle
from court_vision.config import settings
from court_vision.domain.errors import UpstreamError
from court_vision.domain.models import AnnotationPayload, LabelAnnotation, Segment
from court_vision.logging import get_logger

logger = get_logger(__name__)

VIDEO_INTELLIGENCE_ERRORS = (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)


def _seconds(offset: Any) -> float:
    """Duration fields arrive as timedelta (proto-plus) or seconds/nanos."""
    if offset is None:
        return 0.0
    if hasattr(offset, "total_seconds"):
        return float(offset.total_seconds())
    return float(getattr(offset, "seconds", 0)) + float(getattr(offset, "nanos", 0)) / 1e9


def payload_from_response(response: Any) -> AnnotationPayload:
    """Convert an AnnotateVideoResponse into an AnnotationPayload.

    Only the first annotation result is used (one input video per request).
    Segment-level label order is kept as returned by the service.
    """
    results = list(getattr(response, "annotation_results", None) or [])
    if not results:
        return AnnotationPayload()
    result = results[0]

    labels = []
    for annotation in getattr(result, "segment_label_annotations", None) or []:
        entity = getattr(annotation, "entity", None)
        segments = []
        confidences = []
        for label_segment in getattr(annotation, "segments", None) or []:
            segment = getattr(label_segment, "segment", None)
            segments.append(
                Segment(
                    start_seconds=_seconds(getattr(segment, "start_time_offset", None)),
                    end_seconds=_seconds(getattr(segment, "end_time_offset", None)),
                )
            )
            if getattr(label_segment, "confidence", None) is not None:
                confidences.append(float(label_segment.confidence))
        labels.append(
            LabelAnnotation(
                description=(getattr(entity, "description", None) or "").strip(),
                segments=segments,
                confidence=max(confidences) if confidences else None,
            )
        )

    text_snippets = [
        t.text.strip()
        for t in getattr(result, "text_annotations", None) or []
        if getattr(t, "text", None)
    ]
    object_descriptions = [
        o.entity.description
        for o in getattr(result, "object_annotations", None) or []
        if getattr(getattr(o, "entity", None), "description", None)
    ]

    return AnnotationPayload(
        labels=labels,
        shot_count=len(getattr(result, "shot_annotations", None) or []),
        text_snippets=text_snippets,
        object_descriptions=object_descriptions,
    )


class GoogleVideoIntelligenceClient(AnnotationClient):
    """Annotates videos stored in GCS with the Video Intelligence API.

    The SDK is synchronous, so every call runs in the default thread pool;
    polling sleeps on the event loop so a waiting analysis can be cancelled.
    """

    def __init__(
        self,
        client: Any = None,
        poll_interval: float | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            client: Optional pre-built VideoIntelligenceServiceClient.
            poll_interval: Seconds between operation polls. Falls back to settings.
        """
        self._client = client
        self.poll_interval = (
            poll_interval
            if poll_interval is not None
            else settings.annotation_poll_interval_seconds
        )

    @property
    def name(self) -> str:
        return "google_video_intelligence"

    def _get_client(self) -> Any:
        """Get or create the Video Intelligence client."""
        if self._client is None:
            from google.cloud import videointelligence_v1

            self._client = videointelligence_v1.VideoIntelligenceServiceClient()
        return self._client

    async def submit(self, source_ref: str, features: Sequence[str]) -> OperationHandle:
        from google.cloud import videointelligence_v1

        if not source_ref.startswith("gs://"):
            raise UpstreamError(f"Video Intelligence requires a gs:// input URI, got {source_ref}")

        unknown = [f for f in features if f not in videointelligence_v1.Feature.__members__]
        if unknown:
            raise UpstreamError(f"Unknown Video Intelligence features: {unknown}")

        request = {
            "input_uri": source_ref,
            "features": [videointelligence_v1.Feature[f] for f in features],
        }

        loop = asyncio.get_running_loop()
        try:
            operation = await loop.run_in_executor(
                None, lambda: self._get_client().annotate_video(request=request)
            )
        except VIDEO_INTELLIGENCE_ERRORS as e:
            logger.error("annotation_submit_failed", source_ref=source_ref, error=str(e))
            raise UpstreamError(f"Video Intelligence rejected {source_ref}: {e}") from e

        name = getattr(getattr(operation, "operation", None), "name", None) or source_ref
        logger.info(
            "annotation_submitted",
            source_ref=source_ref,
            operation=name,
            features=list(features),
        )
        return OperationHandle(
            name=name,
            source_ref=source_ref,
            features=list(features),
            operation=operation,
        )

    async def poll(self, handle: OperationHandle) -> AnnotationPayload | None:
        loop = asyncio.get_running_loop()
        operation = handle.operation
        try:
            done = await loop.run_in_executor(None, operation.done)
            if not done:
                return None
            response = await loop.run_in_executor(None, operation.result)
        except VIDEO_INTELLIGENCE_ERRORS as e:
            logger.error("annotation_operation_failed", operation=handle.name, error=str(e))
            raise UpstreamError(f"Video Intelligence operation {handle.name} failed: {e}") from e

        payload = payload_from_response(response)
        logger.info(
            "annotation_completed",
            operation=handle.name,
            label_count=len(payload.labels),
            shot_count=payload.shot_count,
        )
        return payload

    async def cancel(self, handle: OperationHandle) -> None:
        if handle.operation is None:
            return
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, handle.operation.cancel)
            logger.info("annotation_cancel_requested", operation=handle.name)
        except VIDEO_INTELLIGENCE_ERRORS as e:
            logger.warning("annotation_cancel_failed", operation=handle.name, error=str(e))

    async def health_check(self) -> bool:
        try:
            self._get_client()
            return True
        except Exception as e:
            logger.error("video_intelligence_health_check_failed", error=str(e))
            return False
