"""Stub annotation provider for testing."""

from collections.abc import Sequence
from uuid import uuid4

from court_vision.adapters.annotation.base import AnnotationClient, OperationHandle
from court_vision.domain.errors import UpstreamError
from court_vision.domain.models import AnnotationPayload, LabelAnnotation, Segment
from court_vision.logging import get_logger

logger = get_logger(__name__)


def default_labels() -> list[LabelAnnotation]:
    """Canned basketball labels, in the order the service would return them."""
    counts = [
        ("basketball", 6),
        ("basketball moves", 4),
        ("pick-and-roll", 3),
        ("slam dunk", 2),
        ("three-point shot", 2),
        ("player", 5),
    ]
    return [
        LabelAnnotation(
            description=description,
            segments=[Segment(start_seconds=i * 4.0, end_seconds=i * 4.0 + 3.5) for i in range(n)],
            confidence=0.9,
        )
        for description, n in counts
    ]


class StubAnnotationClient(AnnotationClient):
    """Stub provider that completes after a fixed number of polls."""

    def __init__(
        self,
        labels: list[LabelAnnotation] | None = None,
        polls_until_done: int = 1,
        never_completes: bool = False,
        error: str | None = None,
        poll_interval: float = 0.01,
    ) -> None:
        """Initialize the stub.

        Args:
            labels: Labels to return. Defaults to canned basketball labels.
            polls_until_done: Number of polls before the operation reports done.
            never_completes: If True the operation stays running forever.
            error: If set, the operation finishes with this error.
            poll_interval: Seconds between polls.
        """
        self.labels = labels if labels is not None else default_labels()
        self.polls_until_done = polls_until_done
        self.never_completes = never_completes
        self.error = error
        self.poll_interval = poll_interval
        self.submitted: list[str] = []
        self.cancelled: list[str] = []
        self._polls: dict[str, int] = {}

    @property
    def name(self) -> str:
        return "stub"

    async def submit(self, source_ref: str, features: Sequence[str]) -> OperationHandle:
        handle = OperationHandle(
            name=f"stub-operation-{uuid4().hex[:8]}",
            source_ref=source_ref,
            features=list(features),
        )
        self.submitted.append(source_ref)
        self._polls[handle.name] = 0
        logger.info("stub_annotation_submitted", source_ref=source_ref, operation=handle.name)
        return handle

    async def poll(self, handle: OperationHandle) -> AnnotationPayload | None:
        self._polls[handle.name] = self._polls.get(handle.name, 0) + 1
        if self.never_completes or self._polls[handle.name] < self.polls_until_done:
            return None
        if self.error:
            raise UpstreamError(f"Stub annotation failed: {self.error}")
        return AnnotationPayload(
            labels=list(self.labels),
            shot_count=len(self.labels),
        )

    async def cancel(self, handle: OperationHandle) -> None:
        self.cancelled.append(handle.name)
