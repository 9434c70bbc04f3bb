"""Base interface for video annotation providers."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from court_vision.domain.errors import AnalysisTimeoutError
from court_vision.domain.models import AnnotationPayload
from court_vision.logging import get_logger

logger = get_logger(__name__)


@dataclass
class OperationHandle:
    """Handle to a long-running annotation operation."""

    name: str
    source_ref: str
    features: list[str] = field(default_factory=list)
    submitted_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    operation: Any = None  # provider-specific operation object


class AnnotationClient(ABC):
    """Abstract base class for video annotation providers.

    Annotation is a long-running remote operation: `submit` starts it and
    `wait` polls it until it finishes or the caller's bound runs out.

    Implementations:
    - GoogleVideoIntelligenceClient: Google Cloud Video Intelligence API
    - StubAnnotationClient: Returns canned labels for testing
    """

    poll_interval: float = 10.0

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def submit(self, source_ref: str, features: Sequence[str]) -> OperationHandle:
        """Start annotating the video at `source_ref`.

        Raises:
            UpstreamError: If the service rejects the request
        """
        ...

    @abstractmethod
    async def poll(self, handle: OperationHandle) -> AnnotationPayload | None:
        """Check an operation once.

        Returns:
            The payload when the operation is done, None while it is running

        Raises:
            UpstreamError: If the operation finished with an error
        """
        ...

    async def cancel(self, handle: OperationHandle) -> None:  # noqa: B027
        """Ask the service to stop an operation. Best-effort; default is a no-op."""

    async def wait(self, handle: OperationHandle, timeout: float) -> AnnotationPayload:
        """Wait for an operation to finish, polling every `poll_interval`.

        The wait is abandoned after `timeout` seconds; the remote operation
        itself is not guaranteed to stop.

        Raises:
            AnalysisTimeoutError: If the operation is still running after `timeout`
            UpstreamError: If the operation failed
        """
        try:
            return await asyncio.wait_for(self._poll_until_done(handle), timeout=timeout)
        except TimeoutError as e:
            logger.warning(
                "annotation_wait_timed_out",
                provider=self.name,
                operation=handle.name,
                timeout_seconds=timeout,
            )
            raise AnalysisTimeoutError(
                f"Annotation timeout: operation {handle.name} did not complete "
                f"within {timeout:g} seconds",
                timeout_seconds=timeout,
            ) from e

    async def _poll_until_done(self, handle: OperationHandle) -> AnnotationPayload:
        attempt = 0
        while True:
            attempt += 1
            payload = await self.poll(handle)
            if payload is not None:
                return payload
            logger.debug(
                "annotation_poll_status",
                provider=self.name,
                operation=handle.name,
                attempt=attempt,
            )
            await asyncio.sleep(self.poll_interval)

    async def health_check(self) -> bool:
        """Check if the provider is available."""
        return True
