"""Free-form questions about an analyzed video."""

import asyncio
from uuid import UUID

from court_vision.adapters.job_store.base import JobStore
from court_vision.adapters.llm.base import LLMMessage, LLMProvider
from court_vision.config import settings
from court_vision.domain.enums import JobStatus
from court_vision.domain.errors import JobConflictError, UpstreamError
from court_vision.logging import get_logger
from court_vision.services.artifacts import ArtifactStore
from court_vision.services.summary_generator import SYSTEM_PROMPT, extract_feature_lines

logger = get_logger(__name__)

DEFAULT_QUESTION = "Summarize key plays from the video."

CHAT_PROMPT_TEMPLATE = "Based on this video metadata:\n{feature_lines}\n\nQuestion: {question}"


class VideoChatService:
    """Answers questions from the stored annotations of an analyzed job."""

    def __init__(
        self,
        job_store: JobStore | None = None,
        artifact_store: ArtifactStore | None = None,
        llm_provider: LLMProvider | None = None,
    ) -> None:
        from court_vision.adapters import factory

        self.job_store = job_store or factory.get_job_store()
        self.artifact_store = artifact_store or ArtifactStore(factory.get_blob_store())
        self.llm = llm_provider or factory.get_llm_provider()

    async def ask(self, job_id: UUID | str, question: str | None = None) -> str:
        """Ask a question about a video.

        Raises:
            JobNotFoundError: If the job does not exist
            JobConflictError: If the job has not been analyzed
            UpstreamError: If the language model fails
        """
        job_id = UUID(str(job_id))
        job = self.job_store.get(job_id)
        if job.status != JobStatus.ANALYZED:
            raise JobConflictError(
                f"Video job {job_id} is {job.status}; analyze it before asking questions",
                job_id=job_id,
            )

        payload = self.artifact_store.get_annotations(job_id)
        prompt = CHAT_PROMPT_TEMPLATE.format(
            feature_lines=extract_feature_lines(payload),
            question=(question or "").strip() or DEFAULT_QUESTION,
        )
        messages = [
            LLMMessage(role="system", content=SYSTEM_PROMPT),
            LLMMessage(role="user", content=prompt),
        ]

        logger.info("video_chat_started", video_job_id=str(job_id), llm_provider=self.llm.name)
        try:
            response = await asyncio.wait_for(
                self.llm.complete(
                    messages=messages,
                    temperature=settings.llm_temperature,
                    max_tokens=settings.llm_max_tokens,
                ),
                timeout=settings.llm_timeout_seconds,
            )
        except Exception as e:
            logger.error("video_chat_failed", video_job_id=str(job_id), error=str(e))
            raise UpstreamError(f"Language model {self.llm.name} failed: {e}") from e

        return response.content
