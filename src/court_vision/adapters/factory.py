"""Provider selection from configuration."""

from functools import lru_cache

from court_vision.adapters.annotation.base import AnnotationClient
from court_vision.adapters.annotation.google import GoogleVideoIntelligenceClient
from court_vision.adapters.annotation.stub import StubAnnotationClient
from court_vision.adapters.job_store.base import JobStore
from court_vision.adapters.job_store.memory import InMemoryJobStore
from court_vision.adapters.job_store.sql import SqlJobStore
from court_vision.adapters.llm.base import LLMProvider
from court_vision.adapters.llm.openai import OpenAIProvider
from court_vision.adapters.llm.stub import StubLLMProvider
from court_vision.adapters.storage.base import BlobStore
from court_vision.adapters.storage.gcs import GCSBlobStore
from court_vision.adapters.storage.local import LocalBlobStore
from court_vision.config import settings
from court_vision.logging import get_logger

logger = get_logger(__name__)


def get_llm_provider() -> LLMProvider:
    """Get the configured LLM provider, falling back to the stub without an API key."""
    provider_name = settings.llm_provider.lower()

    if provider_name == "stub":
        return StubLLMProvider()
    if provider_name == "openai" and settings.openai_api_key:
        return OpenAIProvider(timeout=settings.llm_timeout_seconds)

    logger.warning("llm_provider_unavailable_using_stub", llm_provider=provider_name)
    return StubLLMProvider()


def get_annotation_client() -> AnnotationClient:
    """Get the configured video annotation provider."""
    provider_name = settings.annotation_provider.lower()

    if provider_name == "google":
        return GoogleVideoIntelligenceClient()
    if provider_name != "stub":
        logger.warning("unknown_annotation_provider_using_stub", annotation_provider=provider_name)
    return StubAnnotationClient()


@lru_cache
def get_blob_store() -> BlobStore:
    """Get the configured blob store (shared per process)."""
    provider_name = settings.storage_provider.lower()

    if provider_name == "gcs":
        return GCSBlobStore()
    if provider_name != "local":
        logger.warning("unknown_storage_provider_using_local", storage_provider=provider_name)
    return LocalBlobStore()


@lru_cache
def get_job_store() -> JobStore:
    """Get the configured job store (shared per process)."""
    provider_name = settings.job_store_provider.lower()

    if provider_name == "memory":
        return InMemoryJobStore()
    if provider_name != "sql":
        logger.warning("unknown_job_store_provider_using_sql", job_store_provider=provider_name)
    return SqlJobStore()
