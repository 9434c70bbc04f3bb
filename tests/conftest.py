"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ANNOTATION_PROVIDER"] = "stub"
os.environ["LLM_PROVIDER"] = "stub"
os.environ["STORAGE_PROVIDER"] = "local"
os.environ["STORAGE_BASE_PATH"] = tempfile.mkdtemp(prefix="court-vision-tests-")
os.environ["JOB_STORE_PROVIDER"] = "memory"

from court_vision.adapters.annotation.stub import StubAnnotationClient  # noqa: E402
from court_vision.adapters.job_store.memory import InMemoryJobStore  # noqa: E402
from court_vision.adapters.job_store.sql import SqlJobStore  # noqa: E402
from court_vision.adapters.storage.local import LocalBlobStore  # noqa: E402
from court_vision.services.analysis_pipeline import AnalysisPipeline  # noqa: E402
from court_vision.services.artifacts import ArtifactStore  # noqa: E402
from court_vision.services.summary_generator import SummaryGenerator  # noqa: E402
from fakes import VALID_SUMMARY_JSON, ScriptedLLMProvider  # noqa: E402


@pytest.fixture(scope="session")
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from court_vision.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def sql_job_store() -> SqlJobStore:
    """SQL job store over a fresh in-memory SQLite database."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    from court_vision.db.models import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return SqlJobStore(session_factory=sessionmaker(bind=engine, expire_on_commit=False))


@pytest.fixture(params=["memory", "sql"])
def job_store(request: pytest.FixtureRequest, sql_job_store: SqlJobStore) -> Any:
    """Each job store implementation in turn."""
    if request.param == "memory":
        return InMemoryJobStore()
    return sql_job_store


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    """Local blob store rooted in a temporary directory."""
    return LocalBlobStore(base_path=tmp_path / "blobs")


@pytest.fixture
def artifact_store(blob_store: LocalBlobStore) -> ArtifactStore:
    return ArtifactStore(blob_store)


@pytest.fixture
def annotator() -> StubAnnotationClient:
    """Stub annotation provider with canned basketball labels."""
    return StubAnnotationClient()


@pytest.fixture
def scripted_llm() -> ScriptedLLMProvider:
    return ScriptedLLMProvider(VALID_SUMMARY_JSON)


@pytest.fixture
def make_pipeline(
    job_store: Any,
    artifact_store: ArtifactStore,
    annotator: StubAnnotationClient,
    scripted_llm: ScriptedLLMProvider,
) -> Callable[..., AnalysisPipeline]:
    """Build a pipeline over the test stores; keyword arguments override parts."""

    def _make(**overrides: Any) -> AnalysisPipeline:
        llm = overrides.pop("llm", scripted_llm)
        options: dict[str, Any] = {
            "job_store": job_store,
            "artifact_store": artifact_store,
            "annotator": annotator,
            "generator": SummaryGenerator(llm_provider=llm, timeout=5.0),
            "annotation_timeout": 5.0,
        }
        options.update(overrides)
        return AnalysisPipeline(**options)

    return _make


@pytest.fixture
def uploaded_job(job_store: Any) -> Any:
    """A freshly uploaded job."""
    job_id = job_store.create("gs://basketball-demo-videos/uploads/clip.mp4")
    return job_store.get(job_id)
