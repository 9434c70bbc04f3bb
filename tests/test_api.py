"""Tests for the video API endpoints."""

from collections.abc import Generator
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from court_vision.adapters.annotation.stub import StubAnnotationClient
from court_vision.adapters.job_store.memory import InMemoryJobStore
from court_vision.api import deps
from court_vision.api.routes import videos
from court_vision.domain.enums import JobStatus
from court_vision.services.analysis_pipeline import AnalysisPipeline
from court_vision.services.artifacts import ArtifactStore
from court_vision.services.chat import VideoChatService
from court_vision.services.summary_generator import SummaryGenerator
from court_vision.services.uploads import UploadService
from fakes import VALID_SUMMARY_JSON, ScriptedLLMProvider


class FakeTask:
    """Stands in for the Celery task so no broker is needed."""

    def __init__(self) -> None:
        self.calls: list[dict] = []

    def delay(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(id="task-123")


@pytest.fixture
def api(
    test_client: TestClient, blob_store, monkeypatch
) -> Generator[SimpleNamespace, None, None]:
    """Route the API's dependencies to per-test stores and fakes."""
    from court_vision.main import app

    env = SimpleNamespace(
        client=test_client,
        job_store=InMemoryJobStore(),
        artifact_store=ArtifactStore(blob_store),
        blob_store=blob_store,
        annotator=StubAnnotationClient(),
        llm=ScriptedLLMProvider(VALID_SUMMARY_JSON),
        annotation_timeout=5.0,
        task=FakeTask(),
    )

    def pipeline() -> AnalysisPipeline:
        return AnalysisPipeline(
            job_store=env.job_store,
            artifact_store=env.artifact_store,
            annotator=env.annotator,
            generator=SummaryGenerator(llm_provider=env.llm),
            annotation_timeout=env.annotation_timeout,
        )

    app.dependency_overrides[deps.get_job_store] = lambda: env.job_store
    app.dependency_overrides[deps.get_artifact_store] = lambda: env.artifact_store
    app.dependency_overrides[deps.get_upload_service] = lambda: UploadService(
        blob_store=env.blob_store, job_store=env.job_store
    )
    app.dependency_overrides[deps.get_analysis_pipeline] = pipeline
    app.dependency_overrides[deps.get_chat_service] = lambda: VideoChatService(
        job_store=env.job_store, artifact_store=env.artifact_store, llm_provider=env.llm
    )
    monkeypatch.setattr(videos, "analyze_video_task", env.task)

    yield env

    app.dependency_overrides.clear()


def _upload(api) -> str:
    response = api.client.post(
        "/api/v1/videos",
        files={"video": ("clip.mp4", b"fake-video-bytes", "video/mp4")},
    )
    assert response.status_code == 201
    return response.json()["id"]


class TestUploadAndRead:
    def test_upload_creates_job(self, api):
        response = api.client.post(
            "/api/v1/videos",
            files={"video": ("clip.mp4", b"fake-video-bytes", "video/mp4")},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "uploaded"
        assert data["analysis_attempts"] == 0
        assert data["metadata"]["filename"] == "clip.mp4"

    def test_upload_empty_file(self, api):
        response = api.client.post(
            "/api/v1/videos",
            files={"video": ("clip.mp4", b"", "video/mp4")},
        )

        assert response.status_code == 400

    def test_get_and_list(self, api):
        job_id = _upload(api)

        single = api.client.get(f"/api/v1/videos/{job_id}")
        listing = api.client.get("/api/v1/videos", params={"status": "uploaded"})

        assert single.status_code == 200
        assert single.json()["id"] == job_id
        assert listing.status_code == 200
        assert [j["id"] for j in listing.json()["jobs"]] == [job_id]

    def test_get_unknown_job(self, api):
        response = api.client.get(f"/api/v1/videos/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["detail"]["error_kind"] == "not_found"

    def test_get_invalid_id(self, api):
        response = api.client.get("/api/v1/videos/not-a-uuid")

        assert response.status_code == 422


class TestAnalyze:
    def test_analyze_is_queued(self, api):
        job_id = _upload(api)

        response = api.client.post(f"/api/v1/videos/{job_id}/analyze", params={"retry": "true"})

        assert response.status_code == 202
        data = response.json()
        assert data["task_id"] == "task-123"
        assert data["status"] == "queued"
        assert api.task.calls == [{"video_job_id": job_id, "retry": True}]

    def test_analyze_unknown_job(self, api):
        response = api.client.post(f"/api/v1/videos/{uuid4()}/analyze")

        assert response.status_code == 404
        assert api.task.calls == []

    def test_analyze_inline(self, api):
        job_id = _upload(api)

        response = api.client.post(f"/api/v1/videos/{job_id}/analyze", params={"wait": "true"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "analyzed"
        assert api.job_store.get(UUID(job_id)).status == JobStatus.ANALYZED

    def test_analyze_twice_conflicts(self, api):
        job_id = _upload(api)
        api.client.post(f"/api/v1/videos/{job_id}/analyze", params={"wait": "true"})

        response = api.client.post(f"/api/v1/videos/{job_id}/analyze", params={"wait": "true"})

        assert response.status_code == 409
        assert response.json()["detail"]["error_kind"] == "conflict"

    def test_annotation_timeout_maps_to_504(self, api):
        api.annotator = StubAnnotationClient(never_completes=True)
        api.annotation_timeout = 0.05
        job_id = _upload(api)

        response = api.client.post(f"/api/v1/videos/{job_id}/analyze", params={"wait": "true"})

        assert response.status_code == 504
        data = response.json()
        assert data["status"] == "failed"
        assert data["error_kind"] == "timeout"

    def test_schema_violation_maps_to_502(self, api):
        api.llm = ScriptedLLMProvider('{"shotZones": {}}')
        job_id = _upload(api)

        response = api.client.post(f"/api/v1/videos/{job_id}/analyze", params={"wait": "true"})

        assert response.status_code == 502
        assert response.json()["error_kind"] == "schema_violation"


class TestResults:
    def test_summary_before_analysis(self, api):
        job_id = _upload(api)

        response = api.client.get(f"/api/v1/videos/{job_id}/summary")

        assert response.status_code == 409

    def test_summary_and_chat_after_analysis(self, api):
        job_id = _upload(api)
        api.client.post(f"/api/v1/videos/{job_id}/analyze", params={"wait": "true"})
        api.llm.responses = ["Lots of pick-and-roll."]

        summary = api.client.get(f"/api/v1/videos/{job_id}/summary")
        chat = api.client.post(
            f"/api/v1/videos/{job_id}/chat",
            json={"question": "What plays were run?"},
        )

        assert summary.status_code == 200
        body = summary.json()
        assert body["attempt"] == 1
        assert body["summary"]["hotSpots"] == ["left corner", "top of key"]
        assert chat.status_code == 200
        assert chat.json()["answer"] == "Lots of pick-and-roll."

    def test_chat_before_analysis(self, api):
        job_id = _upload(api)

        response = api.client.post(f"/api/v1/videos/{job_id}/chat", json={})

        assert response.status_code == 409
