"""Tests for the video analysis Celery task."""

from uuid import uuid4

import pytest

from court_vision.domain.enums import JobStatus
from court_vision.jobs import analysis_tasks
from court_vision.jobs.analysis_tasks import analyze_video_task


@pytest.fixture
def task_pipeline(make_pipeline, monkeypatch):
    """Make the task build its pipeline over the test stores."""
    monkeypatch.setattr(analysis_tasks, "AnalysisPipeline", lambda: make_pipeline())


class TestAnalyzeVideoTask:
    """Test the analyze_video task run eagerly."""

    def test_analyzes_uploaded_video(self, task_pipeline, job_store, uploaded_job) -> None:
        """A successful run reports the artifact and the task ID."""
        result = analyze_video_task.apply(kwargs={"video_job_id": str(uploaded_job.id)}).get()

        assert result["success"] is True
        assert result["status"] == "analyzed"
        assert result["artifact_ref"]
        assert result["task_id"]
        assert job_store.get(uploaded_job.id).status == JobStatus.ANALYZED

    def test_unknown_job_is_reported(self, task_pipeline) -> None:
        """Missing jobs come back as a result instead of a task failure."""
        result = analyze_video_task.apply(kwargs={"video_job_id": str(uuid4())}).get()

        assert result["success"] is False
        assert result["status"] is None
        assert result["error_kind"] == "not_found"

    def test_analyzed_job_without_retry_conflicts(self, task_pipeline, uploaded_job) -> None:
        """Re-running an analyzed job needs retry=True."""
        analyze_video_task.apply(kwargs={"video_job_id": str(uploaded_job.id)}).get()

        result = analyze_video_task.apply(kwargs={"video_job_id": str(uploaded_job.id)}).get()
        retried = analyze_video_task.apply(
            kwargs={"video_job_id": str(uploaded_job.id), "retry": True}
        ).get()

        assert result["error_kind"] == "conflict"
        assert retried["success"] is True

    def test_failed_analysis_is_returned(
        self, make_pipeline, monkeypatch, job_store, uploaded_job
    ) -> None:
        """Pipeline failures are recorded on the job and in the result."""
        from court_vision.adapters.annotation.stub import StubAnnotationClient

        monkeypatch.setattr(
            analysis_tasks,
            "AnalysisPipeline",
            lambda: make_pipeline(annotator=StubAnnotationClient(error="quota exceeded")),
        )

        result = analyze_video_task.apply(kwargs={"video_job_id": str(uploaded_job.id)}).get()

        assert result["success"] is False
        assert result["status"] == "failed"
        assert result["error_kind"] == "upstream_error"
        assert job_store.get(uploaded_job.id).status == JobStatus.FAILED
