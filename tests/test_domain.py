"""Tests for domain models, enums and errors."""

from uuid import uuid4

import pytest

from court_vision.domain.enums import ALLOWED_TRANSITIONS, ErrorKind, JobStatus, can_transition
from court_vision.domain.errors import (
    AnalysisTimeoutError,
    CourtVisionError,
    JobConflictError,
    JobNotFoundError,
    MalformedResponseError,
    NotFoundError,
    SchemaViolationError,
    StoreError,
    UpstreamError,
)
from court_vision.domain.models import (
    REQUIRED_SUMMARY_KEYS,
    AnalysisResult,
    AnalysisSummary,
    AnnotationPayload,
    LabelAnnotation,
    Segment,
    VideoJob,
)


def test_job_status_enum() -> None:
    """Test JobStatus enum values."""
    assert JobStatus.UPLOADED == "uploaded"
    assert JobStatus.ANALYZING == "analyzing"
    assert JobStatus.ANALYZED == "analyzed"
    assert JobStatus.FAILED == "failed"


def test_terminal_statuses() -> None:
    assert JobStatus.ANALYZED.is_terminal
    assert JobStatus.FAILED.is_terminal
    assert not JobStatus.UPLOADED.is_terminal
    assert not JobStatus.ANALYZING.is_terminal


def test_nothing_moves_back_to_uploaded() -> None:
    for status in JobStatus:
        assert not can_transition(status, JobStatus.UPLOADED)


def test_analysis_only_finishes_from_analyzing() -> None:
    assert ALLOWED_TRANSITIONS[JobStatus.ANALYZED] == {JobStatus.ANALYZING}
    assert ALLOWED_TRANSITIONS[JobStatus.FAILED] == {JobStatus.ANALYZING}
    assert not can_transition(JobStatus.UPLOADED, JobStatus.ANALYZED)
    assert not can_transition(JobStatus.FAILED, JobStatus.ANALYZED)


def test_any_status_can_start_analysis() -> None:
    for status in JobStatus:
        assert can_transition(status, JobStatus.ANALYZING)


@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (JobNotFoundError(uuid4()), ErrorKind.NOT_FOUND),
        (JobConflictError("busy"), ErrorKind.CONFLICT),
        (AnalysisTimeoutError("Annotation timeout"), ErrorKind.TIMEOUT),
        (UpstreamError("boom"), ErrorKind.UPSTREAM_ERROR),
        (MalformedResponseError("bad", "raw"), ErrorKind.MALFORMED_RESPONSE),
        (SchemaViolationError("missing", "raw", ["hotSpots"]), ErrorKind.SCHEMA_VIOLATION),
        (StoreError("db down"), ErrorKind.STORE_ERROR),
    ],
)
def test_error_kinds(error: CourtVisionError, kind: ErrorKind) -> None:
    assert error.kind == kind
    assert str(error) == error.message


def test_job_not_found_is_not_found() -> None:
    job_id = uuid4()
    error = JobNotFoundError(job_id)

    assert isinstance(error, NotFoundError)
    assert str(job_id) in error.message


def test_schema_violation_keeps_raw_text_and_missing_keys() -> None:
    error = SchemaViolationError("missing", '{"shotZones": {}}', ("hotSpots", "defense"))

    assert error.raw_text == '{"shotZones": {}}'
    assert error.missing_keys == ["hotSpots", "defense"]


def test_label_segment_count() -> None:
    label = LabelAnnotation(
        description="pick-and-roll",
        segments=[Segment(0.0, 2.0), Segment(5.0, 7.5), Segment(9.0, 10.0)],
    )

    assert label.segment_count == 3


def test_annotation_payload_from_dict_keeps_label_order() -> None:
    payload = AnnotationPayload.from_dict(
        {
            "labels": [
                {"description": "drive", "segments": [{"start_seconds": 1, "end_seconds": 2}]},
                {"description": "basketball", "segments": []},
            ],
            "shot_count": 4,
        }
    )

    assert [label.description for label in payload.labels] == ["drive", "basketball"]
    assert payload.labels[0].segments[0].end_seconds == 2.0
    assert payload.shot_count == 4
    assert payload.text_snippets == []


def test_analysis_summary_uses_camel_case_keys() -> None:
    data = {key: {} for key in REQUIRED_SUMMARY_KEYS}
    data["hotSpots"] = ["left corner"]

    summary = AnalysisSummary.from_dict(data)

    assert summary.hot_spots == ["left corner"]
    assert set(summary.to_dict()) == set(REQUIRED_SUMMARY_KEYS)


def test_analysis_summary_requires_every_key() -> None:
    data = {key: {} for key in REQUIRED_SUMMARY_KEYS if key != "handDominance"}

    with pytest.raises(KeyError):
        AnalysisSummary.from_dict(data)


def test_video_job_to_dict() -> None:
    job = VideoJob(
        id=uuid4(),
        source_ref="gs://bucket/clip.mp4",
        status=JobStatus.FAILED,
        last_error="Annotation timeout: operation op-1 did not complete within 600 seconds",
        last_error_kind=ErrorKind.TIMEOUT,
        analysis_attempts=2,
    )

    data = job.to_dict()

    assert data["status"] == "failed"
    assert data["last_error_kind"] == "timeout"
    assert data["analysis_attempts"] == 2
    assert data["analyzed_at"] is None


def test_analysis_result_success() -> None:
    job_id = uuid4()
    ok = AnalysisResult(job_id=job_id, status=JobStatus.ANALYZED, artifact_ref="file:///x.json")
    failed = AnalysisResult(
        job_id=job_id,
        status=JobStatus.FAILED,
        error_kind=ErrorKind.SCHEMA_VIOLATION,
        error_message="missing hotSpots",
    )

    assert ok.success
    assert not failed.success
    assert failed.to_dict()["error_kind"] == "schema_violation"
    assert failed.to_dict()["video_job_id"] == str(job_id)
