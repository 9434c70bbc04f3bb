"""Tests for the job stores (run against both the in-memory and SQL store)."""

import random
import threading
from uuid import uuid4

import pytest

from court_vision.adapters.job_store.memory import InMemoryJobStore
from court_vision.domain.enums import ErrorKind, JobStatus
from court_vision.domain.errors import JobConflictError, JobNotFoundError


def _claim(store, job_id):
    job = store.get(job_id)
    return store.update_status(
        job_id,
        JobStatus.ANALYZING,
        expected={job.status},
        expected_attempts=job.analysis_attempts,
    )


class TestCreateAndGet:
    def test_create_starts_uploaded(self, job_store):
        job_id = job_store.create("gs://bucket/uploads/a.mp4", metadata={"filename": "a.mp4"})

        job = job_store.get(job_id)

        assert job.status == JobStatus.UPLOADED
        assert job.source_ref == "gs://bucket/uploads/a.mp4"
        assert job.analysis_attempts == 0
        assert job.metadata == {"filename": "a.mp4"}
        assert job.analysis_artifact_ref is None
        assert job.created_at is not None

    def test_get_unknown_job(self, job_store):
        with pytest.raises(JobNotFoundError):
            job_store.get(uuid4())

    def test_update_unknown_job(self, job_store):
        with pytest.raises(JobNotFoundError):
            job_store.update_status(uuid4(), JobStatus.ANALYZING)


class TestUpdateStatus:
    def test_claim_increments_attempts(self, job_store, uploaded_job):
        job = _claim(job_store, uploaded_job.id)

        assert job.status == JobStatus.ANALYZING
        assert job.analysis_attempts == 1
        assert job.analysis_started_at is not None
        assert job_store.get(uploaded_job.id).analysis_attempts == 1

    def test_analyzed_records_artifact(self, job_store, uploaded_job):
        _claim(job_store, uploaded_job.id)

        job = job_store.update_status(
            uploaded_job.id,
            JobStatus.ANALYZED,
            analysis_artifact_ref="file:///tmp/summary.json",
        )

        assert job.status == JobStatus.ANALYZED
        assert job.analysis_artifact_ref == "file:///tmp/summary.json"
        assert job.analyzed_at is not None
        assert job.last_error is None

    def test_analyzed_requires_artifact_ref(self, job_store, uploaded_job):
        _claim(job_store, uploaded_job.id)

        with pytest.raises(ValueError):
            job_store.update_status(uploaded_job.id, JobStatus.ANALYZED)

    def test_failed_requires_error(self, job_store, uploaded_job):
        _claim(job_store, uploaded_job.id)

        with pytest.raises(ValueError):
            job_store.update_status(uploaded_job.id, JobStatus.FAILED)

    def test_unknown_fields_rejected(self, job_store, uploaded_job):
        with pytest.raises(ValueError):
            job_store.update_status(uploaded_job.id, JobStatus.ANALYZING, source_ref="x")

    def test_cannot_finish_without_claim(self, job_store, uploaded_job):
        with pytest.raises(JobConflictError):
            job_store.update_status(
                uploaded_job.id,
                JobStatus.ANALYZED,
                analysis_artifact_ref="file:///tmp/summary.json",
            )

        assert job_store.get(uploaded_job.id).status == JobStatus.UPLOADED

    def test_failed_records_error_kind(self, job_store, uploaded_job):
        _claim(job_store, uploaded_job.id)

        job = job_store.update_status(
            uploaded_job.id,
            JobStatus.FAILED,
            last_error="Annotation timeout: operation op did not complete within 600 seconds",
            last_error_kind=ErrorKind.TIMEOUT,
        )

        assert job.status == JobStatus.FAILED
        assert job.last_error_kind == ErrorKind.TIMEOUT
        assert "timeout" in job.last_error.lower()
        assert job.analysis_artifact_ref is None

    def test_new_claim_clears_previous_error(self, job_store, uploaded_job):
        _claim(job_store, uploaded_job.id)
        job_store.update_status(uploaded_job.id, JobStatus.FAILED, last_error="boom")

        job = _claim(job_store, uploaded_job.id)

        assert job.last_error is None
        assert job.last_error_kind is None
        assert job.analysis_attempts == 2

    def test_expected_status_narrows_sources(self, job_store, uploaded_job):
        with pytest.raises(JobConflictError):
            job_store.update_status(
                uploaded_job.id,
                JobStatus.ANALYZING,
                expected={JobStatus.FAILED},
            )

    def test_second_claim_with_same_attempt_conflicts(self, job_store, uploaded_job):
        job_store.update_status(
            uploaded_job.id,
            JobStatus.ANALYZING,
            expected={JobStatus.UPLOADED},
            expected_attempts=0,
        )

        with pytest.raises(JobConflictError):
            job_store.update_status(
                uploaded_job.id,
                JobStatus.ANALYZING,
                expected={JobStatus.UPLOADED, JobStatus.ANALYZING},
                expected_attempts=0,
            )

        assert job_store.get(uploaded_job.id).analysis_attempts == 1

    def test_analyzed_at_is_kept_across_reanalysis(self, job_store, uploaded_job):
        _claim(job_store, uploaded_job.id)
        first = job_store.update_status(
            uploaded_job.id, JobStatus.ANALYZED, analysis_artifact_ref="ref-1"
        )
        _claim(job_store, uploaded_job.id)

        second = job_store.update_status(
            uploaded_job.id, JobStatus.ANALYZED, analysis_artifact_ref="ref-2"
        )

        assert second.analyzed_at == first.analyzed_at
        assert second.analysis_artifact_ref == "ref-2"
        assert second.analysis_attempts == 2


class TestListJobs:
    def test_newest_first_with_filter_and_limit(self, job_store):
        ids = [job_store.create(f"gs://bucket/{i}.mp4") for i in range(3)]
        _claim(job_store, ids[0])

        all_jobs = job_store.list_jobs()
        uploaded = job_store.list_jobs(status=JobStatus.UPLOADED)

        assert [j.id for j in all_jobs] == list(reversed(ids))
        assert {j.id for j in uploaded} == {ids[1], ids[2]}
        assert len(job_store.list_jobs(limit=2)) == 2


@pytest.mark.parametrize("seed", [1, 7, 42, 1234])
def test_random_histories_keep_record_consistent(job_store, seed):
    """Any sequence of updates leaves the record in a consistent state."""
    rng = random.Random(seed)
    job_id = job_store.create("gs://bucket/clip.mp4")
    claims = 0

    for _ in range(40):
        action = rng.choice(["claim", "analyzed", "failed", "stale_claim"])
        job = job_store.get(job_id)
        try:
            if action == "claim":
                _claim(job_store, job_id)
            elif action == "stale_claim":
                job_store.update_status(
                    job_id,
                    JobStatus.ANALYZING,
                    expected={job.status},
                    expected_attempts=job.analysis_attempts + rng.choice([0, 1]),
                )
            elif action == "analyzed":
                job_store.update_status(
                    job_id, JobStatus.ANALYZED, analysis_artifact_ref=f"ref-{rng.random()}"
                )
            else:
                job_store.update_status(
                    job_id,
                    JobStatus.FAILED,
                    last_error="boom",
                    last_error_kind=rng.choice(list(ErrorKind)),
                )
        except JobConflictError:
            assert job_store.get(job_id) == job
            continue

        after = job_store.get(job_id)
        if after.status == JobStatus.ANALYZING:
            claims += 1
            assert after.analysis_attempts == job.analysis_attempts + 1
        if after.status == JobStatus.ANALYZED:
            assert after.analysis_artifact_ref
            assert after.last_error is None
            assert after.analyzed_at is not None
        if after.status == JobStatus.FAILED:
            assert after.last_error == "boom"
            assert after.analysis_artifact_ref is None

    assert job_store.get(job_id).analysis_attempts == claims


def test_concurrent_claims_have_one_winner():
    store = InMemoryJobStore()
    job_id = store.create("gs://bucket/clip.mp4")
    barrier = threading.Barrier(8)
    outcomes: list[str] = []

    def claim() -> None:
        barrier.wait()
        try:
            store.update_status(
                job_id,
                JobStatus.ANALYZING,
                expected={JobStatus.UPLOADED},
                expected_attempts=0,
            )
            outcomes.append("won")
        except JobConflictError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=claim) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("won") == 1
    assert outcomes.count("conflict") == 7
    assert store.get(job_id).analysis_attempts == 1
