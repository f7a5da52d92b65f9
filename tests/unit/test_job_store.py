# ============================================================================
# FILE: tests/unit/test_job_store.py
# ============================================================================
"""
Unit tests for the job repositories (in-memory and SQLite)
"""

import pytest

from nanopore_ingestion.core.context.enums import ProcessingStatus, ProcessingType
from nanopore_ingestion.core.context.extracted_field import ExtractedField
from nanopore_ingestion.core.context.job import ExtractionJob, ProcessingResult
from nanopore_ingestion.core.job_store import InMemoryJobRepository, SQLiteJobRepository
from nanopore_ingestion.utils.exceptions import InvalidJobTransitionError, JobNotFoundError


@pytest.fixture(params=["memory", "sqlite"])
def repository(request, tmp_path):
    if request.param == "memory":
        return InMemoryJobRepository()
    return SQLiteJobRepository(tmp_path / "jobs.db")


def new_job(**kwargs):
    kwargs.setdefault("file_name", "form.pdf")
    kwargs.setdefault("file_size", 100)
    return ExtractionJob(**kwargs)


def test_create_and_get(repository):
    job = repository.create(new_job(sample_id="S-1"))

    stored = repository.get_by_id(job.id)
    assert stored.id == job.id
    assert stored.sample_id == "S-1"
    assert stored.status == ProcessingStatus.PENDING


def test_missing_job(repository):
    with pytest.raises(JobNotFoundError):
        repository.get_by_id("does-not-exist")


def test_status_result_error(repository):
    done = repository.create(new_job())
    repository.update_status(done.id, ProcessingStatus.PROCESSING, progress=10)
    result = ProcessingResult(
        extracted_fields=[ExtractedField("sample_name", "S-1", 0.8)],
        confidence=0.8,
    )
    completed = repository.update_result(done.id, result)

    assert completed.status == ProcessingStatus.COMPLETED
    assert repository.get_by_id(done.id).result.extracted_fields[0].value == "S-1"

    broken = repository.create(new_job())
    repository.update_status(broken.id, ProcessingStatus.PROCESSING)
    failed = repository.update_error(broken.id, "boom")

    assert failed.status == ProcessingStatus.FAILED
    assert repository.get_by_id(broken.id).error == "boom"


def test_terminal_jobs_are_frozen(repository):
    job = repository.create(new_job())
    repository.update_status(job.id, ProcessingStatus.PROCESSING)
    repository.update_error(job.id, "boom")

    with pytest.raises(InvalidJobTransitionError):
        repository.update_status(job.id, ProcessingStatus.PROCESSING)
    assert repository.get_by_id(job.id).status == ProcessingStatus.FAILED


def test_queries(repository):
    a = repository.create(new_job(sample_id="S-1"))
    b = repository.create(new_job(sample_id="S-1", processing_type=ProcessingType.AI_EXTRACTION))
    repository.create(new_job(sample_id="S-2"))
    repository.update_status(a.id, ProcessingStatus.PROCESSING)

    assert {j.id for j in repository.get_by_sample("S-1")} == {a.id, b.id}
    assert [j.id for j in repository.get_by_status(ProcessingStatus.PROCESSING)] == [a.id]
    assert [j.id for j in repository.get_by_type(ProcessingType.AI_EXTRACTION)] == [b.id]
    assert len(repository.list_jobs(limit=2)) == 2
    assert len(repository.list_jobs(limit=10, offset=2)) == 1


def test_statistics(repository):
    job = repository.create(new_job())
    repository.update_status(job.id, ProcessingStatus.PROCESSING)
    repository.update_result(job.id, ProcessingResult(confidence=0.6))
    repository.create(new_job())

    stats = repository.get_statistics()

    assert stats["total"] == 2
    assert stats["by_status"]["completed"] == 1
    assert stats["by_status"]["pending"] == 1
    assert stats["by_status"]["failed"] == 0
    assert stats["average_confidence"] == pytest.approx(0.6)


def test_delete(repository):
    job = repository.create(new_job())

    assert repository.delete(job.id) is True
    assert repository.delete(job.id) is False
    with pytest.raises(JobNotFoundError):
        repository.get_by_id(job.id)
