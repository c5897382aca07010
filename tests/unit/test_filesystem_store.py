"""Tests for the directory-backed job store."""

import json
import os
import time
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from ats_analyzer.core.errors import StoreUnavailableError
from ats_analyzer.core.schemas import AnalysisResult
from ats_analyzer.jobs.job import Job, JobId, JobStatus
from ats_analyzer.jobs.store.filesystem import FileSystemJobStore


@pytest.fixture()
def store(tmp_path: Path) -> FileSystemJobStore:
    return FileSystemJobStore(tmp_path / "jobs", ttl=timedelta(hours=24))


def _age_file(path: Path, seconds: float) -> None:
    past = time.time() - seconds
    os.utime(path, (past, past))


class TestSaveAndFind:
    def test_backend_id(self, store: FileSystemJobStore) -> None:
        assert store.backend_id == "filesystem"

    def test_default_ttl_is_one_day(self, tmp_path: Path) -> None:
        assert FileSystemJobStore(tmp_path).ttl == timedelta(hours=24)

    def test_creates_directory_on_first_save(self, store: FileSystemJobStore) -> None:
        assert not store.directory.exists()
        store.save(Job.create())
        assert store.directory.is_dir()

    def test_file_named_by_job_id(self, store: FileSystemJobStore) -> None:
        job = Job.create()
        store.save(job)
        path = store.directory / f"{job.id.value}.json"
        assert path.exists()
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["id"] == job.id.value
        assert data["status"] == "processing"

    def test_no_temp_files_left_behind(self, store: FileSystemJobStore) -> None:
        store.save(Job.create())
        assert [p.suffix for p in store.directory.iterdir()] == [".json"]

    def test_find_saved_job(self, store: FileSystemJobStore) -> None:
        job = Job.create()
        store.save(job)
        found = store.find_by_id(job.id)
        assert found is not None
        assert found.id == job.id
        assert found.created_at == job.created_at

    def test_unknown_id_returns_none(self, store: FileSystemJobStore) -> None:
        assert store.find_by_id(JobId()) is None

    def test_update_rewrites_whole_record(
        self, store: FileSystemJobStore, sample_result: AnalysisResult
    ) -> None:
        job = Job.create()
        store.save(job)
        job.mark_completed(sample_result)
        store.update(job)

        found = store.find_by_id(job.id)
        assert found is not None
        assert found.status is JobStatus.COMPLETED
        assert found.result == sample_result
        assert len(list(store.directory.glob("*.json"))) == 1

    def test_survives_new_store_instance(self, store: FileSystemJobStore) -> None:
        job = Job.create()
        store.save(job)
        reopened = FileSystemJobStore(store.directory)
        assert reopened.find_by_id(job.id) is not None


class TestCorruptRecords:
    def test_garbage_file_reads_as_absent(self, store: FileSystemJobStore) -> None:
        job_id = JobId()
        store.directory.mkdir(parents=True)
        (store.directory / f"{job_id.value}.json").write_text("{not json", encoding="utf-8")
        assert store.find_by_id(job_id) is None

    def test_invariant_violation_reads_as_absent(self, store: FileSystemJobStore) -> None:
        job = Job.create()
        store.save(job)
        path = store.directory / f"{job.id.value}.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        data["status"] = "completed"
        path.write_text(json.dumps(data), encoding="utf-8")
        assert store.find_by_id(job.id) is None


class TestDelete:
    def test_delete_removes_file(self, store: FileSystemJobStore) -> None:
        job = Job.create()
        store.save(job)
        store.delete(job.id)
        assert store.find_by_id(job.id) is None
        assert not list(store.directory.glob("*.json"))

    def test_delete_unknown_is_noop(self, store: FileSystemJobStore) -> None:
        store.delete(JobId())


class TestExpiry:
    def test_expired_file_is_absent_and_removed(self, store: FileSystemJobStore) -> None:
        job = Job.create()
        store.save(job)
        path = store.directory / f"{job.id.value}.json"
        _age_file(path, timedelta(hours=25).total_seconds())

        assert store.find_by_id(job.id) is None
        assert not path.exists()

    def test_recent_file_is_live(self, store: FileSystemJobStore) -> None:
        job = Job.create()
        store.save(job)
        _age_file(store.directory / f"{job.id.value}.json", timedelta(hours=23).total_seconds())
        assert store.find_by_id(job.id) is not None

    def test_purge_expired(self, store: FileSystemJobStore) -> None:
        stale = [Job.create() for _ in range(2)]
        fresh = Job.create()
        for job in [*stale, fresh]:
            store.save(job)
        for job in stale:
            _age_file(store.directory / f"{job.id.value}.json", 90000)

        assert store.purge_expired() == 2
        assert store.find_by_id(fresh.id) is not None
        assert all(store.find_by_id(job.id) is None for job in stale)

    def test_purge_on_missing_directory(self, store: FileSystemJobStore) -> None:
        assert store.purge_expired() == 0


class TestUnavailable:
    def test_write_failure_raises_store_unavailable(self, store: FileSystemJobStore) -> None:
        with (
            patch(
                "ats_analyzer.jobs.store.filesystem.tempfile.mkstemp",
                side_effect=PermissionError("denied"),
            ),
            pytest.raises(StoreUnavailableError, match="Failed to write job"),
        ):
            store.save(Job.create())

    def test_read_failure_raises_store_unavailable(self, store: FileSystemJobStore) -> None:
        job = Job.create()
        store.save(job)
        with (
            patch.object(Path, "read_text", side_effect=PermissionError("denied")),
            pytest.raises(StoreUnavailableError, match="Failed to read job"),
        ):
            store.find_by_id(job.id)
