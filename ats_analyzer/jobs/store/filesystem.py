"""Directory-backed job store: one JSON file per job, named by job id."""

import logging
import os
import tempfile
import time
from datetime import timedelta
from pathlib import Path

from ats_analyzer.core.errors import CorruptRecordError, StoreUnavailableError
from ats_analyzer.jobs.job import Job, JobId
from ats_analyzer.jobs.records import dumps_job, loads_job
from ats_analyzer.jobs.store.base import JobStore

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)
DEFAULT_DIRECTORY = Path("data/jobs")


class FileSystemJobStore(JobStore):
    """Durable store under ``directory``.

    Expiry uses the file's modification time. Writes go to a temporary file
    in the same directory and are moved over the target, so a reader sees
    either the previous record or the new one, never a partial file.
    """

    def __init__(
        self,
        directory: str | Path = DEFAULT_DIRECTORY,
        ttl: timedelta = DEFAULT_TTL,
    ) -> None:
        super().__init__(ttl)
        self._directory = Path(directory)

    @property
    def backend_id(self) -> str:
        return "filesystem"

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, job_id: JobId) -> Path:
        return self._directory / f"{job_id.value}.json"

    def _is_expired(self, path: Path) -> bool:
        age = time.time() - path.stat().st_mtime
        return age > self._ttl.total_seconds()

    def save(self, job: Job) -> None:
        payload = dumps_job(job)
        target = self._path(job.id)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=f".{job.id.value}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            msg = f"Failed to write job {job.id} to {target}: {e}"
            raise StoreUnavailableError(msg) from e

    def find_by_id(self, job_id: JobId) -> Job | None:
        path = self._path(job_id)
        try:
            if not path.exists():
                return None
            if self._is_expired(path):
                path.unlink(missing_ok=True)
                logger.debug("Job %s expired, removed %s", job_id, path.name)
                return None
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            # Removed by a concurrent sweep between the checks above
            return None
        except OSError as e:
            msg = f"Failed to read job {job_id} from {path}: {e}"
            raise StoreUnavailableError(msg) from e

        try:
            return loads_job(text)
        except CorruptRecordError:
            logger.warning("Ignoring corrupt job record %s", path, exc_info=True)
            return None

    def delete(self, job_id: JobId) -> None:
        path = self._path(job_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            msg = f"Failed to delete job {job_id} at {path}: {e}"
            raise StoreUnavailableError(msg) from e

    def purge_expired(self) -> int:
        try:
            candidates = list(self._directory.glob("*.json"))
        except OSError:
            logger.warning("Could not list %s for expiry sweep", self._directory, exc_info=True)
            return 0

        removed = 0
        for path in candidates:
            try:
                if self._is_expired(path):
                    path.unlink(missing_ok=True)
                    removed += 1
                    logger.debug("Removed expired job file %s", path.name)
            except FileNotFoundError:
                continue
            except OSError:
                logger.warning("Failed to purge %s", path, exc_info=True)
        if removed:
            logger.info("Purged %d expired job file(s) from %s", removed, self._directory)
        return removed
