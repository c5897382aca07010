"""Process-local job store. Contents are lost when the process exits."""

import copy
import logging
import threading
from datetime import datetime, timedelta, timezone

from ats_analyzer.jobs.job import Job, JobId
from ats_analyzer.jobs.store.base import JobStore

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=1)


class MemoryJobStore(JobStore):
    """Dict-backed store with TTL measured from each job's ``created_at``.

    Jobs are copied on the way in and out so callers never share state with
    the stored record. Every save sweeps expired entries.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL) -> None:
        super().__init__(ttl)
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()

    @property
    def backend_id(self) -> str:
        return "memory"

    def save(self, job: Job) -> None:
        snapshot = copy.deepcopy(job)
        with self._lock:
            self._jobs[job.id.value] = snapshot
        self.purge_expired()

    def find_by_id(self, job_id: JobId) -> Job | None:
        now = datetime.now(timezone.utc)
        with self._lock:
            job = self._jobs.get(job_id.value)
            if job is None:
                return None
            if job.age(now) > self._ttl:
                del self._jobs[job_id.value]
                logger.debug("Job %s expired, purged on read", job_id)
                return None
            return copy.deepcopy(job)

    def delete(self, job_id: JobId) -> None:
        with self._lock:
            self._jobs.pop(job_id.value, None)

    def purge_expired(self) -> int:
        now = datetime.now(timezone.utc)
        with self._lock:
            expired = [key for key, job in self._jobs.items() if job.age(now) > self._ttl]
            for key in expired:
                del self._jobs[key]
        if expired:
            logger.debug("Purged %d expired job(s) from memory", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
