"""Abstract base class for job stores."""

from abc import ABC, abstractmethod
from datetime import timedelta

from ats_analyzer.jobs.job import Job, JobId


class JobStore(ABC):
    """Keyed, expiring storage for jobs.

    Every write is a full-record replace keyed by job id, so concurrent
    writers of one id resolve as last-write-wins. Reads of unknown or expired
    ids return None; expiry is measured against the backend's TTL.
    """

    def __init__(self, ttl: timedelta) -> None:
        if ttl <= timedelta(0):
            msg = f"ttl must be positive, got {ttl}"
            raise ValueError(msg)
        self._ttl = ttl

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    @abstractmethod
    def backend_id(self) -> str:
        """Unique identifier for this backend (e.g. 'memory')."""

    @abstractmethod
    def save(self, job: Job) -> None:
        """Write the full job record, replacing any previous one.

        Raises:
            StoreUnavailableError: If the backend cannot be written.
        """

    @abstractmethod
    def find_by_id(self, job_id: JobId) -> Job | None:
        """Return the live job for ``job_id`` or None if absent or expired.

        Expired entries found here are purged. Corrupt entries are logged
        and reported as None.

        Raises:
            StoreUnavailableError: If the backend cannot be read.
        """

    def update(self, job: Job) -> None:
        """Replace the stored job. Identical to ``save``."""
        self.save(job)

    @abstractmethod
    def delete(self, job_id: JobId) -> None:
        """Remove a job. Deleting an unknown id is a no-op."""

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed.

        Never raises: failures are logged and the sweep continues.
        """
