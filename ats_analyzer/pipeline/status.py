"""Status reader: poll a job by id and project it for the caller."""

import logging

from ats_analyzer.core.errors import JobNotFoundError, StoreUnavailableError
from ats_analyzer.core.schemas import JobStatusView
from ats_analyzer.jobs.job import JobId
from ats_analyzer.jobs.store.base import JobStore

logger = logging.getLogger(__name__)


class StatusReader:
    """Read-only query over the job store. Safe to call repeatedly."""

    def __init__(self, store: JobStore) -> None:
        self._store = store

    def get_status(self, job_id_text: str) -> JobStatusView:
        """Return the current view of a job.

        Raises:
            InvalidRequestError: If ``job_id_text`` is not a valid job id.
            JobNotFoundError: If no live job exists (never created, expired,
                or the store could not be read).
        """
        job_id = JobId(job_id_text.strip() if isinstance(job_id_text, str) else job_id_text)

        try:
            job = self._store.find_by_id(job_id)
        except StoreUnavailableError as e:
            logger.error("Store unavailable while reading job %s: %s", job_id, e)
            msg = f"Job not found: {job_id}"
            raise JobNotFoundError(msg) from e

        if job is None:
            msg = f"Job not found: {job_id}"
            raise JobNotFoundError(msg)
        return JobStatusView.from_job(job)
