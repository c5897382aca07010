"""Redis-backed job store. Expiry is enforced by the server."""

import logging
import math
import os
from datetime import datetime, timedelta, timezone
from typing import Any

import redis

from ats_analyzer.core.errors import CorruptRecordError, StoreUnavailableError
from ats_analyzer.jobs.job import Job, JobId
from ats_analyzer.jobs.records import dumps_job, loads_job
from ats_analyzer.jobs.store.base import JobStore

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)
DEFAULT_KEY_PREFIX = "job:"


class RedisJobStore(JobStore):
    """One key per job holding the serialized record.

    Each write sets the key's expiry to the job's remaining lifetime, counted
    from ``created_at``, so rewriting a job never extends it. A missing key is
    the only expiry signal on read.
    """

    def __init__(
        self,
        url: str | None = None,
        ttl: timedelta = DEFAULT_TTL,
        *,
        client: Any = None,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ) -> None:
        super().__init__(ttl)
        self._key_prefix = key_prefix
        if client is None:
            redis_url = url or os.environ.get("REDIS_URL")
            if not redis_url:
                msg = "REDIS_URL environment variable or store.redis_url is required"
                raise ValueError(msg)
            client = redis.Redis.from_url(redis_url)
        self._client = client

    @property
    def backend_id(self) -> str:
        return "redis"

    def _key(self, job_id: JobId) -> str:
        return f"{self._key_prefix}{job_id.value}"

    def _remaining_seconds(self, job: Job) -> int:
        remaining = self._ttl - job.age(datetime.now(timezone.utc))
        return math.ceil(remaining.total_seconds())

    def save(self, job: Job) -> None:
        key = self._key(job.id)
        seconds = self._remaining_seconds(job)
        try:
            if seconds <= 0:
                logger.debug("Job %s already past its TTL, dropping key", job.id)
                self._client.delete(key)
                return
            self._client.set(key, dumps_job(job), ex=seconds)
        except redis.RedisError as e:
            msg = f"Failed to write job {job.id} to Redis: {e}"
            raise StoreUnavailableError(msg) from e

    def find_by_id(self, job_id: JobId) -> Job | None:
        try:
            raw = self._client.get(self._key(job_id))
        except redis.RedisError as e:
            msg = f"Failed to read job {job_id} from Redis: {e}"
            raise StoreUnavailableError(msg) from e
        if raw is None:
            return None
        try:
            return loads_job(raw)
        except CorruptRecordError:
            logger.warning("Ignoring corrupt job record %s", self._key(job_id), exc_info=True)
            return None

    def delete(self, job_id: JobId) -> None:
        try:
            self._client.delete(self._key(job_id))
        except redis.RedisError as e:
            msg = f"Failed to delete job {job_id} from Redis: {e}"
            raise StoreUnavailableError(msg) from e

    def purge_expired(self) -> int:
        # Keys carry their own expiry, nothing to sweep client-side
        return 0
