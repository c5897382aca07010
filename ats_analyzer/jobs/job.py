"""Job entity: one resume evaluation request and its lifecycle state.

State machine::

    PROCESSING --mark_completed--> COMPLETED
    PROCESSING --mark_error------> ERROR

COMPLETED and ERROR are terminal. The entity only mutates its own fields;
persisting a transition is the caller's job.
"""

import re
import uuid
from datetime import datetime, timedelta, timezone

from ats_analyzer.core.errors import InvalidRequestError, InvalidTransitionError
from ats_analyzer.core.schemas import AnalysisResult, JobStatus

__all__ = ["Job", "JobId", "JobStatus"]

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobId:
    """Opaque UUID identifier, the only key into a job store."""

    __slots__ = ("_value",)

    def __init__(self, value: str | None = None) -> None:
        if value is None:
            value = str(uuid.uuid4())
        if not isinstance(value, str) or not _UUID_RE.match(value):
            msg = f"Invalid job id format: {value!r}"
            raise InvalidRequestError(msg)
        self._value = value

    @property
    def value(self) -> str:
        return self._value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JobId):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"JobId({self._value!r})"


class Job:
    """Mutable state machine for a single evaluation."""

    def __init__(
        self,
        job_id: JobId,
        status: JobStatus,
        created_at: datetime,
        completed_at: datetime | None = None,
        error_message: str | None = None,
        result: AnalysisResult | None = None,
    ) -> None:
        self._id = job_id
        self._status = status
        self._created_at = created_at
        self._completed_at = completed_at
        self._error_message = error_message
        self._result = result

    @classmethod
    def create(cls, job_id: JobId | None = None, now: datetime | None = None) -> "Job":
        """Start a new job in PROCESSING."""
        return cls(job_id or JobId(), JobStatus.PROCESSING, now or _utcnow())

    @classmethod
    def restore(
        cls,
        job_id: JobId,
        status: JobStatus,
        created_at: datetime,
        completed_at: datetime | None = None,
        error_message: str | None = None,
        result: AnalysisResult | None = None,
    ) -> "Job":
        """Rebuild a stored job, rejecting field combinations no transition produces.

        Raises:
            ValueError: If the stored fields violate the status invariants.
        """
        if status is JobStatus.COMPLETED:
            if result is None or error_message is not None or completed_at is None:
                msg = "completed job must carry a result and completion time only"
                raise ValueError(msg)
            if completed_at < created_at:
                msg = "completed_at precedes created_at"
                raise ValueError(msg)
        elif status is JobStatus.ERROR:
            if error_message is None or result is not None or completed_at is not None:
                msg = "failed job must carry an error message and no result or completion time"
                raise ValueError(msg)
        elif result is not None or error_message is not None or completed_at is not None:
            msg = "processing job must not carry a result or error"
            raise ValueError(msg)
        return cls(job_id, status, created_at, completed_at, error_message, result)

    @property
    def id(self) -> JobId:
        return self._id

    @property
    def status(self) -> JobStatus:
        return self._status

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def completed_at(self) -> datetime | None:
        return self._completed_at

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def result(self) -> AnalysisResult | None:
        return self._result

    def mark_completed(self, result: AnalysisResult, now: datetime | None = None) -> None:
        self._ensure_processing(JobStatus.COMPLETED)
        completed_at = now or _utcnow()
        self._status = JobStatus.COMPLETED
        self._result = result
        self._completed_at = max(completed_at, self._created_at)

    def mark_error(self, message: str) -> None:
        self._ensure_processing(JobStatus.ERROR)
        self._status = JobStatus.ERROR
        self._error_message = message

    def is_processing(self) -> bool:
        return self._status is JobStatus.PROCESSING

    def is_completed(self) -> bool:
        return self._status is JobStatus.COMPLETED

    def has_error(self) -> bool:
        return self._status is JobStatus.ERROR

    def is_terminal(self) -> bool:
        return not self.is_processing()

    def age(self, now: datetime | None = None) -> timedelta:
        return (now or _utcnow()) - self._created_at

    def _ensure_processing(self, target: JobStatus) -> None:
        if self._status is not JobStatus.PROCESSING:
            msg = (
                f"Job {self._id} cannot move from {self._status.value} "
                f"to {target.value}"
            )
            raise InvalidTransitionError(msg)

    def __repr__(self) -> str:
        return f"Job(id={self._id.value!r}, status={self._status.value!r})"
