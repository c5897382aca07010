"""Serialization of jobs into the record shape shared by durable stores.

Record shape::

    {"id": "...", "status": "completed", "createdAt": "<ISO-8601>",
     "completedAt": "<ISO-8601>", "errorMessage": null, "result": {...}}

Decoding also accepts records written by older versions: the result may be a
nested object or a JSON-encoded string, stored under ``result`` or
``analysisResult``, and scores may be wrapped objects (see ``decode_score``).
"""

import json
from datetime import datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ats_analyzer.core.errors import CorruptRecordError
from ats_analyzer.core.schemas import AnalysisResult, JobStatus
from ats_analyzer.jobs.job import Job, JobId


class JobRecord(BaseModel):
    """Wire model for one persisted job."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    status: JobStatus
    created_at: datetime
    completed_at: datetime | None = None
    error_message: str | None = None
    result: AnalysisResult | None = Field(
        default=None,
        validation_alias=AliasChoices("result", "analysisResult"),
    )

    @field_validator("result", mode="before")
    @classmethod
    def result_from_json_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return json.loads(v)
        return v

    @field_validator("created_at", "completed_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


def job_to_record(job: Job) -> dict[str, Any]:
    """Encode a job as a JSON-safe dict."""
    record: dict[str, Any] = {
        "id": job.id.value,
        "status": job.status.value,
        "createdAt": job.created_at.isoformat(),
    }
    if job.completed_at is not None:
        record["completedAt"] = job.completed_at.isoformat()
    if job.error_message is not None:
        record["errorMessage"] = job.error_message
    if job.result is not None:
        record["result"] = job.result.to_json_dict()
    return record


def job_from_record(data: Any) -> Job:
    """Decode a record dict into a job whose invariants hold.

    Raises:
        CorruptRecordError: If the record cannot be decoded or violates the
            job invariants.
    """
    if not isinstance(data, dict):
        msg = f"Job record must be an object, got {type(data).__name__}"
        raise CorruptRecordError(msg)
    try:
        record = JobRecord.model_validate(data)
        return Job.restore(
            JobId(record.id),
            record.status,
            record.created_at,
            completed_at=record.completed_at,
            error_message=record.error_message,
            result=record.result,
        )
    except (ValidationError, ValueError) as e:
        msg = f"Invalid job record {data.get('id', '?')!r}: {e}"
        raise CorruptRecordError(msg) from e


def dumps_job(job: Job) -> str:
    return json.dumps(job_to_record(job), ensure_ascii=False)


def loads_job(text: str | bytes) -> Job:
    """Parse a JSON document produced by ``dumps_job`` (or an older writer)."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        msg = f"Job record is not valid JSON: {e}"
        raise CorruptRecordError(msg) from e
    return job_from_record(data)
