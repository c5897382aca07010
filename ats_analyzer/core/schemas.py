"""Core data models: scores, the five-section analysis result, job views."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import core_schema

from ats_analyzer.core.errors import OutOfRangeError

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler

    from ats_analyzer.jobs.job import Job

SCORE_MIN = 0
SCORE_MAX = 100


class Score:
    """Immutable 0-100 integer score with qualitative buckets.

    Integral floats are accepted; other floats are rounded to the nearest
    integer once they pass the range check.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int | float) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            msg = f"Score must be a number, got {type(value).__name__}"
            raise TypeError(msg)
        if not SCORE_MIN <= value <= SCORE_MAX:
            msg = f"Score must be between {SCORE_MIN} and {SCORE_MAX}, got {value}"
            raise OutOfRangeError(msg)
        object.__setattr__(self, "_value", int(round(value)))

    def __setattr__(self, name: str, value: object) -> None:
        msg = "Score is immutable"
        raise AttributeError(msg)

    @property
    def value(self) -> int:
        return self._value

    def is_excellent(self) -> bool:
        return self._value >= 90

    def is_good(self) -> bool:
        return self._value >= 70

    def is_fair(self) -> bool:
        return self._value >= 50

    def is_poor(self) -> bool:
        return self._value < 50

    def bucket(self) -> str:
        """Label of the highest bucket this score reaches."""
        if self.is_excellent():
            return "excellent"
        if self.is_good():
            return "good"
        if self.is_fair():
            return "fair"
        return "poor"

    def __int__(self) -> int:
        return self._value

    def __reduce__(self) -> tuple[type["Score"], tuple[int]]:
        return (Score, (self._value,))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Score):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"Score({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            decode_score,
            serialization=core_schema.plain_serializer_function_ser_schema(
                int, return_schema=core_schema.int_schema()
            ),
        )


def decode_score(raw: Any) -> Score:
    """Decode a stored score: a bare number, ``{"_value": n}`` or ``{"value": n}``.

    The wrapped forms are what older records contain, where the score object
    itself was serialized instead of its number.
    """
    if isinstance(raw, Score):
        return raw
    if isinstance(raw, dict):
        if "_value" in raw:
            raw = raw["_value"]
        elif "value" in raw:
            raw = raw["value"]
        else:
            msg = f"Unrecognised score object: {sorted(raw)}"
            raise ValueError(msg)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        msg = f"Score must be a number, got {type(raw).__name__}"
        raise ValueError(msg)
    return Score(raw)


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Analysis result
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    """Frozen model with snake_case attributes and camelCase wire names."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat explicit nulls as absent so optional fields take their defaults."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ContactInfo(_CamelModel):
    present: bool = False
    missing: list[str] = Field(default_factory=list)


class ResumeSections(_CamelModel):
    has_summary: bool = False
    has_proper_headings: bool = False
    properly_formatted_dates: bool = False


class JobTitleMatch(_CamelModel):
    score: Score
    explanation: str = ""


class TechnicalProficiency(_CamelModel):
    score: Score
    strengths: list[str] = Field(default_factory=list)
    gaps: list[str] = Field(default_factory=list)


class JobLevelMatch(_CamelModel):
    assessment: str = ""
    recommendation: str = ""


class MeasurableResults(_CamelModel):
    present: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)


class ResumeTone(_CamelModel):
    assessment: str = ""
    improvements: list[str] = Field(default_factory=list)


class WebPresence(_CamelModel):
    mentioned: list[str] = Field(default_factory=list)
    recommended: list[str] = Field(default_factory=list)


class ApplyingFor(_CamelModel):
    job_title: str = ""
    explanation: str = ""


class ShortlistRecommendation(_CamelModel):
    decision: str = ""
    explanation: str = ""


class SearchabilityAnalysis(_CamelModel):
    """ATS parseability: contact details, headings, title match."""

    score: Score
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    sections: ResumeSections = Field(default_factory=ResumeSections)
    job_title_match: JobTitleMatch
    recommendations: list[str] = Field(default_factory=list)


class HardSkillsAnalysis(_CamelModel):
    score: Score
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    technical_proficiency: TechnicalProficiency
    recommendations: list[str] = Field(default_factory=list)


class SoftSkillsAnalysis(_CamelModel):
    score: Score
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    leadership_indicators: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class RecruiterTipsAnalysis(_CamelModel):
    score: Score
    job_level_match: JobLevelMatch = Field(default_factory=JobLevelMatch)
    measurable_results: MeasurableResults = Field(default_factory=MeasurableResults)
    resume_tone: ResumeTone = Field(default_factory=ResumeTone)
    web_presence: WebPresence = Field(default_factory=WebPresence)
    recommendations: list[str] = Field(default_factory=list)


class OverallAnalysis(_CamelModel):
    total_score: Score
    applying_for: ApplyingFor = Field(default_factory=ApplyingFor)
    shortlist_recommendation: ShortlistRecommendation = Field(
        default_factory=ShortlistRecommendation
    )
    critical_improvements: list[str] = Field(default_factory=list)
    key_strengths: list[str] = Field(default_factory=list)


class AnalysisResult(_CamelModel):
    """Structured evaluation of one resume against one job description.

    Created once by the analysis engine and never mutated afterwards.
    """

    id: str
    searchability: SearchabilityAnalysis
    hard_skills: HardSkillsAnalysis
    soft_skills: SoftSkillsAnalysis
    recruiter_tips: RecruiterTipsAnalysis
    overall: OverallAnalysis
    created_at: datetime

    def to_json_dict(self) -> dict[str, Any]:
        """camelCase, JSON-safe representation used for persistence and output."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Use-case projections
# ---------------------------------------------------------------------------


class JobHandle(BaseModel):
    """What a submitter gets back before the analysis has run."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    status: JobStatus
    created_at: datetime

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class JobStatusView(BaseModel):
    """Read-only projection of a job for status polling."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    status: JobStatus
    created_at: datetime
    completed_at: datetime | None = None
    error_message: str | None = None
    result: AnalysisResult | None = None

    @classmethod
    def from_job(cls, job: Job) -> "JobStatusView":
        return cls(
            job_id=str(job.id),
            status=job.status,
            created_at=job.created_at,
            completed_at=job.completed_at,
            error_message=job.error_message,
            result=job.result if job.is_completed() else None,
        )

    def to_json_dict(self) -> dict[str, Any]:
        """snake_case envelope with the camelCase result embedded."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
