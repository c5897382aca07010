"""Configuration models and YAML loader for the resume analyzer."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

# Default TTLs per backend: volatile tracking vs durable storage
_DEFAULT_TTL_SECONDS: dict[str, int] = {
    "memory": 3600,
    "filesystem": 86400,
    "redis": 86400,
}


class StoreConfig(BaseModel):
    """Job store backend selection and expiry."""

    backend: Literal["memory", "filesystem", "redis"] = "memory"
    ttl_seconds: int | None = Field(default=None, ge=1)
    directory: str = "data/jobs"
    redis_url: str | None = None
    key_prefix: str = "job:"

    @property
    def effective_ttl_seconds(self) -> int:
        """Configured TTL, or the backend default when unset."""
        if self.ttl_seconds is not None:
            return self.ttl_seconds
        return _DEFAULT_TTL_SECONDS[self.backend]


class AnalysisConfig(BaseModel):
    """LLM provider choice and retry budget for the analysis engine."""

    provider: str = "openai"
    model: str | None = None
    max_attempts: int = Field(default=3, ge=1, le=10)
    retry_delay_seconds: float = Field(default=1.0, ge=0.0)
    max_resume_chars: int = Field(default=10000, ge=1)
    max_job_description_chars: int = Field(default=5000, ge=1)

    @field_validator("provider")
    @classmethod
    def provider_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "provider must not be empty"
            raise ValueError(msg)
        return v.strip().lower()


class IntakeConfig(BaseModel):
    """Limits applied to submitted documents."""

    max_file_size_bytes: int = Field(default=5 * 1024 * 1024, ge=1)
    min_resume_chars: int = Field(default=100, ge=0)
    min_job_description_chars: int = Field(default=50, ge=0)


class WorkerConfig(BaseModel):
    """Background executor sizing."""

    max_workers: int = Field(default=4, ge=1, le=64)


class PollingConfig(BaseModel):
    """Client-side polling used by the CLI ``--wait`` loop."""

    max_attempts: int = Field(default=30, ge=1)
    interval_seconds: float = Field(default=2.0, ge=0.0)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    intake: IntakeConfig = Field(default_factory=IntakeConfig)
    worker: WorkerConfig = Field(default_factory=WorkerConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
