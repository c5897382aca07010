"""Per-request input documents: the resume text and the job description."""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

MIN_RESUME_CHARS = 100
MIN_JOB_DESCRIPTION_CHARS = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Resume(BaseModel):
    """Text extracted from an uploaded resume. Never persisted."""

    model_config = ConfigDict(frozen=True)

    content: str
    file_name: str = "resume.pdf"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    uploaded_at: datetime = Field(default_factory=_utcnow)

    def is_empty(self) -> bool:
        return not self.content.strip()

    def has_valid_content(self, min_chars: int = MIN_RESUME_CHARS) -> bool:
        return len(self.content) >= min_chars


class JobDescription(BaseModel):
    """Job posting text submitted alongside the resume."""

    model_config = ConfigDict(frozen=True)

    content: str
    job_title: str | None = None

    def is_empty(self) -> bool:
        return not self.content.strip()

    def has_valid_content(self, min_chars: int = MIN_JOB_DESCRIPTION_CHARS) -> bool:
        return len(self.content) >= min_chars
