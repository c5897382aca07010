"""Retrying analysis engine: LLM call, response parsing, shape validation.

The engine is provider-agnostic. For each attempt it sends the prompt,
parses the raw text as JSON, checks the five-section contract and maps the
payload into an ``AnalysisResult``. Any failure in that chain costs one
attempt; after ``max_attempts`` failures ``AnalysisFailedError`` is raised.
"""

import json
import logging
import re
import time
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from ats_analyzer.analysis.llm.base import LLMProvider
from ats_analyzer.analysis.prompt import SYSTEM_PROMPT, build_prompt
from ats_analyzer.core.config import AnalysisConfig
from ats_analyzer.core.errors import AnalysisFailedError, PayloadValidationError
from ats_analyzer.core.schemas import AnalysisResult

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = (
    "searchability",
    "hard_skills",
    "soft_skills",
    "recruiter_tips",
    "overall",
)

SCORE_FIELDS = (
    "searchability.score",
    "searchability.job_title_match.score",
    "hard_skills.score",
    "hard_skills.technical_proficiency.score",
    "soft_skills.score",
    "recruiter_tips.score",
    "overall.total_score",
)

LIST_FIELDS = (
    "searchability.contact_info.missing",
    "searchability.recommendations",
    "hard_skills.matched_skills",
    "hard_skills.missing_skills",
    "hard_skills.technical_proficiency.strengths",
    "hard_skills.technical_proficiency.gaps",
    "hard_skills.recommendations",
    "soft_skills.matched_skills",
    "soft_skills.missing_skills",
    "soft_skills.leadership_indicators",
    "soft_skills.recommendations",
    "recruiter_tips.measurable_results.present",
    "recruiter_tips.measurable_results.missing",
    "recruiter_tips.resume_tone.improvements",
    "recruiter_tips.web_presence.mentioned",
    "recruiter_tips.web_presence.recommended",
    "overall.critical_improvements",
    "overall.key_strengths",
)

_MISSING = object()


def _strip_wrapping(raw_text: str) -> str:
    """Remove markdown fences and prose around the outermost JSON object."""
    cleaned = raw_text.strip()
    fenced = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", cleaned, re.DOTALL)
    if fenced:
        cleaned = fenced.group(1).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start : end + 1]
    return cleaned


def parse_payload(raw_text: str) -> Any:
    """Parse an LLM response as JSON, retrying once on the unwrapped text.

    Raises:
        PayloadValidationError: If the text is empty or not JSON either way.
    """
    if not raw_text or not raw_text.strip():
        msg = "Empty response from LLM"
        raise PayloadValidationError(msg)

    try:
        return json.loads(raw_text)
    except json.JSONDecodeError:
        pass

    cleaned = _strip_wrapping(raw_text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON response from LLM: {e}"
        raise PayloadValidationError(msg) from e


def _get_path(data: Any, path: str) -> Any:
    current = data
    for key in path.split("."):
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def validate_payload(data: Any) -> None:
    """Check the five-section contract without coercing anything.

    Raises:
        PayloadValidationError: On the first violation found.
    """
    if not isinstance(data, dict):
        msg = f"Response is not a JSON object (got {type(data).__name__})"
        raise PayloadValidationError(msg)

    for section in REQUIRED_SECTIONS:
        if not isinstance(data.get(section), dict):
            msg = f"Missing required section: {section}"
            raise PayloadValidationError(msg)

    for field in SCORE_FIELDS:
        value = _get_path(data, field)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 100:
            shown = "missing" if value is _MISSING else repr(value)
            msg = f"Invalid score value for {field}: {shown}"
            raise PayloadValidationError(msg)

    for field in LIST_FIELDS:
        value = _get_path(data, field)
        if not isinstance(value, list):
            shown = "missing" if value is _MISSING else type(value).__name__
            msg = f"Expected array for {field}, got: {shown}"
            raise PayloadValidationError(msg)


def map_payload(
    data: dict[str, Any],
    *,
    result_id: str | None = None,
    now: datetime | None = None,
) -> AnalysisResult:
    """Map a validated provider payload onto ``AnalysisResult``.

    Provider keys are snake_case, which the result models accept by field
    name; optional lists and text fields fall back to empty values.
    """
    return AnalysisResult.model_validate(
        {
            "id": result_id or str(uuid.uuid4()),
            "searchability": data["searchability"],
            "hard_skills": data["hard_skills"],
            "soft_skills": data["soft_skills"],
            "recruiter_tips": data["recruiter_tips"],
            "overall": data["overall"],
            "created_at": now or datetime.now(timezone.utc),
        }
    )


class AnalysisEngine:
    """Provider-independent analysis with bounded retries.

    Usage::

        engine = AnalysisEngine(get_provider("openai"), settings.analysis)
        result = engine.analyze(resume_text, job_description_text)

    Not idempotent: every attempt is a fresh LLM call.
    """

    def __init__(
        self,
        provider: LLMProvider,
        config: AnalysisConfig | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._provider = provider
        self._config = config or AnalysisConfig()
        self._sleep = sleep

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    def analyze(self, resume_text: str, job_description_text: str) -> AnalysisResult:
        """Evaluate a resume against a job description.

        Raises:
            AnalysisFailedError: After ``max_attempts`` failed attempts.
        """
        config = self._config
        prompt = build_prompt(
            resume_text,
            job_description_text,
            max_resume_chars=config.max_resume_chars,
            max_job_description_chars=config.max_job_description_chars,
        )

        last_error: Exception | None = None
        for attempt in range(1, config.max_attempts + 1):
            logger.debug("Analysis attempt %d/%d", attempt, config.max_attempts)
            try:
                raw = self._provider.complete(prompt, model=config.model, system=SYSTEM_PROMPT)
                payload = parse_payload(raw)
                validate_payload(payload)
                result = map_payload(payload)
                logger.info(
                    "Analysis succeeded on attempt %d/%d via %s",
                    attempt,
                    config.max_attempts,
                    self._provider.provider_id,
                )
                return result
            except Exception as e:
                last_error = e
                logger.warning(
                    "Analysis attempt %d/%d via %s failed: %s",
                    attempt,
                    config.max_attempts,
                    self._provider.provider_id,
                    e,
                )
                if attempt < config.max_attempts:
                    logger.info("Retrying in %.1fs...", config.retry_delay_seconds)
                    self._sleep(config.retry_delay_seconds)

        logger.error("Analysis failed after %d attempts", config.max_attempts)
        msg = f"Analysis failed after {config.max_attempts} attempts: {last_error}"
        raise AnalysisFailedError(msg) from last_error
