"""Shared fixtures: a valid five-section LLM payload and its mapped result."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from ats_analyzer.analysis.engine import map_payload
from ats_analyzer.core.schemas import AnalysisResult

FIXTURES_DIR = Path(__file__).parent / "fixtures"

RESULT_ID = "0b7d3c1e-5a7f-4f0e-9c1d-2b3a4c5d6e7f"
RESULT_CREATED_AT = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def load_sample_payload() -> dict[str, Any]:
    return json.loads((FIXTURES_DIR / "sample_analysis_response.json").read_text())


@pytest.fixture()
def sample_payload() -> dict[str, Any]:
    return load_sample_payload()


@pytest.fixture()
def sample_result(sample_payload: dict[str, Any]) -> AnalysisResult:
    return map_payload(sample_payload, result_id=RESULT_ID, now=RESULT_CREATED_AT)
