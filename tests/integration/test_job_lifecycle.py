"""Integration test: submit, background analysis and polling with a mock provider."""

import json
import time
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from ats_analyzer.analysis.engine import AnalysisEngine
from ats_analyzer.analysis.llm.base import LLMProvider
from ats_analyzer.core.config import AnalysisConfig, StoreConfig
from ats_analyzer.core.errors import InvalidRequestError, JobNotFoundError
from ats_analyzer.core.schemas import JobStatus, JobStatusView
from ats_analyzer.jobs.job import JobId
from ats_analyzer.jobs.store import get_store
from ats_analyzer.jobs.store.base import JobStore
from ats_analyzer.pipeline.orchestrator import JobOrchestrator
from ats_analyzer.pipeline.status import StatusReader

RESUME_TEXT = (
    "Jane Doe\nSenior Python Engineer\n"
    "Eight years designing REST APIs with FastAPI and PostgreSQL, "
    "containerised with Docker. Mentored four junior developers."
)
JD_TEXT = (
    "Senior Python Engineer. You will build async services with FastAPI, "
    "run them on Kubernetes and mentor the team."
)
PDF_BYTES = b"%PDF-1.4 jane doe resume"

# ---------------------------------------------------------------------------
# Mock provider
# ---------------------------------------------------------------------------


class MockProvider(LLMProvider):
    """Returns pre-configured responses in order, recording each prompt."""

    def __init__(self, *responses: str) -> None:
        self._responses = list(responses)
        self.prompts: list[str] = []

    @property
    def provider_id(self) -> str:
        return "mock"

    @property
    def default_model(self) -> str:
        return "mock-1"

    @property
    def env_var(self) -> None:
        return None

    def complete(self, prompt: str, model: str | None = None, *, system: str | None = None) -> str:
        self.prompts.append(prompt)
        return self._responses.pop(0)


@pytest.fixture(params=["memory", "filesystem"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> JobStore:
    return get_store(StoreConfig(backend=request.param, directory=str(tmp_path / "jobs")))


def _poll(reader: StatusReader, job_id: str, timeout: float = 5.0) -> JobStatusView:
    deadline = time.monotonic() + timeout
    while True:
        view = reader.get_status(job_id)
        if view.status is not JobStatus.PROCESSING or time.monotonic() > deadline:
            return view
        time.sleep(0.01)


def _orchestrator(store: JobStore, provider: LLMProvider, extracted: str) -> JobOrchestrator:
    engine = AnalysisEngine(provider, AnalysisConfig(retry_delay_seconds=0))
    return JobOrchestrator(store, engine, lambda _: extracted, max_workers=2)


class TestJobLifecycle:
    def test_empty_job_description_rejected(self, store: JobStore) -> None:
        provider = MockProvider()
        with (
            patch.object(store, "save", wraps=store.save) as save,
            _orchestrator(store, provider, RESUME_TEXT) as orch,
        ):
            with pytest.raises(InvalidRequestError, match="Job description is required"):
                orch.submit(PDF_BYTES, "")
        save.assert_not_called()
        assert provider.prompts == []

    def test_empty_extraction_ends_in_error(self, store: JobStore) -> None:
        provider = MockProvider()
        with _orchestrator(store, provider, "") as orch:
            handle = orch.submit(PDF_BYTES, JD_TEXT)
            view = _poll(StatusReader(store), handle.job_id)

        assert view.status is JobStatus.ERROR
        assert view.error_message == "Empty resume text extracted"
        assert view.result is None
        assert provider.prompts == []

    def test_valid_submission_completes(
        self, store: JobStore, sample_payload: dict[str, Any]
    ) -> None:
        provider = MockProvider(json.dumps(sample_payload))
        with _orchestrator(store, provider, RESUME_TEXT) as orch:
            handle = orch.submit(PDF_BYTES, JD_TEXT, file_name="jane.pdf")
            assert handle.status is JobStatus.PROCESSING
            view = _poll(StatusReader(store), handle.job_id)

        assert view.status is JobStatus.COMPLETED
        data = view.to_json_dict()
        assert data["result"]["overall"]["totalScore"] == 88
        assert data["result"]["searchability"]["contactInfo"]["missing"] == ["LinkedIn URL"]
        assert view.completed_at is not None
        assert view.completed_at >= view.created_at
        assert JD_TEXT in provider.prompts[0]
        assert RESUME_TEXT in provider.prompts[0]

    def test_retry_then_complete(self, store: JobStore, sample_payload: dict[str, Any]) -> None:
        provider = MockProvider("Sorry, something went wrong", json.dumps(sample_payload))
        with _orchestrator(store, provider, RESUME_TEXT) as orch:
            handle = orch.submit(PDF_BYTES, JD_TEXT)
            view = _poll(StatusReader(store), handle.job_id)

        assert view.status is JobStatus.COMPLETED
        assert len(provider.prompts) == 2

    def test_retries_exhausted(self, store: JobStore) -> None:
        provider = MockProvider("", "", "")
        with _orchestrator(store, provider, RESUME_TEXT) as orch:
            handle = orch.submit(PDF_BYTES, JD_TEXT)
            view = _poll(StatusReader(store), handle.job_id)

        assert view.status is JobStatus.ERROR
        assert view.error_message == "Analysis failed after 3 attempts: Empty response from LLM"

    def test_terminal_state_is_stable(
        self, store: JobStore, sample_payload: dict[str, Any]
    ) -> None:
        provider = MockProvider(json.dumps(sample_payload))
        with _orchestrator(store, provider, RESUME_TEXT) as orch:
            handle = orch.submit(PDF_BYTES, JD_TEXT)
        reader = StatusReader(store)
        first = reader.get_status(handle.job_id)
        assert first.status is JobStatus.COMPLETED
        assert reader.get_status(handle.job_id) == first

    def test_unknown_and_malformed_ids(self, store: JobStore) -> None:
        reader = StatusReader(store)
        with pytest.raises(JobNotFoundError):
            reader.get_status(JobId().value)
        with pytest.raises(InvalidRequestError):
            reader.get_status("../../etc/passwd")


def test_provider_is_swappable(sample_payload: dict[str, Any]) -> None:
    """Any LLMProvider works; the result shape does not depend on it."""
    raw = json.dumps(sample_payload)
    wrapped = MagicMock(spec=LLMProvider)
    wrapped.provider_id = "other"
    wrapped.complete.return_value = f"```json\n{raw}\n```"

    store = get_store(StoreConfig())
    results = []
    for provider in (MockProvider(raw), wrapped):
        with _orchestrator(store, provider, RESUME_TEXT) as orch:
            handle = orch.submit(PDF_BYTES, JD_TEXT)
        view = StatusReader(store).get_status(handle.job_id)
        assert view.result is not None
        results.append(view.result.overall)

    assert results[0] == results[1]
