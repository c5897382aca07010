"""Orchestrator: accepts a submission, persists the job, runs analysis in the background.

Data flow:
  1. Validate request (synchronous, no job on failure)
  2. Create job in PROCESSING and persist it
  3. Schedule the background phase and return the handle
  4. [background] Extract text → build documents → analysis engine
  5. [background] Persist exactly one terminal state (COMPLETED or ERROR)
"""

import copy
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from typing import Protocol

from ats_analyzer.analysis.extractor import looks_like_pdf
from ats_analyzer.core.config import IntakeConfig
from ats_analyzer.core.documents import JobDescription, Resume
from ats_analyzer.core.errors import InvalidRequestError, TextExtractionError
from ats_analyzer.core.schemas import AnalysisResult, JobHandle
from ats_analyzer.jobs.job import Job
from ats_analyzer.jobs.store.base import JobStore

logger = logging.getLogger(__name__)


class Analyzer(Protocol):
    def analyze(self, resume_text: str, job_description_text: str) -> AnalysisResult: ...


class JobOrchestrator:
    """Submit-and-process use case.

    Usage::

        orchestrator = JobOrchestrator(store, engine, extract_text)
        handle = orchestrator.submit(pdf_bytes, job_description)
        ...  # poll with StatusReader(store).get_status(handle.job_id)

    Background outcomes are only ever observable through the store; nothing
    raised in the background phase reaches the submitter.
    """

    def __init__(
        self,
        store: JobStore,
        engine: Analyzer,
        extract_text: Callable[[bytes], str],
        *,
        intake: IntakeConfig | None = None,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = 4,
    ) -> None:
        self._store = store
        self._engine = engine
        self._extract_text = extract_text
        self._intake = intake or IntakeConfig()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="ats-job"
        )
        self._pending: set[Future[None]] = set()
        self._pending_lock = threading.Lock()

    def submit(
        self,
        resume_bytes: bytes,
        job_description_text: str,
        file_name: str | None = None,
    ) -> JobHandle:
        """Accept a submission and return immediately with a PROCESSING handle.

        Raises:
            InvalidRequestError: If the resume or job description is missing,
                or the resume exceeds the size limit or is not a PDF. No job
                is created.
            StoreUnavailableError: If the new job cannot be persisted.
        """
        self._validate(resume_bytes, job_description_text)

        job = Job.create()
        self._store.save(job)
        logger.info(
            "Accepted job %s (%s, %d bytes)", job.id, file_name or "resume.pdf", len(resume_bytes)
        )

        try:
            future = self._executor.submit(
                self._process, job, resume_bytes, job_description_text, file_name
            )
        except RuntimeError as e:
            self._persist_error(job, f"Could not schedule analysis: {e}")
            raise
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

        return JobHandle(job_id=job.id.value, status=job.status, created_at=job.created_at)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until background work pending at call time finishes.

        Returns True if everything finished within ``timeout``.
        """
        with self._pending_lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
        elif wait:
            self.wait()

    def __enter__(self) -> "JobOrchestrator":
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown(wait=True)

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _validate(self, resume_bytes: bytes, job_description_text: str) -> None:
        if not resume_bytes:
            msg = "Resume file is required"
            raise InvalidRequestError(msg)
        if not job_description_text or not job_description_text.strip():
            msg = "Job description is required"
            raise InvalidRequestError(msg)
        if len(resume_bytes) > self._intake.max_file_size_bytes:
            msg = (
                f"Resume file too large: {len(resume_bytes)} bytes "
                f"(limit {self._intake.max_file_size_bytes})"
            )
            raise InvalidRequestError(msg)
        if not looks_like_pdf(resume_bytes):
            msg = "File is not a valid PDF format"
            raise InvalidRequestError(msg)

    def _forget(self, future: Future[None]) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _process(
        self,
        job: Job,
        resume_bytes: bytes,
        job_description_text: str,
        file_name: str | None,
    ) -> None:
        """Background phase. Never raises."""
        try:
            result = self._evaluate(resume_bytes, job_description_text, file_name)
            completed = copy.deepcopy(job)
            completed.mark_completed(result)
            self._store.update(completed)
            logger.info(
                "Job %s completed (overall score %s)", job.id, result.overall.total_score
            )
        except Exception as e:
            logger.exception("Job %s failed", job.id)
            self._persist_error(job, str(e) or type(e).__name__)

    def _evaluate(
        self,
        resume_bytes: bytes,
        job_description_text: str,
        file_name: str | None,
    ) -> AnalysisResult:
        text = self._extract_text(resume_bytes)
        if not text or not text.strip():
            msg = "Empty resume text extracted"
            raise TextExtractionError(msg)

        resume = Resume(content=text, file_name=file_name or "resume.pdf")
        job_description = JobDescription(content=job_description_text)

        if resume.is_empty() or not resume.has_valid_content(self._intake.min_resume_chars):
            msg = (
                "Invalid resume content: at least "
                f"{self._intake.min_resume_chars} characters of text are required"
            )
            raise InvalidRequestError(msg)
        if job_description.is_empty() or not job_description.has_valid_content(
            self._intake.min_job_description_chars
        ):
            msg = (
                "Invalid job description content: at least "
                f"{self._intake.min_job_description_chars} characters are required"
            )
            raise InvalidRequestError(msg)

        return self._engine.analyze(resume.content, job_description.content)

    def _persist_error(self, job: Job, message: str) -> None:
        """Write the ERROR transition; a failed write leaves the job PROCESSING until TTL."""
        failed = copy.deepcopy(job)
        failed.mark_error(message)
        try:
            self._store.update(failed)
        except Exception:
            logger.exception("Could not persist error state for job %s", job.id)
