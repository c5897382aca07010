"""CLI entry point for the ATS resume analyzer."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

from ats_analyzer.core.config import Settings
from ats_analyzer.core.errors import InvalidRequestError, JobNotFoundError, StoreError
from ats_analyzer.core.schemas import JobStatus, JobStatusView
from ats_analyzer.jobs.store import get_store
from ats_analyzer.jobs.store.base import JobStore
from ats_analyzer.pipeline.status import StatusReader

DEFAULT_CONFIG = "config/settings.yaml"

EXIT_ERROR = 1
EXIT_NOT_FOUND = 2
EXIT_TIMEOUT = 3


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="ATS resume analyzer - score a resume against a job description",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to settings YAML file (default: {DEFAULT_CONFIG})",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- submit ---
    submit_parser = subparsers.add_parser(
        "submit", parents=[common], help="Submit a resume for analysis",
    )
    submit_parser.add_argument("--resume", required=True, help="Path to resume PDF file")
    submit_parser.add_argument(
        "--job-description",
        required=True,
        help="Path to a job description text file, or the text itself",
    )
    submit_parser.add_argument(
        "--file-name",
        help="File name recorded with the resume (default: the resume's name)",
    )
    submit_parser.add_argument(
        "--wait",
        action="store_true",
        help="Poll until the job finishes and print the result "
        "(always on for the memory backend)",
    )

    # --- status ---
    status_parser = subparsers.add_parser(
        "status", parents=[common], help="Show the status of a submitted job",
    )
    status_parser.add_argument("job_id", help="Job id returned by submit")

    # --- purge ---
    subparsers.add_parser(
        "purge", parents=[common], help="Remove expired jobs from the store",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def load_settings(path: str) -> Settings:
    """Load settings, falling back to defaults when the default file is absent."""
    if path == DEFAULT_CONFIG and not Path(path).exists():
        return Settings()
    return Settings.from_yaml(path)


def read_job_description(value: str) -> str:
    """Treat ``value`` as a path when it names an existing file, else as text."""
    candidate = Path(value)
    try:
        if candidate.is_file():
            return candidate.read_text(encoding="utf-8")
    except OSError:
        return value
    return value


def _print_json(data: dict[str, Any]) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def poll_until_done(reader: StatusReader, job_id: str, settings: Settings) -> JobStatusView | None:
    """Poll the status reader; None if the job is still processing at the end."""
    polling = settings.polling
    for _ in range(polling.max_attempts):
        view = reader.get_status(job_id)
        if view.status is not JobStatus.PROCESSING:
            return view
        time.sleep(polling.interval_seconds)
    return None


def cmd_submit(args: argparse.Namespace, settings: Settings, store: JobStore) -> int:
    """Handle submit subcommand."""
    from ats_analyzer.analysis.engine import AnalysisEngine
    from ats_analyzer.analysis.extractor import extract_text
    from ats_analyzer.analysis.llm import get_provider
    from ats_analyzer.pipeline.orchestrator import JobOrchestrator

    resume_path = Path(args.resume)
    if not resume_path.exists():
        msg = f"Resume file not found: {resume_path}"
        raise FileNotFoundError(msg)

    engine = AnalysisEngine(get_provider(settings.analysis.provider), settings.analysis)
    orchestrator = JobOrchestrator(
        store,
        engine,
        extract_text,
        intake=settings.intake,
        max_workers=settings.worker.max_workers,
    )
    with orchestrator:
        handle = orchestrator.submit(
            resume_path.read_bytes(),
            read_job_description(args.job_description),
            file_name=args.file_name or resume_path.name,
        )
        _print_json(handle.to_json_dict())

        if not (args.wait or store.backend_id == "memory"):
            return 0

        view = poll_until_done(StatusReader(store), handle.job_id, settings)

    if view is None:
        print(f"Job {handle.job_id} still processing after polling limit", file=sys.stderr)
        return EXIT_TIMEOUT
    _print_json(view.to_json_dict())
    return EXIT_ERROR if view.status is JobStatus.ERROR else 0


def cmd_status(args: argparse.Namespace, store: JobStore) -> int:
    """Handle status subcommand."""
    view = StatusReader(store).get_status(args.job_id)
    _print_json(view.to_json_dict())
    return 0


def cmd_purge(store: JobStore) -> int:
    """Handle purge subcommand."""
    removed = store.purge_expired()
    print(f"Purged {removed} expired job(s) from the {store.backend_id} store.")
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
        store = get_store(settings.store)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    try:
        if args.command == "submit":
            code = cmd_submit(args, settings, store)
        elif args.command == "status":
            code = cmd_status(args, store)
        else:
            code = cmd_purge(store)
    except JobNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_NOT_FOUND)
    except (FileNotFoundError, ImportError, InvalidRequestError, StoreError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
