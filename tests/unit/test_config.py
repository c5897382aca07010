"""Tests for configuration models and YAML loading."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from ats_analyzer.core.config import (
    AnalysisConfig,
    IntakeConfig,
    PollingConfig,
    Settings,
    StoreConfig,
    WorkerConfig,
)

REPO_ROOT = Path(__file__).resolve().parents[2]


class TestStoreConfig:
    def test_defaults(self) -> None:
        s = StoreConfig()
        assert s.backend == "memory"
        assert s.ttl_seconds is None
        assert s.directory == "data/jobs"
        assert s.key_prefix == "job:"

    @pytest.mark.parametrize(
        ("backend", "expected"),
        [("memory", 3600), ("filesystem", 86400), ("redis", 86400)],
    )
    def test_backend_default_ttl(self, backend: str, expected: int) -> None:
        assert StoreConfig(backend=backend).effective_ttl_seconds == expected

    def test_explicit_ttl_wins(self) -> None:
        assert StoreConfig(backend="redis", ttl_seconds=600).effective_ttl_seconds == 600

    def test_ttl_min(self) -> None:
        with pytest.raises(ValidationError):
            StoreConfig(ttl_seconds=0)

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValidationError):
            StoreConfig(backend="sqlite")


class TestAnalysisConfig:
    def test_defaults(self) -> None:
        a = AnalysisConfig()
        assert a.provider == "openai"
        assert a.model is None
        assert a.max_attempts == 3
        assert a.retry_delay_seconds == 1.0
        assert a.max_resume_chars == 10000
        assert a.max_job_description_chars == 5000

    def test_provider_normalized(self) -> None:
        assert AnalysisConfig(provider="  Anthropic ").provider == "anthropic"

    def test_provider_required(self) -> None:
        with pytest.raises(ValidationError, match="provider must not be empty"):
            AnalysisConfig(provider="   ")

    def test_max_attempts_bounds(self) -> None:
        with pytest.raises(ValidationError):
            AnalysisConfig(max_attempts=0)
        with pytest.raises(ValidationError):
            AnalysisConfig(max_attempts=11)

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AnalysisConfig(retry_delay_seconds=-1)


class TestIntakeConfig:
    def test_defaults(self) -> None:
        i = IntakeConfig()
        assert i.max_file_size_bytes == 5 * 1024 * 1024
        assert i.min_resume_chars == 100
        assert i.min_job_description_chars == 50


class TestWorkerAndPolling:
    def test_worker_defaults(self) -> None:
        assert WorkerConfig().max_workers == 4

    def test_worker_bounds(self) -> None:
        with pytest.raises(ValidationError):
            WorkerConfig(max_workers=0)

    def test_polling_defaults(self) -> None:
        p = PollingConfig()
        assert p.max_attempts == 30
        assert p.interval_seconds == 2.0


class TestSettings:
    def test_all_defaults(self) -> None:
        s = Settings()
        assert s.store.backend == "memory"
        assert s.analysis.provider == "openai"

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        yaml_content = dedent("""\
            store:
              backend: redis
              redis_url: redis://localhost:6379/1
              key_prefix: "ats:"
            analysis:
              provider: gemini
              model: gemini-2.5-pro
              max_attempts: 5
            intake:
              min_resume_chars: 200
            worker:
              max_workers: 8
        """)
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml_content)

        settings = Settings.from_yaml(config_file)

        assert settings.store.backend == "redis"
        assert settings.store.redis_url == "redis://localhost:6379/1"
        assert settings.store.effective_ttl_seconds == 86400
        assert settings.analysis.provider == "gemini"
        assert settings.analysis.max_attempts == 5
        assert settings.intake.min_resume_chars == 200
        assert settings.worker.max_workers == 8
        assert settings.polling.max_attempts == 30

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")
        assert Settings.from_yaml(config_file) == Settings()

    def test_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml("/nonexistent/path.yaml")

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("analysis:\n  max_attempts: 0\n")
        with pytest.raises(ValidationError):
            Settings.from_yaml(config_file)

    def test_load_example_settings(self) -> None:
        """The shipped example config must be valid."""
        settings = Settings.from_yaml(REPO_ROOT / "config" / "settings.example.yaml")
        assert settings.store.backend == "filesystem"
        assert settings.analysis.provider == "openai"
