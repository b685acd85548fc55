"""Tests for configuration and option models."""

import pytest
from pydantic import ValidationError

from hostqueue.core.config import (
    LogSettings,
    QueueSettings,
    Settings,
    get_settings,
    reload_settings,
)
from hostqueue.core.models import QueueOptions, RequestOptions


class TestQueueOptions:
    """Tests for QueueOptions."""

    def test_defaults(self):
        options = QueueOptions()
        assert options.max_concurrent == 2
        assert options.delay_ms == 300
        assert options.debug is False

    def test_rejects_negative_delay(self):
        with pytest.raises(ValidationError):
            QueueOptions(delay_ms=-1)

    def test_rejects_zero_concurrency(self):
        with pytest.raises(ValidationError):
            QueueOptions(max_concurrent=0)

    def test_from_settings(self):
        settings = Settings(queue=QueueSettings(max_concurrent=5, delay_ms=10, debug=True))
        options = QueueOptions.from_settings(settings)

        assert options.max_concurrent == 5
        assert options.delay_ms == 10
        assert options.debug is True

    def test_frozen(self):
        options = QueueOptions()
        with pytest.raises(ValidationError):
            options.delay_ms = 0


class TestRequestOptions:
    """Tests for RequestOptions."""

    def test_all_optional(self):
        options = RequestOptions()
        assert options.priority is None
        assert options.delay_ms is None
        assert options.max_concurrent is None
        assert options.group is None

    def test_negative_priority_allowed(self):
        assert RequestOptions(priority=-10).priority == -10

    def test_rejects_negative_delay(self):
        with pytest.raises(ValidationError):
            RequestOptions(delay_ms=-5)


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("HOSTQUEUE_MAX_CONCURRENT", raising=False)
        monkeypatch.delenv("HOSTQUEUE_DELAY_MS", raising=False)
        settings = reload_settings()

        assert settings.queue.max_concurrent == 2
        assert settings.queue.delay_ms == 300
        assert settings.log.level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("HOSTQUEUE_MAX_CONCURRENT", "4")
        monkeypatch.setenv("HOSTQUEUE_DELAY_MS", "25")
        monkeypatch.setenv("HOSTQUEUE_LOG_LEVEL", "debug")

        settings = reload_settings()

        assert settings.queue.max_concurrent == 4
        assert settings.queue.delay_ms == 25
        assert settings.log.level == "DEBUG"
        assert get_settings() is settings

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            LogSettings(level="verbose")

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "hostqueue.yaml"
        path.write_text("queue:\n  max_concurrent: 3\n  delay_ms: 50\nlog:\n  format: json\n")

        settings = Settings.from_yaml(path)

        assert settings.queue.max_concurrent == 3
        assert settings.queue.delay_ms == 50
        assert settings.log.format == "json"

    def test_from_yaml_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "missing.yaml")
