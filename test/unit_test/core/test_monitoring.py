"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Environment parsing into ``LogfireConfig``
- Initialization guards (disabled, missing token)
- Instrumentation selection
- Turn logging helpers staying silent when disabled and never raising
"""

import os
from unittest.mock import MagicMock, patch

import pytest

import venture_ai.core.monitoring as monitoring
from venture_ai.core.monitoring import LogfireConfig


@pytest.fixture(autouse=True)
def _reset_enabled(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(monitoring, "_enabled", False)


class TestLogfireConfigFromEnv:
    """Test environment variable configuration for Logfire."""

    def test_disabled_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            cfg = LogfireConfig.from_env()
        assert cfg.enabled is False
        assert cfg.token == ""
        assert cfg.service_name == "venture-ai"

    @pytest.mark.parametrize("value", ["true", "1", "yes", "TRUE"])
    def test_enabled_flag_values(self, value):
        with patch.dict(os.environ, {"LOGFIRE_ENABLED": value}, clear=True):
            assert LogfireConfig.from_env().enabled is True

    def test_reads_all_fields(self):
        env = {
            "LOGFIRE_ENABLED": "true",
            "LOGFIRE_TOKEN": "tok",
            "LOGFIRE_SERVICE_NAME": "svc",
            "LOGFIRE_ENVIRONMENT": "production",
            "LOGFIRE_SAMPLE_RATE": "0.25",
            "LOGFIRE_TRACE_HTTPX": "false",
        }
        with patch.dict(os.environ, env, clear=True):
            cfg = LogfireConfig.from_env()
        assert cfg.token == "tok"
        assert cfg.service_name == "svc"
        assert cfg.environment == "production"
        assert cfg.sample_rate == 0.25
        assert cfg.trace_httpx is False
        assert cfg.trace_sqlalchemy is True


class TestInitializeLogfire:
    """Test initialize_logfire guards and instrumentation."""

    def test_disabled_config_does_nothing(self):
        with patch.object(monitoring, "logfire") as mock_logfire:
            assert monitoring.initialize_logfire(config=LogfireConfig(enabled=False)) is False
        mock_logfire.configure.assert_not_called()
        assert monitoring.is_enabled() is False

    def test_missing_token_does_nothing(self):
        with patch.object(monitoring, "logfire") as mock_logfire:
            assert monitoring.initialize_logfire(config=LogfireConfig(enabled=True, token="")) is False
        mock_logfire.configure.assert_not_called()

    def test_enabled_configures_selected_instrumentations(self):
        app = MagicMock()
        cfg = LogfireConfig(enabled=True, token="tok", trace_sqlalchemy=False)
        with patch.object(monitoring, "logfire") as mock_logfire:
            assert monitoring.initialize_logfire(app, config=cfg) is True

        mock_logfire.configure.assert_called_once()
        assert mock_logfire.configure.call_args.kwargs["token"] == "tok"
        mock_logfire.instrument_pydantic_ai.assert_called_once()
        mock_logfire.instrument_httpx.assert_called_once()
        mock_logfire.instrument_sqlalchemy.assert_not_called()
        mock_logfire.instrument_fastapi.assert_called_once_with(app=app)
        assert monitoring.is_enabled() is True

    def test_instrumentation_failure_is_not_fatal(self):
        cfg = LogfireConfig(enabled=True, token="tok")
        with patch.object(monitoring, "logfire") as mock_logfire:
            mock_logfire.instrument_httpx.side_effect = RuntimeError("not installed")
            assert monitoring.initialize_logfire(config=cfg) is True


class TestTurnLogging:
    """Test the turn-level logging helpers."""

    def test_helpers_are_silent_when_disabled(self):
        with patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.log_turn_started("k", "u-1", False)
            monitoring.log_turn_completed(
                "k", outcome="completed", state="chat", iterations=1, tools_used=[], duration_ms=1.0
            )
            monitoring.log_error("RuntimeError", "boom")
        mock_logfire.info.assert_not_called()
        mock_logfire.error.assert_not_called()

    def test_helpers_forward_when_enabled(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(monitoring, "_enabled", True)
        with patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.log_turn_completed(
                "k", outcome="approval_required", state="cleanup", iterations=15, tools_used=["delete_server"], duration_ms=3.0
            )
            monitoring.log_error("RuntimeError", "boom", {"context_key": "k"})

        kwargs = mock_logfire.info.call_args.kwargs
        assert kwargs["outcome"] == "approval_required"
        assert kwargs["iterations"] == 15
        mock_logfire.error.assert_called_once_with("RuntimeError: boom", context_key="k")

    def test_helpers_never_raise(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(monitoring, "_enabled", True)
        with patch.object(monitoring, "logfire") as mock_logfire:
            mock_logfire.info.side_effect = RuntimeError("exporter down")
            mock_logfire.error.side_effect = RuntimeError("exporter down")
            monitoring.log_turn_started("k", "u-1", True)
            monitoring.log_error("RuntimeError", "boom")
