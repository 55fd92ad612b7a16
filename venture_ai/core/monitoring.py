"""
Monitoring and tracing with Pydantic Logfire.

Logfire is optional at runtime: nothing is sent unless ``LOGFIRE_ENABLED`` is
true and a token is configured. When enabled, it instruments:

- pydantic-ai model calls (reasoning and classifier requests)
- SQLAlchemy database operations
- HTTPX requests (research backend)
- FastAPI endpoints

The ``log_*`` helpers record turn-level events; they never raise.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class LogfireConfig:
    enabled: bool = False
    token: str = ""
    service_name: str = "venture-ai"
    service_version: str = "0.0.0"
    environment: str = "development"
    sample_rate: float = 1.0
    trace_pydantic_ai: bool = True
    trace_sqlalchemy: bool = True
    trace_httpx: bool = True
    trace_fastapi: bool = True

    @classmethod
    def from_env(cls) -> "LogfireConfig":
        return cls(
            enabled=_flag("LOGFIRE_ENABLED", "false"),
            token=os.getenv("LOGFIRE_TOKEN", ""),
            service_name=os.getenv("LOGFIRE_SERVICE_NAME", "venture-ai"),
            service_version=os.getenv("LOGFIRE_SERVICE_VERSION", "0.0.0"),
            environment=os.getenv("LOGFIRE_ENVIRONMENT", "development"),
            sample_rate=float(os.getenv("LOGFIRE_SAMPLE_RATE", "1.0")),
            trace_pydantic_ai=_flag("LOGFIRE_TRACE_PYDANTIC_AI", "true"),
            trace_sqlalchemy=_flag("LOGFIRE_TRACE_SQLALCHEMY", "true"),
            trace_httpx=_flag("LOGFIRE_TRACE_HTTPX", "true"),
            trace_fastapi=_flag("LOGFIRE_TRACE_FASTAPI", "true"),
        )


_enabled = False


def is_enabled() -> bool:
    return _enabled


def initialize_logfire(app: FastAPI | None = None, config: Optional[LogfireConfig] = None) -> bool:
    """
    Configure Logfire and enable the instrumentations selected in ``config``.

    Args:
        app: FastAPI application to instrument (optional).
        config: Settings; read from the environment when omitted.

    Returns:
        True when Logfire was configured.
    """
    global _enabled
    cfg = config or LogfireConfig.from_env()
    if not cfg.enabled:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False
    if not cfg.token:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set; monitoring stays off.")
        return False

    logfire.configure(
        token=cfg.token,
        service_name=cfg.service_name,
        service_version=cfg.service_version,
        environment=cfg.environment,
        sampling=logfire.SamplingOptions(head=cfg.sample_rate),
    )

    if cfg.trace_pydantic_ai:
        try:
            logfire.instrument_pydantic_ai()
        except Exception as e:
            logger.warning(f"Failed to instrument Pydantic AI: {e}")
    if cfg.trace_sqlalchemy:
        try:
            logfire.instrument_sqlalchemy()
        except Exception as e:
            logger.warning(f"Failed to instrument SQLAlchemy: {e}")
    if cfg.trace_httpx:
        try:
            logfire.instrument_httpx()
        except Exception as e:
            logger.warning(f"Failed to instrument HTTPX: {e}")
    if cfg.trace_fastapi and app is not None:
        try:
            logfire.instrument_fastapi(app=app)
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")

    _enabled = True
    logger.info(f"Logfire monitoring initialized: environment={cfg.environment}, service={cfg.service_name}")
    return True


def log_turn_started(context_key: str, author_id: str, has_pending: bool) -> None:
    """Record the start of a conversation turn."""
    if not _enabled:
        return
    try:
        logfire.info("Turn started", context_key=context_key, author_id=author_id, has_pending=has_pending)
    except Exception:
        logger.debug(f"Could not log turn start to Logfire: {context_key}")


def log_turn_completed(
    context_key: str,
    *,
    outcome: str,
    state: str,
    iterations: int,
    tools_used: list[str],
    duration_ms: float,
) -> None:
    """Record the outcome of a conversation turn."""
    if not _enabled:
        return
    try:
        logfire.info(
            "Turn completed",
            context_key=context_key,
            outcome=outcome,
            state=state,
            iterations=iterations,
            tools_used=tools_used,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log turn completion to Logfire: {context_key}")


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """Record an error with context."""
    if not _enabled:
        return
    try:
        logfire.error(f"{error_type}: {error_message}", **(context or {}))
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")
