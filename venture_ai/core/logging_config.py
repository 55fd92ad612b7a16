"""
Logging Configuration Module.

Centralized logging configuration for venture-ai:

- console logging, plus an optional log file
- SIMPLE, DETAILED or JSON line formats
- per-module log levels, with noisy third-party loggers turned down

Nothing is configured at import time; the server calls ``setup_logging``
from its lifespan, and tests leave logging to pytest.
"""

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_LEVEL = os.getenv("VENTURE_AI_LOG_LEVEL", "INFO").upper()
DEFAULT_LOG_FORMAT = os.getenv("LOG_FORMAT", "detailed")
LOG_FILE_DIR = os.getenv("LOG_FILE_DIR", "logs")
LOG_FILE_NAME = "venture_ai.log"

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

MODULE_LOG_LEVELS = {
    # Core modules
    "venture_ai.agent_core": "DEBUG",
    "venture_ai.agent_core.runtime": "DEBUG",
    "venture_ai.agent_core.state": "DEBUG",
    "venture_ai.agent_core.approval": "DEBUG",
    "venture_ai.agent_core.tools": "DEBUG",
    "venture_ai.agent_core.repos": "INFO",
    "venture_ai.agent_core.context": "INFO",
    # Server modules
    "venture_ai.server": "INFO",
    "venture_ai.server.api": "DEBUG",
    "venture_ai.server.core": "INFO",
    # Third-party libraries (reduce noise)
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def resolve_format(log_format: Optional[str]) -> str:
    fmt = (log_format or DEFAULT_LOG_FORMAT).lower()
    if fmt == "json":
        return JSON_FORMAT
    if fmt == "simple":
        return SIMPLE_FORMAT
    return DETAILED_FORMAT


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = False,
    log_dir: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Line format (simple, detailed, json)
        enable_file: Whether to also write DEBUG-level logs to a file
        log_dir: Directory for the log file (defaults to ``LOG_FILE_DIR``)
    """
    level = (log_level or DEFAULT_LOG_LEVEL).upper()
    formatter = logging.Formatter(resolve_format(log_format), datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if enable_file:
        directory = Path(log_dir or LOG_FILE_DIR)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(directory / LOG_FILE_NAME)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={log_format or DEFAULT_LOG_FORMAT}, file_logging={enable_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name)
