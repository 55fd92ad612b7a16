"""
Core utilities for venture-ai.

This package provides logging configuration and optional Logfire monitoring
shared by the agent core and the server.
"""

from venture_ai.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
