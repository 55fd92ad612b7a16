"""
Venture-AI Server Package.

This package contains the web server exposing the conversational agent.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration, constants and database connections.
    exception_handlers: Global error handling.
    services: Application wiring and endpoint dependencies.
"""
