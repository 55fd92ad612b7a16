"""
Unit tests for server exception handlers.

Tests cover the global exception handler called directly and through a
FastAPI application.
"""

from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from venture_ai.server.exception_handlers import setup_exception_handlers
from venture_ai.server.exception_handlers.global_handler import (
    global_exception_handler,
)


class TestGlobalExceptionHandler:
    """Test suite for global exception handler."""

    @pytest.fixture
    def mock_request(self):
        """Create a mock request object."""
        request = Mock(spec=Request)
        request.method = "POST"
        request.url.path = "/api/v1/conversations/messages"
        request.client = Mock()
        request.client.host = "127.0.0.1"
        return request

    @pytest.mark.asyncio
    async def test_logs_error_with_context(self, mock_request):
        exc = ValueError("Test error")

        with patch("venture_ai.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, exc)

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert "Unhandled exception" in call_args[0][0]
        extra = call_args[1]["extra"]
        assert extra["error_type"] == "ValueError"
        assert extra["path"] == "/api/v1/conversations/messages"
        assert extra["client"] == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_returns_500_with_error_id(self, mock_request):
        response = await global_exception_handler(mock_request, RuntimeError("boom"))

        assert response.status_code == 500
        body = response.body.decode()
        assert '"detail":"Internal server error"' in body
        assert '"error_type":"RuntimeError"' in body
        assert '"error_id":"' in body

    @pytest.mark.asyncio
    async def test_handles_missing_client(self, mock_request):
        mock_request.client = None
        with patch("venture_ai.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, KeyError("x"))
        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"

    @pytest.mark.asyncio
    async def test_error_ids_are_unique(self, mock_request):
        first = await global_exception_handler(mock_request, ValueError("a"))
        second = await global_exception_handler(mock_request, ValueError("a"))
        assert first.body != second.body


class TestSetupExceptionHandlers:
    """Test registration on an application."""

    @pytest.mark.asyncio
    async def test_unhandled_route_error_becomes_json_500(self):
        app = FastAPI()
        setup_exception_handlers(app)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/boom")

        assert response.status_code == 500
        data = response.json()
        assert data["detail"] == "Internal server error"
        assert data["error_type"] == "RuntimeError"
        assert len(data["error_id"]) == 32
