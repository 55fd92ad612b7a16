import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from venture_ai.agent_core.service import ConversationService

# Use in-memory SQLite for the module-level engine of the app
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Set test database URL before importing app
os.environ["DATABASE_URL"] = TEST_DATABASE_URL


@pytest.fixture
def app() -> FastAPI:
    from venture_ai.server.main import app as fastapi_app

    return fastapi_app


@pytest.fixture
def service(build_service) -> ConversationService:
    """Conversation service over in-memory repositories and scripted collaborators."""
    return build_service()


@pytest_asyncio.fixture(name="client")
async def client_fixture(app: FastAPI, service: ConversationService) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with the test service installed on ``app.state``.

    ``ASGITransport`` does not run the lifespan, so the service is set directly.
    """
    app.state.conversation_service = service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    del app.state.conversation_service
