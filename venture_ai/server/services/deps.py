"""
Service Dependencies.

Provides the ``ConversationService`` wired during the application lifespan,
and the ``ProjectStore`` it shares, to API endpoints.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from venture_ai.agent_core.context.project_store import ProjectStore
from venture_ai.agent_core.service import ConversationService


def get_conversation_service(request: Request) -> ConversationService:
    service = getattr(request.app.state, "conversation_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Conversation service is not ready")
    return service


def get_project_store(service: ConversationService = Depends(get_conversation_service)) -> ProjectStore:
    return service.projects


ConversationServiceDep = Annotated[ConversationService, Depends(get_conversation_service)]
ProjectStoreDep = Annotated[ProjectStore, Depends(get_project_store)]
