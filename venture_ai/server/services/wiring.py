"""
Application Wiring.

Builds the ``ConversationService`` for the server from ``Settings``: SQL
repositories, pydantic-ai collaborators, and the optional Tavily research
backend.
"""

from dataclasses import dataclass
from typing import Optional

from venture_ai.agent_core.factory import build_conversation_service
from venture_ai.agent_core.repos.sql import SqlRepoBundle
from venture_ai.agent_core.service import ConversationService
from venture_ai.agent_core.services.classifier import PydanticAIIntentClassifier
from venture_ai.agent_core.services.reasoning import PydanticAIReasoningService
from venture_ai.agent_core.tools.backends import ToolBackends
from venture_ai.agent_core.tools.tavily import TavilyResearchBackend
from venture_ai.core.logging_config import get_logger
from venture_ai.server.core.config import Settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class ServerComponents:
    service: ConversationService
    research: Optional[TavilyResearchBackend] = None

    async def aclose(self) -> None:
        if self.research is not None:
            await self.research.aclose()


def build_backends(settings: Settings) -> tuple[ToolBackends, Optional[TavilyResearchBackend]]:
    """Build the external tool backends the settings configure."""
    research: Optional[TavilyResearchBackend] = None
    api_key = settings.tavily.api_key
    if api_key:
        research = TavilyResearchBackend(api_key)
    else:
        logger.warning("TAVILY_API_KEY is not set; research tools will report the backend as not configured")
    return ToolBackends(research=research), research


def build_server_components(settings: Settings, repos: SqlRepoBundle) -> ServerComponents:
    """Wire the conversation service used by the API endpoints."""
    models = settings.models
    cache = settings.context_cache
    backends, research = build_backends(settings)
    service = build_conversation_service(
        policy_config=settings.to_policy_config(),
        conversation_repo=repos.conversations,
        project_repo=repos.projects,
        reasoning=PydanticAIReasoningService(model=models.reasoning),
        classifier=PydanticAIIntentClassifier(model=models.router),
        backends=backends,
        max_contexts=cache.max_contexts,
        context_ttl_seconds=cache.ttl_seconds,
        max_messages=cache.max_messages,
    )
    logger.info(f"Conversation service wired: model={models.reasoning}, router_model={models.router}")
    return ServerComponents(service=service, research=research)
