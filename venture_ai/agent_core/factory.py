from __future__ import annotations

"""Convenience factories for wiring the agent core.

This module builds the default tool catalog and a ready-to-use
``ConversationService`` from a ``PolicyConfig``, two repositories and the
external collaborators (reasoning service, intent classifier, backends).

The catalog is validated here, so a deployment with a missing tool or an
inconsistent state registry fails at startup instead of mid-conversation.
"""

from typing import Any, Optional

from .approval.gate import ApprovalGate
from .context.conversation_store import ConversationStore
from .context.locks import KeyedLock
from .context.project_store import ProjectStore
from .policy.global_policy import GlobalPolicy
from .policy.models import PolicyConfig
from .repos.interfaces import ConversationRepository, ProjectRepository
from .runtime.engine import AgentEngine
from .runtime.models import AgentDeps
from .service import ConversationService, ConversationServiceDeps
from .services.classifier import IntentClassifier
from .services.reasoning import ReasoningService
from .state.registry import validate_state_registry
from .state.router import IntentRouter
from .tools.backends import ToolBackends
from .tools.chat import chat_tools
from .tools.context import context_tools
from .tools.deps import ToolDeps
from .tools.domains import domain_tools
from .tools.executor import ToolExecutor
from .tools.payments import payment_tools
from .tools.project import project_tools
from .tools.registry import ToolCatalog
from .tools.repositories import repository_tools
from .tools.research import research_tools


def build_default_catalog() -> ToolCatalog:
    """Build and validate the catalog of every built-in tool.

    Raises:
        ToolCatalogError: If a ``ToolName`` has no implementation.
        StateRegistryError: If the state registry references an unknown tool.
    """
    catalog = ToolCatalog()
    catalog.register_all(project_tools())
    catalog.register_all(context_tools())
    catalog.register_all(domain_tools())
    catalog.register_all(repository_tools())
    catalog.register_all(chat_tools())
    catalog.register_all(payment_tools())
    catalog.register_all(research_tools())
    catalog.validate_catalog()
    validate_state_registry(catalog)
    return catalog


def build_conversation_service(
    *,
    policy_config: PolicyConfig,
    conversation_repo: ConversationRepository,
    project_repo: ProjectRepository,
    reasoning: ReasoningService,
    classifier: IntentClassifier,
    backends: Optional[ToolBackends] = None,
    catalog: Optional[ToolCatalog] = None,
    model: Optional[Any] = None,
    max_contexts: int = 200,
    context_ttl_seconds: float = 3600.0,
    max_messages: int = 50,
) -> ConversationService:
    """Wire stores, catalog, gate and engine into a ``ConversationService``."""
    policy = GlobalPolicy(policy_config)
    conversations = ConversationStore(
        conversation_repo,
        max_contexts=max_contexts,
        ttl_seconds=context_ttl_seconds,
        max_messages=max_messages,
    )
    projects = ProjectStore(project_repo)
    catalog = catalog if catalog is not None else build_default_catalog()

    tool_deps = ToolDeps(projects=projects, conversations=conversations, backends=backends or ToolBackends())
    executor = ToolExecutor(catalog=catalog, policy=policy, deps=tool_deps)

    engine = AgentEngine(
        policy=policy,
        deps=AgentDeps(
            conversations=conversations,
            projects=projects,
            catalog=catalog,
            executor=executor,
            reasoning=reasoning,
            router=IntentRouter(classifier=classifier, policy=policy),
            model=model,
        ),
    )
    gate = ApprovalGate(
        classifier=classifier,
        policy=policy,
        conversations=conversations,
        projects=projects,
        executor=executor,
    )
    return ConversationService(
        deps=ConversationServiceDeps(
            conversations=conversations,
            projects=projects,
            gate=gate,
            engine=engine,
            locks=KeyedLock(),
        )
    )
