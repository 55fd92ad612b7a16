from __future__ import annotations

from typing import Tuple

import pytest

from venture_ai.agent_core.context.conversation_store import ConversationStore
from venture_ai.agent_core.context.project_store import ProjectStore
from venture_ai.agent_core.factory import build_default_catalog
from venture_ai.agent_core.policy.global_policy import GlobalPolicy
from venture_ai.agent_core.policy.models import PolicyConfig
from venture_ai.agent_core.tools.deps import ToolDeps
from venture_ai.agent_core.tools.executor import ToolExecutor
from venture_ai.agent_core.tools.registry import ToolCatalog


@pytest.fixture(scope="module")
def catalog() -> ToolCatalog:
    return build_default_catalog()


@pytest.fixture
def executor(catalog: ToolCatalog, tool_deps: ToolDeps) -> ToolExecutor:
    return ToolExecutor(catalog=catalog, policy=GlobalPolicy(PolicyConfig()), deps=tool_deps)


@pytest.fixture
def project_store(stores: Tuple[ConversationStore, ProjectStore]) -> ProjectStore:
    return stores[1]


@pytest.fixture
def conversation_store(stores: Tuple[ConversationStore, ProjectStore]) -> ConversationStore:
    return stores[0]
