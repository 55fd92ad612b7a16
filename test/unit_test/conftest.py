from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

from venture_ai.agent_core.context.conversation_store import ConversationStore
from venture_ai.agent_core.context.project_store import ProjectStore
from venture_ai.agent_core.factory import build_conversation_service
from venture_ai.agent_core.policy.models import PolicyConfig
from venture_ai.agent_core.repos.memory import InMemoryConversationRepository, InMemoryProjectRepository
from venture_ai.agent_core.schemas.domain import MessageContext
from venture_ai.agent_core.service import ConversationService
from venture_ai.agent_core.services.classifier import ApprovalVerdict, RouterVerdict
from venture_ai.agent_core.services.reasoning import ChatMessage, Completion, ToolCallRequest, ToolSpec
from venture_ai.agent_core.tools.backends import ToolBackends
from venture_ai.agent_core.tools.deps import ToolDeps

Step = Union[Completion, Exception]


class ScriptedReasoning:
    """Reasoning service that replays a script of completions (or raises scripted errors)."""

    def __init__(self) -> None:
        self.steps: List[Step] = []
        self.calls: List[Dict[str, Any]] = []

    def script(self, *steps: Step) -> None:
        self.steps.extend(steps)

    async def complete(
        self,
        *,
        messages: List[ChatMessage],
        tools: List[ToolSpec],
        model: Optional[str] = None,
    ) -> Completion:
        self.calls.append({"messages": list(messages), "tools": [t.name for t in tools], "model": model})
        if not self.steps:
            return Completion(text="All done.")
        step = self.steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return step


class FakeClassifier:
    def __init__(self) -> None:
        self.intent = RouterVerdict.no_signal()
        self.approval = ApprovalVerdict.no_signal()
        self.intent_calls: List[Tuple[str, str]] = []
        self.approval_calls: List[str] = []

    def route_to(self, intent: str, confidence: float) -> None:
        self.intent = RouterVerdict(intent=intent, confidence=confidence, reasoning="test")

    def answer(self, *, approve: bool = False, reject: bool = False, confidence: float = 0.95) -> None:
        self.approval = ApprovalVerdict(is_approval=approve, is_rejection=reject, confidence=confidence)

    async def classify_intent(self, text: str, digest: str) -> RouterVerdict:
        self.intent_calls.append((text, digest))
        return self.intent

    async def classify_approval(self, text: str) -> ApprovalVerdict:
        self.approval_calls.append(text)
        return self.approval


class _RecordingBackend:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def _record(self, op: str, **kwargs: Any) -> None:
        self.calls.append((op, kwargs))

    def ops(self) -> List[str]:
        return [op for op, _ in self.calls]


class FakeChat(_RecordingBackend):
    async def create_server(self, *, name: str) -> Dict[str, Any]:
        self._record("create_server", name=name)
        return {"server_id": "srv-1", "name": name, "invite_url": "https://chat.example/invite/srv-1"}

    async def delete_server(self, *, server_id: str) -> Dict[str, Any]:
        self._record("delete_server", server_id=server_id)
        return {"deleted": True, "server_id": server_id}

    async def list_servers(self) -> Dict[str, Any]:
        self._record("list_servers")
        return {"servers": []}


class FakeDomains(_RecordingBackend):
    async def search_domains(self, *, keyword: str, tlds: List[str]) -> Dict[str, Any]:
        self._record("search_domains", keyword=keyword, tlds=tlds)
        return {"results": [{"domain": f"{keyword}.{tld}", "available": True} for tld in tlds]}

    async def register_domain(self, *, domain: str, years: int) -> Dict[str, Any]:
        self._record("register_domain", domain=domain, years=years)
        return {"domain": domain, "status": "registered"}


class FakeRepositories(_RecordingBackend):
    async def create_repository(self, *, name: str, description: Optional[str], private: bool) -> Dict[str, Any]:
        self._record("create_repository", name=name, description=description, private=private)
        return {"owner": "acme", "name": name, "url": f"https://code.example/acme/{name}"}

    async def fork_repository(self, *, owner: str, name: str, new_name: Optional[str]) -> Dict[str, Any]:
        self._record("fork_repository", owner=owner, name=name, new_name=new_name)
        return {"owner": "acme", "name": new_name or name}

    async def delete_repository(self, *, owner: str, name: str) -> Dict[str, Any]:
        self._record("delete_repository", owner=owner, name=name)
        return {"deleted": True}


class FakeResearch(_RecordingBackend):
    async def web_search(self, *, query: str, max_results: int, search_depth: str) -> Dict[str, Any]:
        self._record("web_search", query=query, max_results=max_results, search_depth=search_depth)
        return {"query": query, "results": []}

    async def deep_research(self, *, topic: str, queries: List[str]) -> Dict[str, Any]:
        self._record("deep_research", topic=topic, queries=queries)
        return {"topic": topic, "findings": []}

    async def market_research(self, *, business_idea: str) -> Dict[str, Any]:
        self._record("market_research", business_idea=business_idea)
        return {"business_idea": business_idea}


class FakeBackends:
    def __init__(self) -> None:
        self.chat = FakeChat()
        self.domains = FakeDomains()
        self.repositories = FakeRepositories()
        self.research = FakeResearch()

    def as_backends(self) -> ToolBackends:
        return ToolBackends(
            domains=self.domains,
            repositories=self.repositories,
            chat=self.chat,
            research=self.research,
        )


def tool_calls(*calls: Tuple[str, Union[Dict[str, Any], str]], text: Optional[str] = None) -> Completion:
    """Completion requesting ``calls``; dict arguments are JSON-encoded, strings are sent verbatim."""
    return Completion(
        text=text,
        tool_calls=[
            ToolCallRequest(id=f"call-{i}", name=name, arguments=args if isinstance(args, str) else json.dumps(args))
            for i, (name, args) in enumerate(calls)
        ],
    )


def reply(text: str) -> Completion:
    return Completion(text=text)


@pytest.fixture
def reasoning() -> ScriptedReasoning:
    return ScriptedReasoning()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def fake_backends() -> FakeBackends:
    return FakeBackends()


@pytest.fixture
def completions() -> Tuple[Callable[..., Completion], Callable[[str], Completion]]:
    """``(tool_calls, reply)`` builders for scripting the reasoning service."""
    return tool_calls, reply


@pytest.fixture
def message_for() -> Callable[..., MessageContext]:
    def _make(
        channel_id: str = "chan-1",
        *,
        thread_id: Optional[str] = None,
        author_id: str = "u-1",
        author_name: str = "Alice",
        reply_context: Optional[str] = None,
        server_id: Optional[str] = None,
    ) -> MessageContext:
        return MessageContext(
            channel_id=channel_id,
            thread_id=thread_id,
            author_id=author_id,
            author_name=author_name,
            reply_context=reply_context,
            server_id=server_id,
        )

    return _make


@pytest.fixture
def build_service(
    reasoning: ScriptedReasoning, classifier: FakeClassifier, fake_backends: FakeBackends
) -> Callable[..., ConversationService]:
    def _build(policy_config: Optional[PolicyConfig] = None, **kwargs: Any) -> ConversationService:
        return build_conversation_service(
            policy_config=policy_config or PolicyConfig(),
            conversation_repo=InMemoryConversationRepository(),
            project_repo=InMemoryProjectRepository(),
            reasoning=reasoning,
            classifier=classifier,
            backends=kwargs.pop("backends", fake_backends.as_backends()),
            **kwargs,
        )

    return _build


@pytest.fixture
def stores() -> Tuple[ConversationStore, ProjectStore]:
    return ConversationStore(InMemoryConversationRepository()), ProjectStore(InMemoryProjectRepository())


@pytest.fixture
def tool_deps(stores: Tuple[ConversationStore, ProjectStore], fake_backends: FakeBackends) -> ToolDeps:
    conversations, projects = stores
    return ToolDeps(projects=projects, conversations=conversations, backends=fake_backends.as_backends())
