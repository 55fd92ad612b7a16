from __future__ import annotations

"""LangGraph runtime engine.

``AgentEngine`` runs one conversation turn: it records the user message,
settles the conversation state, then lets the reasoning service call tools
in a bounded loop until it produces a reply.

Turn pipeline
-------------

1. Append the user message to history (reply context prepended).
2. Leave ``idle`` for ``chat`` on first contact.
3. Route the message; a committed transition is persisted before any tool
   is offered, so tool gating reflects the new state.
4. Offer the state's reachable tools, or the whole catalog when the state
   lists none.
5. Run the loop graph (``reason`` -> ``act`` -> ``reason`` ...).
6. Apply the auto-transition heuristic and persist the final reply.

Loop graph
----------

- ``reason`` calls the reasoning service. Plain text ends the turn; a
  failure or timeout ends it with an apology; reaching the iteration cap ends
  it with a fallback message.
- ``act`` executes the requested calls in order through ``ToolExecutor``.
  A result asking for approval stores the pending invocation and ends the
  turn at once; the remaining calls of the batch are not executed and the
  reported iteration count is the cap.
"""

import asyncio
import logging
from typing import List, Optional

from langgraph.graph import END, StateGraph

from ..approval.standing import DEFAULT_APPROVAL_PROMPT
from ..policy.global_policy import GlobalPolicy
from ..prompts import build_context_summary, build_system_prompt
from ..schemas.domain import (
    ConversationMessage,
    ConversationState,
    MessageContext,
    MessageRole,
    PendingInvocation,
    ToolName,
    Trigger,
    TurnOutcome,
    TurnResult,
)
from ..services.reasoning import ChatMessage
from ..state.auto_transition import should_auto_transition
from ..state.machine import transition
from ..state.registry import reachable_tools
from .models import AgentDeps, _LoopState

logger = logging.getLogger(__name__)

SERVICE_ERROR_REPLY = "Sorry, I encountered an error processing your request. Please try again."
ITERATION_CAP_REPLY = (
    "I've reached my step limit for this request. Please try again or break it into smaller steps."
)


def render_user_content(message: ConversationMessage) -> str:
    """Prefix a user message with its author so multi-party history stays readable."""
    if message.role == MessageRole.user and message.author_name:
        return f"[{message.author_name}]: {message.content}"
    return message.content


def to_chat_history(messages: List[ConversationMessage]) -> List[ChatMessage]:
    out: List[ChatMessage] = []
    for m in messages:
        if m.role == MessageRole.user:
            out.append(ChatMessage(role=MessageRole.user, content=render_user_content(m)))
        elif m.role == MessageRole.assistant:
            out.append(ChatMessage(role=MessageRole.assistant, content=m.content))
    return out


def _dedupe(names: List[str]) -> List[str]:
    return list(dict.fromkeys(names))


class AgentEngine:
    """Run conversation turns with state-gated tool calling.

    The engine delegates the ``(state, tool)`` guard, argument checks and
    timeouts to ``GlobalPolicy`` (through ``ToolExecutor``) and the actual
    work to the tools registered in the catalog.
    """

    def __init__(self, *, policy: GlobalPolicy, deps: AgentDeps) -> None:
        self._policy = policy
        self._deps = deps
        self._graph = self._build_graph()

    @property
    def max_iterations(self) -> int:
        return self._policy.config.loop_policy.max_iterations

    def _build_graph(self):
        """Build and compile the LangGraph loop."""
        g: StateGraph = StateGraph(_LoopState)
        g.add_node("reason", self._node_reason)
        g.add_node("act", self._node_act)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("reason")
        g.add_conditional_edges("reason", self._route_after_reason, {"act": "act", "finish": "finish"})
        g.add_conditional_edges("act", self._route_after_act, {"reason": "reason", "finish": "finish"})
        g.add_edge("finish", END)
        return g.compile()

    async def run_turn(self, text: str, message: MessageContext) -> TurnResult:
        """Execute one turn for ``text`` and return its result."""
        conversations = self._deps.conversations
        key = message.context_key

        content = f"{message.reply_context}\n\n{text}" if message.reply_context else text
        await conversations.add_message(
            key, MessageRole.user, content, author_id=message.author_id, author_name=message.author_name
        )

        state = await conversations.get_state(key)
        if state == ConversationState.idle:
            state = transition(state, Trigger.user_message)
            await conversations.set_state(key, state)

        history = await conversations.get_messages(key)
        decision = await self._deps.router.route(state, text, build_context_summary(history))
        if decision.committed:
            logger.info("Routing %s: %s -> %s (%s)", key, state.value, decision.new_state.value, decision.trigger)
            state = decision.new_state
            await conversations.set_state(key, state)

        project_id = await conversations.get_project_id(key)
        project = await self._deps.projects.get_project(project_id) if project_id else None

        offered = self._offered_tools(state)
        window = self._policy.config.loop_policy.history_window
        messages = [ChatMessage(role=MessageRole.system, content=build_system_prompt(state, project, offered))]
        messages.extend(to_chat_history(await conversations.get_messages(key, limit=window)))

        loop: _LoopState = {
            "message": message,
            "state": state.value,
            "messages": messages,
            "tools": self._deps.catalog.specs_for(offered),
            "iteration": 0,
            "tools_used": [],
        }
        final = await self._graph.ainvoke(loop, config={"recursion_limit": 2 * self.max_iterations + 10})

        reply = str(final.get("reply") or "")
        outcome = TurnOutcome(final.get("outcome") or TurnOutcome.completed.value)
        iterations = int(final.get("iteration") or 0)

        if outcome != TurnOutcome.service_error:
            trigger = should_auto_transition(state, list(final.get("tools_used") or []), reply)
            if trigger is not None:
                new_state = transition(state, trigger)
                if new_state != state:
                    logger.info("Auto-transition %s: %s -> %s", key, state.value, new_state.value)
                    state = new_state
                    await conversations.set_state(key, state)
            await conversations.add_message(key, MessageRole.assistant, reply)

        return TurnResult(
            reply=reply,
            tools_used=_dedupe(list(final.get("tools_used") or [])),
            iterations=iterations,
            state=state,
            outcome=outcome,
        )

    def _offered_tools(self, state: ConversationState) -> List[ToolName]:
        reachable = reachable_tools(state)
        if not reachable:
            return self._deps.catalog.names()
        return [name for name in self._deps.catalog.names() if name in reachable]

    async def _node_reason(self, state: _LoopState) -> _LoopState:
        """Ask the reasoning service for the next step."""
        if state["iteration"] >= self.max_iterations:
            logger.warning("Iteration cap (%s) reached for %s", self.max_iterations, state["message"].context_key)
            state["reply"] = ITERATION_CAP_REPLY
            state["outcome"] = TurnOutcome.iteration_cap.value
            return state

        timeout = self._policy.config.timeout_policy.reasoning_seconds
        try:
            completion = await asyncio.wait_for(
                self._deps.reasoning.complete(
                    messages=list(state["messages"]),
                    tools=list(state["tools"]),
                    model=self._deps.model,
                ),
                timeout=timeout,
            )
        except Exception as exc:
            logger.error("Reasoning call failed for %s: %r", state["message"].context_key, exc)
            state["reply"] = SERVICE_ERROR_REPLY
            state["outcome"] = TurnOutcome.service_error.value
            return state

        state["iteration"] = state["iteration"] + 1
        if not completion.tool_calls:
            state["reply"] = completion.text or ""
            state["outcome"] = TurnOutcome.completed.value
            return state

        state["messages"].append(
            ChatMessage(role=MessageRole.assistant, content=completion.text, tool_calls=list(completion.tool_calls))
        )
        state["_tool_calls"] = list(completion.tool_calls)
        return state

    async def _node_act(self, state: _LoopState) -> _LoopState:
        """Execute the tool calls of the last reasoning response."""
        message = state["message"]
        key = message.context_key
        conv_state = ConversationState(state["state"])
        calls = list(state.get("_tool_calls") or [])
        state["_tool_calls"] = []

        for call in calls:
            project_id = await self._deps.conversations.get_project_id(key)
            executed = await self._deps.executor.execute_call(
                call.name, call.arguments, state=conv_state, message=message, project_id=project_id
            )
            result = executed.result
            state["messages"].append(
                ChatMessage(
                    role=MessageRole.tool,
                    content=result.model_dump_json(exclude_none=True),
                    tool_call_id=call.id,
                    name=call.name,
                )
            )
            if not executed.dispatched or executed.tool_name is None:
                continue

            state["tools_used"].append(executed.tool_name.value)
            if result.needs_approval:
                prompt = result.approval_prompt or DEFAULT_APPROVAL_PROMPT
                await self._deps.conversations.set_pending_invocation(
                    key,
                    PendingInvocation(
                        tool_name=executed.tool_name,
                        tool_args=executed.args,
                        approval_prompt=prompt,
                        requested_by=message.author_id,
                    ),
                )
                logger.info("%s on %s awaits approval", executed.tool_name.value, key)
                state["reply"] = prompt
                state["outcome"] = TurnOutcome.approval_required.value
                state["iteration"] = self.max_iterations
                return state
        return state

    async def _node_finish(self, state: _LoopState) -> _LoopState:
        """Finish node. Terminal bookkeeping happens in ``run_turn``."""
        logger.debug(
            "Loop finished for %s: outcome=%s iterations=%s",
            state["message"].context_key,
            state.get("outcome"),
            state["iteration"],
        )
        return state

    def _route_after_reason(self, state: _LoopState) -> str:
        if state.get("outcome"):
            return "finish"
        return "act"

    def _route_after_act(self, state: _LoopState) -> str:
        if state.get("outcome"):
            return "finish"
        return "reason"
