"""
Conversation API Endpoints.

This module exposes the conversational agent over HTTP:

- posting a user message runs one turn and returns its result
- reading a conversation returns its state, reachable tools, possible
  transitions, hints and pending invocation
"""

from fastapi import APIRouter

from venture_ai.agent_core.schemas.domain import ToolName, TurnResult
from venture_ai.agent_core.state.machine import valid_transitions
from venture_ai.agent_core.state.registry import (
    format_state_info,
    get_state_definition,
    state_hints,
)
from venture_ai.core.logging_config import get_logger
from venture_ai.server.schemas import ConversationStateRead, MessageCreate, TransitionInfo
from venture_ai.server.services.deps import ConversationServiceDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "/messages",
    response_model=TurnResult,
    summary="Post Message",
    description="Process one user message as a conversation turn.",
    response_description="The turn's reply, tools used, iteration count, resulting state and outcome.",
)
async def post_message(message_in: MessageCreate, service: ConversationServiceDep) -> TurnResult:
    message = message_in.to_message_context()
    logger.debug(f"Message received for {message.context_key} from {message.author_id}")
    return await service.handle_message(message_in.text, message)


@router.get(
    "/{key}/state",
    response_model=ConversationStateRead,
    summary="Get Conversation State",
    description="Read the current state of a conversation and what it allows.",
)
async def get_conversation_state(key: str, service: ConversationServiceDep) -> ConversationStateRead:
    ctx = await service.conversations.get_context(key)
    definition = get_state_definition(ctx.state)
    return ConversationStateRead(
        key=key,
        state=ctx.state,
        description=definition.description,
        info=format_state_info(ctx.state),
        reachable_tools=[name for name in ToolName if name in definition.tools],
        transitions=[TransitionInfo(trigger=t, target=s) for t, s in valid_transitions(ctx.state)],
        hints=state_hints(ctx.state),
        project_id=ctx.project_id,
        pending_invocation=ctx.pending_invocation,
    )
