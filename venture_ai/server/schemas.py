"""
API Schemas.

This module contains Pydantic models used for API request bodies and response validation.
These schemas define the interface contract between the client and the server.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from venture_ai.agent_core.schemas.domain import (
    ConversationState,
    MessageContext,
    PendingInvocation,
    ToolName,
    Trigger,
)


class MessageCreate(BaseModel):
    """
    Schema for posting one user message to a conversation.

    The message is processed as a single turn; the response is the turn's result.
    """
    text: str = Field(
        ...,
        description="The user's message text.",
        examples=["Let's plan a coffee subscription business"],
    )
    channel_id: str = Field(..., description="Channel the message was posted in.", examples=["chan-1"])
    thread_id: Optional[str] = Field(
        default=None,
        description="Thread the message was posted in; a thread is its own conversation.",
    )
    author_id: str = Field(..., description="Stable identifier of the author.", examples=["user-42"])
    author_name: str = Field(..., description="Display name of the author.", examples=["Alice"])
    reply_context: Optional[str] = Field(
        default=None,
        description="Text of the message being replied to, prepended to the user's message.",
    )
    server_id: Optional[str] = Field(default=None, description="Chat server the message came from.")

    def to_message_context(self) -> MessageContext:
        return MessageContext(
            channel_id=self.channel_id,
            thread_id=self.thread_id,
            author_id=self.author_id,
            author_name=self.author_name,
            reply_context=self.reply_context,
            server_id=self.server_id,
        )


class TransitionInfo(BaseModel):
    """One trigger available from the current state and where it leads."""
    trigger: Trigger
    target: ConversationState


class ConversationStateRead(BaseModel):
    """
    Schema for reading a conversation's current state.

    Includes what the state allows and where it can go next.
    """
    key: str
    state: ConversationState
    description: str
    info: str = Field(..., description="Human-readable summary of the state.")
    reachable_tools: List[ToolName]
    transitions: List[TransitionInfo]
    hints: List[str]
    project_id: Optional[str] = None
    pending_invocation: Optional[PendingInvocation] = None
