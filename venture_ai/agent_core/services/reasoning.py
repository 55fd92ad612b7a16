from __future__ import annotations

"""Reasoning (completion) service contract and its pydantic-ai adapter.

The agent loop talks to the language model through ``ReasoningService``:
given the rendered history, the offered tool catalog and a model identifier,
the service returns either free text or a list of tool-call requests.

Tool-call arguments are always surfaced as a JSON-encoded string. Parsing
them is the caller's job, and may fail per call.

``PydanticAIReasoningService`` is the production implementation. It maps the
provider-neutral ``ChatMessage`` history onto pydantic-ai request/response
messages and issues a single ``pydantic_ai.direct.model_request`` per call,
so the tool loop itself stays under the control of the runtime engine.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Protocol

from pydantic import Field
from pydantic_ai.direct import model_request
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelRequestPart,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.models import ModelRequestParameters
from pydantic_ai.tools import ToolDefinition

from ..schemas.base import BaseSchema
from ..schemas.domain import MessageRole

logger = logging.getLogger(__name__)


class ToolCallRequest(BaseSchema):
    id: str
    name: str
    arguments: str = "{}"


class ChatMessage(BaseSchema):
    role: MessageRole
    content: Optional[str] = None
    tool_calls: List[ToolCallRequest] = Field(default_factory=list)
    tool_call_id: Optional[str] = None
    name: Optional[str] = None


class ToolSpec(BaseSchema):
    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class Completion(BaseSchema):
    text: Optional[str] = None
    tool_calls: List[ToolCallRequest] = Field(default_factory=list)


class ReasoningService(Protocol):
    """Protocol for the external completion call."""

    async def complete(
        self,
        *,
        messages: List[ChatMessage],
        tools: List[ToolSpec],
        model: Optional[str] = None,
    ) -> Completion: ...


def _args_as_json(args: Any) -> str:
    if args is None:
        return "{}"
    if isinstance(args, str):
        return args
    return json.dumps(args)


def to_model_messages(messages: List[ChatMessage]) -> List[ModelMessage]:
    """Convert a flat chat history into alternating pydantic-ai requests/responses."""
    out: List[ModelMessage] = []
    parts: List[ModelRequestPart] = []
    for m in messages:
        if m.role == MessageRole.system:
            parts.append(SystemPromptPart(content=m.content or ""))
        elif m.role == MessageRole.user:
            parts.append(UserPromptPart(content=m.content or ""))
        elif m.role == MessageRole.tool:
            parts.append(
                ToolReturnPart(
                    tool_name=m.name or "",
                    content=m.content or "",
                    tool_call_id=m.tool_call_id or "",
                )
            )
        else:
            if parts:
                out.append(ModelRequest(parts=parts))
                parts = []
            response_parts: List[Any] = []
            if m.content:
                response_parts.append(TextPart(content=m.content))
            for call in m.tool_calls:
                response_parts.append(
                    ToolCallPart(tool_name=call.name, args=call.arguments, tool_call_id=call.id)
                )
            out.append(ModelResponse(parts=response_parts))
    if parts:
        out.append(ModelRequest(parts=parts))
    return out


def to_completion(response: ModelResponse) -> Completion:
    calls: List[ToolCallRequest] = []
    texts: List[str] = []
    for part in response.parts:
        if isinstance(part, ToolCallPart):
            calls.append(
                ToolCallRequest(id=part.tool_call_id, name=part.tool_name, arguments=_args_as_json(part.args))
            )
        elif isinstance(part, TextPart):
            texts.append(part.content)
    text = "".join(texts)
    return Completion(text=text or None, tool_calls=calls)


class PydanticAIReasoningService:
    """``ReasoningService`` backed by a pydantic-ai model.

    Args:
        model: Default pydantic-ai model (instance or ``"provider:name"``
            string) used when ``complete`` is called without a model.
    """

    def __init__(self, *, model: Any) -> None:
        self._model = model

    async def complete(
        self,
        *,
        messages: List[ChatMessage],
        tools: List[ToolSpec],
        model: Optional[str] = None,
    ) -> Completion:
        params = ModelRequestParameters(
            function_tools=[
                ToolDefinition(name=t.name, description=t.description, parameters_json_schema=t.parameters)
                for t in tools
            ],
            allow_text_output=True,
        )
        response = await model_request(
            model or self._model,
            to_model_messages(messages),
            model_request_parameters=params,
        )
        completion = to_completion(response)
        logger.debug(
            "Reasoning call returned text=%s tool_calls=%s",
            completion.text is not None,
            [c.name for c in completion.tool_calls],
        )
        return completion
