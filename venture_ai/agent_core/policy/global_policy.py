from __future__ import annotations

"""Global policy decisions for tool execution.

``GlobalPolicy`` is the runtime authority consulted by the agent loop before a
tool requested by the reasoning service is executed.

Design goals
------------

- Enforce capability restriction independently of what was offered to the
  reasoning service: every call is checked against the ``(state, tool)``
  table of the state registry.
- Keep the confidence comparison used by the router and the approval gate in
  one place.
- Provide basic safety validation (size limits) and redaction of secrets in
  payloads that end up in logs.
"""

import json
import re
from typing import Any, Dict, Optional

from ..schemas.domain import ConversationState, ToolName
from ..state.registry import is_tool_reachable
from .models import PolicyConfig, PolicyDecision

_SECRET_PATTERNS = (
    re.compile(r"sk-[A-Za-z0-9]{10,}"),
    re.compile(r"sk_(?:live|test)_[A-Za-z0-9]{10,}"),
    re.compile(r"ghp_[A-Za-z0-9]{10,}"),
    re.compile(r"tvly-[A-Za-z0-9]{10,}"),
)


class GlobalPolicy:
    """Aggregate policy decisions for conversation turns.

    ``GlobalPolicy`` is configured by ``PolicyConfig`` and provides helper
    methods used by the router, the approval gate and the runtime engine.
    """

    def __init__(self, config: PolicyConfig) -> None:
        self._cfg = config

    @property
    def config(self) -> PolicyConfig:
        """Return the underlying configuration object."""
        return self._cfg

    def is_confident(self, confidence: float) -> bool:
        """Return True when a classifier confidence clears the threshold (strictly)."""
        return confidence > self._cfg.approval_policy.confidence_threshold

    def decide(self, state: ConversationState, tool: ToolName) -> PolicyDecision:
        """
        Decide whether a tool call may run in the given conversation state.

        Args:
            state: The conversation state the turn is executing in.
            tool: The resolved tool name.

        Returns:
            A PolicyDecision; ``block`` is True when the tool is denied by the
            deployment deny list or is not reachable from ``state``.
        """
        if tool in self._cfg.tool_policy.blocked_tools:
            return PolicyDecision(block=True, block_reason=f"tool blocked: {tool.value}")
        if not is_tool_reachable(state, tool):
            return PolicyDecision(
                block=True,
                block_reason=f"tool not available in {state.value} mode: {tool.value}",
            )
        return PolicyDecision(block=False)

    def validate_tool_args(self, args: Dict[str, Any]) -> Optional[str]:
        """
        Validate tool arguments against basic safety constraints.

        Args:
            args: The parsed arguments of a tool call.

        Returns:
            An error string if validation fails, otherwise None.
        """
        raw = json.dumps(args, default=str).encode("utf-8")
        if len(raw) > self._cfg.safety_policy.max_tool_args_bytes:
            return "tool args too large"
        return None

    def redact(self, text: str) -> str:
        """
        Redact known secrets from text.

        Args:
            text: The input text.

        Returns:
            The sanitized text with secrets replaced by '<redacted>'.
        """
        if not self._cfg.safety_policy.redact_secrets:
            return text
        out = text
        for pat in _SECRET_PATTERNS:
            out = pat.sub("<redacted>", out)
        return out
