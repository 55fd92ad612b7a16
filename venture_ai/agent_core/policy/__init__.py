"""Policy subsystem for tool gating, thresholds and safety.

Components
----------

- ``ToolPolicy``: deployment-wide deny list of tools.
- ``LoopPolicy``: iteration cap and history window of the agent loop.
- ``ApprovalPolicy``: classifier confidence threshold shared by the intent
  router and the approval gate.
- ``TimeoutPolicy``: timeouts for the reasoning service, the classifier and
  tool execution.
- ``SafetyPolicy``: argument size limits and secret redaction.

``GlobalPolicy`` aggregates these configurations and exposes the checks used
by the runtime.
"""

from .global_policy import GlobalPolicy
from .models import (
    ApprovalPolicy,
    LoopPolicy,
    PolicyConfig,
    PolicyDecision,
    SafetyPolicy,
    TimeoutPolicy,
    ToolPolicy,
)

__all__ = [
    "GlobalPolicy",
    "PolicyConfig",
    "PolicyDecision",
    "ToolPolicy",
    "LoopPolicy",
    "ApprovalPolicy",
    "TimeoutPolicy",
    "SafetyPolicy",
]
