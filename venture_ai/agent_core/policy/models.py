from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import Field

from ..schemas.base import BaseSchema
from ..schemas.domain import ToolName


class ToolPolicy(BaseSchema):
    """
    Deployment-level deny list applied on top of per-state tool gating.

    A blocked tool is refused in every state, even where the state registry
    would otherwise make it reachable.
    """
    blocked_tools: set[ToolName] = Field(
        default_factory=set,
        description="Tool names in this set are refused regardless of conversation state.",
    )


class LoopPolicy(BaseSchema):
    """
    Bounds for the tool-calling loop.

    ``max_iterations`` caps the number of reasoning calls per turn and
    ``history_window`` caps how many stored messages are sent with each call.
    """
    max_iterations: int = Field(default=15, ge=1, le=100)
    history_window: int = Field(default=20, ge=1, le=500)


class ApprovalPolicy(BaseSchema):
    """
    Classifier confidence required before a routing or approval verdict counts.

    The comparison is strict: a verdict exactly at the threshold is ignored.
    """
    confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)


class TimeoutPolicy(BaseSchema):
    """
    Per-call timeouts (seconds) for every external collaborator.

    A timeout is reported the same way as a failure of that collaborator.
    """
    reasoning_seconds: float = Field(default=60.0, gt=0.0)
    classifier_seconds: float = Field(default=15.0, gt=0.0)
    tool_seconds: float = Field(default=60.0, gt=0.0)


class SafetyPolicy(BaseSchema):
    """
    Configuration for safety guardrails.

    Includes secret redaction for logged payloads and a size limit on tool
    arguments produced by the reasoning service.
    """
    redact_secrets: bool = True
    max_tool_args_bytes: int = Field(default=64_000, ge=1, le=5_000_000)


class PolicyConfig(BaseSchema):
    """
    Aggregate configuration object for all policy aspects.

    This is the root configuration object used to instantiate a ``GlobalPolicy``.
    """
    version: str = Field(default="policy-v1")

    tool_policy: ToolPolicy = Field(default_factory=ToolPolicy)
    loop_policy: LoopPolicy = Field(default_factory=LoopPolicy)
    approval_policy: ApprovalPolicy = Field(default_factory=ApprovalPolicy)
    timeout_policy: TimeoutPolicy = Field(default_factory=TimeoutPolicy)
    safety_policy: SafetyPolicy = Field(default_factory=SafetyPolicy)


@dataclass(frozen=True)
class PolicyDecision:
    """
    Result of a policy evaluation for a requested tool call.

    Attributes:
        block: Whether the call must be refused.
        block_reason: Human-readable reason if the call is refused.
    """
    block: bool
    block_reason: Optional[str] = None
