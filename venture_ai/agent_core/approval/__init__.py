"""Approval handling.

- ``gate``: resolves the per-turn pending invocation from the user's reply.
- ``standing``: approval checks tools run before costly or destructive work.
"""

from .gate import ApprovalGate
from .standing import (
    DEFAULT_APPROVAL_PROMPT,
    needs_approval,
    require_standing_approval,
    require_turn_approval,
)

__all__ = [
    "ApprovalGate",
    "DEFAULT_APPROVAL_PROMPT",
    "needs_approval",
    "require_standing_approval",
    "require_turn_approval",
]
