"""Closed tool catalog and tool execution.

 A *tool* is a function the reasoning service may call during a turn.

 - ``ToolName`` (in ``schemas.domain``) is the closed set of tool names.
 - ``ToolCatalog`` maps every name to an implementation and is validated at
   startup against the enum and the state registry.
 - ``ToolExecutor`` parses, guards, validates and runs a requested call.

 Tool groups live in their own modules: ``project`` and ``context`` work
 against the stores; ``domains``, ``repositories``, ``chat``, ``payments``
 and ``research`` delegate to the optional ``ToolBackends``.
 """

from .backends import ToolBackends
from .base import FunctionTool, Tool, ToolArgs, ToolContext
from .deps import ToolDeps
from .executor import ExecutedCall, ToolExecutor
from .registry import ToolCatalog, ToolCatalogError, UnknownToolError

__all__ = [
    "ToolBackends",
    "FunctionTool",
    "Tool",
    "ToolArgs",
    "ToolContext",
    "ToolDeps",
    "ExecutedCall",
    "ToolExecutor",
    "ToolCatalog",
    "ToolCatalogError",
    "UnknownToolError",
]
