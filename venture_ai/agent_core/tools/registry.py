from __future__ import annotations

"""Tool catalog.

The catalog maps each ``ToolName`` to its implementation. ``ToolName`` is a
closed enum, so a name the reasoning service invents cannot be registered or
resolved.

The runtime engine uses the catalog twice per reasoning call: ``specs_for``
builds the function definitions offered for the current state, and
``resolve`` + ``get`` map a returned call back to an implementation.
"""

from typing import Dict, Iterable, List

from ..schemas.domain import ToolName
from ..services.reasoning import ToolSpec
from .base import Tool


class UnknownToolError(LookupError):
    """Raised when a tool name is not part of the catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown tool: {name}")


class ToolCatalogError(RuntimeError):
    """Raised when the catalog does not cover every ``ToolName``."""

    def __init__(self, missing: List[ToolName]) -> None:
        self.missing = missing
        super().__init__("tools without implementation: " + ", ".join(t.value for t in missing))


class ToolCatalog:
    """
    In-memory mapping of tool names to implementations.

    Notes:
        - ``register`` overwrites any existing mapping for the tool name.
        - ``get`` will raise ``KeyError`` if the tool is missing.
    """

    def __init__(self) -> None:
        self._tools: Dict[ToolName, Tool] = {}

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def register_all(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: ToolName) -> Tool:
        return self._tools[name]

    def has(self, name: ToolName) -> bool:
        return name in self._tools

    def names(self) -> List[ToolName]:
        return list(self._tools)

    def definitions(self) -> List[Tool]:
        return list(self._tools.values())

    def resolve(self, raw_name: str) -> ToolName:
        """
        Map a tool name returned by the reasoning service to a registered ``ToolName``.

        Raises:
            UnknownToolError: If the name is not in the enum or has no implementation.
        """
        try:
            name = ToolName(raw_name)
        except ValueError:
            raise UnknownToolError(raw_name) from None
        if name not in self._tools:
            raise UnknownToolError(raw_name)
        return name

    def specs_for(self, names: Iterable[ToolName]) -> List[ToolSpec]:
        """Build the function definitions for ``names``, skipping unregistered ones, in catalog order."""
        wanted = set(names)
        specs: List[ToolSpec] = []
        for name, tool in self._tools.items():
            if name not in wanted:
                continue
            specs.append(
                ToolSpec(
                    name=name.value,
                    description=tool.description,
                    parameters=tool.input_model.model_json_schema(),
                )
            )
        return specs

    def validate_catalog(self) -> None:
        missing = [name for name in ToolName if name not in self._tools]
        if missing:
            raise ToolCatalogError(missing)
