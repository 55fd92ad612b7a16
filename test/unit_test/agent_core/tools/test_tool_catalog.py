from __future__ import annotations

import pytest

from venture_ai.agent_core.schemas.domain import ToolName, ToolResult
from venture_ai.agent_core.tools.base import FunctionTool, NoArgs, ok
from venture_ai.agent_core.tools.registry import ToolCatalog, ToolCatalogError, UnknownToolError


async def _noop(ctx, args) -> ToolResult:
    return ok()


def test_default_catalog_covers_every_tool_name(catalog: ToolCatalog) -> None:
    assert set(catalog.names()) == set(ToolName)
    catalog.validate_catalog()


def test_validate_catalog_lists_missing_tools() -> None:
    catalog = ToolCatalog()
    catalog.register(FunctionTool(ToolName.get_overview, "overview", NoArgs, _noop))
    with pytest.raises(ToolCatalogError) as exc_info:
        catalog.validate_catalog()
    assert ToolName.get_overview not in exc_info.value.missing
    assert ToolName.delete_server in exc_info.value.missing


def test_resolve_rejects_names_outside_the_catalog() -> None:
    catalog = ToolCatalog()
    catalog.register(FunctionTool(ToolName.get_overview, "overview", NoArgs, _noop))

    assert catalog.resolve("get_overview") is ToolName.get_overview
    with pytest.raises(UnknownToolError, match="unknown tool: launch_rocket"):
        catalog.resolve("launch_rocket")
    # A real tool name that is simply not registered is unknown as well.
    with pytest.raises(UnknownToolError):
        catalog.resolve("delete_server")


def test_specs_for_uses_catalog_order_and_skips_unregistered(catalog: ToolCatalog) -> None:
    specs = catalog.specs_for([ToolName.web_search, ToolName.create_project])
    assert [s.name for s in specs] == ["create_project", "web_search"]

    create = specs[0]
    assert create.description
    assert create.parameters["type"] == "object"
    assert "name" in create.parameters["properties"]
    assert "name" in create.parameters.get("required", [])

    partial = ToolCatalog()
    partial.register(FunctionTool(ToolName.get_overview, "overview", NoArgs, _noop))
    assert [s.name for s in partial.specs_for([ToolName.get_overview, ToolName.web_search])] == ["get_overview"]


def test_register_overwrites_existing_tool() -> None:
    catalog = ToolCatalog()
    catalog.register(FunctionTool(ToolName.get_overview, "first", NoArgs, _noop))
    catalog.register(FunctionTool(ToolName.get_overview, "second", NoArgs, _noop))
    assert catalog.get(ToolName.get_overview).description == "second"
    assert len(catalog.definitions()) == 1


def test_gated_tools_carry_categories(catalog: ToolCatalog) -> None:
    assert catalog.get(ToolName.register_domain).category is not None
    assert catalog.get(ToolName.create_repository).category is not None
    assert catalog.get(ToolName.create_server).category is not None
    assert catalog.get(ToolName.delete_server).destructive
    assert catalog.get(ToolName.cleanup_project).destructive
    assert catalog.get(ToolName.web_search).category is None
