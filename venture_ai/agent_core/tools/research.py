from __future__ import annotations

"""Web research tools (``backends.research``)."""

from typing import List, Literal

from pydantic import Field

from ..schemas.domain import ToolName
from .backends import DelegatingTool
from .base import ToolArgs


class WebSearchArgs(ToolArgs):
    query: str = Field(min_length=1, description="Search query")
    max_results: int = Field(default=5, ge=1, le=20)
    search_depth: Literal["basic", "advanced"] = "basic"


class DeepResearchArgs(ToolArgs):
    topic: str = Field(min_length=1, description="Research topic")
    queries: List[str] = Field(min_length=1, max_length=8, description="Specific questions to research")


class MarketResearchArgs(ToolArgs):
    business_idea: str = Field(min_length=1, description="The business idea to research")


class CompetitorArgs(ToolArgs):
    competitors: List[str] = Field(min_length=1, max_length=10, description="Competitor names or domains")


class ExtractArgs(ToolArgs):
    urls: List[str] = Field(min_length=1, max_length=10, description="Pages to extract content from")


def research_tools() -> List[DelegatingTool]:
    group = "research"
    return [
        DelegatingTool(ToolName.web_search, "Search the web for current information", WebSearchArgs, group),
        DelegatingTool(
            ToolName.deep_research,
            "Research a topic in depth by running several advanced searches",
            DeepResearchArgs,
            group,
        ),
        DelegatingTool(
            ToolName.market_research,
            "Research competitors, market size, trends and target audience for a business idea",
            MarketResearchArgs,
            group,
        ),
        DelegatingTool(ToolName.competitor_analysis, "Analyse a list of competitors", CompetitorArgs, group),
        DelegatingTool(ToolName.extract_content, "Extract the text content of web pages", ExtractArgs, group),
    ]
