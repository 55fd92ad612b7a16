from __future__ import annotations

"""Tavily research backend.

Implements the ``research`` backend operations over the Tavily HTTP API:

- ``web_search``: one ``POST /search``;
- ``deep_research``: one advanced search per query, failures reported per query;
- ``market_research`` / ``competitor_analysis``: several advanced searches
  issued concurrently;
- ``extract_content``: ``POST /extract``.

HTTP errors propagate as ``httpx.HTTPStatusError``; the tool executor turns
them into failed tool results.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

TAVILY_API_URL = "https://api.tavily.com"


class TavilyResult(BaseModel):
    title: str = ""
    url: str
    content: str = ""
    score: float = 0.0


class TavilySearchResponse(BaseModel):
    query: str = ""
    answer: Optional[str] = None
    follow_up_questions: Optional[List[str]] = None
    results: List[TavilyResult] = Field(default_factory=list)


class TavilyExtracted(BaseModel):
    url: str
    raw_content: str = ""


class TavilyExtractResponse(BaseModel):
    results: List[TavilyExtracted] = Field(default_factory=list)
    failed_results: List[Dict[str, Any]] = Field(default_factory=list)


class TavilyResearchBackend:
    """Research backend for ``ToolBackends.research``.

    Args:
        api_key: Tavily API key, sent as a bearer token.
        client: Optional pre-configured ``httpx.AsyncClient`` (tests inject one
            with a ``MockTransport``).
    """

    def __init__(
        self,
        api_key: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = TAVILY_API_URL,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._http = client or httpx.AsyncClient(timeout=30.0)

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "Authorization": f"Bearer {self._api_key}"}

    async def _search(self, query: str, *, max_results: int, search_depth: str) -> TavilySearchResponse:
        logger.debug("Tavily search (%s): %s", search_depth, query)
        r = await self._http.post(
            f"{self._base_url}/search",
            headers=self._headers(),
            json={
                "query": query,
                "search_depth": search_depth,
                "max_results": max_results,
                "include_answer": True,
            },
        )
        r.raise_for_status()
        return TavilySearchResponse.model_validate(r.json())

    @staticmethod
    def _summary(query: str, response: TavilySearchResponse) -> Dict[str, Any]:
        return {
            "query": query,
            "summary": response.answer,
            "results": [r.model_dump() for r in response.results],
        }

    async def web_search(self, *, query: str, max_results: int = 5, search_depth: str = "basic") -> Dict[str, Any]:
        response = await self._search(query, max_results=max_results, search_depth=search_depth)
        return {
            "query": query,
            "answer": response.answer,
            "follow_up_questions": response.follow_up_questions or [],
            "results": [r.model_dump() for r in response.results],
        }

    async def deep_research(self, *, topic: str, queries: List[str]) -> Dict[str, Any]:
        findings: List[Dict[str, Any]] = []
        for query in queries:
            try:
                response = await self._search(query, max_results=5, search_depth="advanced")
                findings.append(self._summary(query, response))
            except httpx.HTTPError as exc:
                logger.warning("Research query failed: %s (%s)", query, exc)
                findings.append({"query": query, "summary": f"Error: {exc}", "results": []})
        return {"topic": topic, "findings": findings}

    async def _advanced_many(self, queries: Dict[str, str], *, max_results: int = 5) -> Dict[str, Any]:
        responses = await asyncio.gather(
            *(self._search(q, max_results=max_results, search_depth="advanced") for q in queries.values())
        )
        return {key: self._summary(q, resp) for (key, q), resp in zip(queries.items(), responses)}

    async def market_research(self, *, business_idea: str) -> Dict[str, Any]:
        sections = await self._advanced_many(
            {
                "competitors": f"{business_idea} competitors analysis",
                "market_size": f"{business_idea} market size revenue industry",
                "trends": f"{business_idea} industry trends",
                "target_audience": f"{business_idea} target audience demographics",
            }
        )
        return {"business_idea": business_idea, **sections}

    async def competitor_analysis(self, *, competitors: List[str]) -> Dict[str, Any]:
        sections = await self._advanced_many(
            {name: f"{name} company product pricing features reviews" for name in competitors}, max_results=3
        )
        return {"competitors": sections}

    async def extract_content(self, *, urls: List[str]) -> Dict[str, Any]:
        r = await self._http.post(f"{self._base_url}/extract", headers=self._headers(), json={"urls": urls})
        r.raise_for_status()
        payload = TavilyExtractResponse.model_validate(r.json())
        return {
            "results": [{"url": e.url, "content": e.raw_content} for e in payload.results],
            "failed": payload.failed_results,
        }

    async def aclose(self) -> None:
        await self._http.aclose()
