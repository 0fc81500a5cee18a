"""Tavily Search API client."""

from collections.abc import Iterable

import httpx
from pydantic import ValidationError

from partscout.constants import TAVILY_SEARCH_URL
from partscout.models.parts import SearchResponse, SearchSnippet
from partscout.services.usage_tracker import UsageTracker


class SearchUnavailable(RuntimeError):
    """Raised when a Tavily search fails."""


def _parse_results(items: Iterable[dict]) -> list[SearchSnippet]:
    results: list[SearchSnippet] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            results.append(
                SearchSnippet(
                    title=item.get("title") or "",
                    content=item.get("content") or "",
                    url=item.get("url"),
                )
            )
        except ValidationError:
            continue
    return results


async def search_tavily(
    query: str,
    api_key: str,
    max_results: int = 5,
    search_depth: str = "advanced",
    url: str = TAVILY_SEARCH_URL,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> SearchResponse:
    """Call Tavily Search API.

    Args:
        query: Search query.
        api_key: Tavily API key.
        max_results: Number of results to request.
        search_depth: Tavily search depth (basic, advanced).
        url: Search endpoint.
        timeout: Request timeout in seconds when no client is given.
        client: Optional HTTP client.

    Returns:
        SearchResponse with parsed results and the synthesized answer.
    """

    if not api_key:
        raise SearchUnavailable("TAVILY_API_KEY is not configured")

    payload = {
        "api_key": api_key,
        "query": query,
        "search_depth": search_depth,
        "include_answer": True,
        "include_images": False,
        "include_raw_content": False,
        "max_results": max_results,
    }

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)
        close_client = True

    try:
        response = await client.post(url, json=payload)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise SearchUnavailable(f"Tavily search failed: {exc}") from exc
    finally:
        if close_client:
            await client.aclose()

    if not isinstance(data, dict):
        raise SearchUnavailable("Tavily search returned an unexpected payload")

    answer = data.get("answer")
    return SearchResponse(
        answer=answer if isinstance(answer, str) and answer.strip() else None,
        results=_parse_results(data.get("results") or []),
    )


class TavilySearchService:
    """SearchService backed by Tavily."""

    def __init__(
        self,
        api_key: str,
        max_results: int = 5,
        search_depth: str = "advanced",
        url: str = TAVILY_SEARCH_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        usage_tracker: UsageTracker | None = None,
    ) -> None:
        self._api_key = api_key
        self._max_results = max_results
        self._search_depth = search_depth
        self._url = url
        self._timeout = timeout
        self._client = client
        self._usage_tracker = usage_tracker

    async def search(self, query: str) -> SearchResponse:
        if self._usage_tracker is not None:
            await self._usage_tracker.add_source("tavily")
        try:
            return await search_tavily(
                query=query,
                api_key=self._api_key,
                max_results=self._max_results,
                search_depth=self._search_depth,
                url=self._url,
                timeout=self._timeout,
                client=self._client,
            )
        except SearchUnavailable:
            if self._usage_tracker is not None:
                await self._usage_tracker.add_source_failure("tavily")
            raise
