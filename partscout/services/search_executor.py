"""Run planned web searches per category."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from partscout.constants import MAX_SNIPPETS_PER_QUERY
from partscout.models.parts import SearchPlanItem, SearchResult
from partscout.services.reporter import RunTrace
from partscout.services.tavily_client import SearchUnavailable

if TYPE_CHECKING:
    from partscout.agents.base import SearchService

logger = logging.getLogger(__name__)


async def execute_search_plan(
    plan: list[SearchPlanItem],
    search: SearchService,
    trace: RunTrace,
    max_queries: int = 3,
    max_results: int = MAX_SNIPPETS_PER_QUERY,
) -> dict[str, list[SearchResult]]:
    """Execute each category's queries one at a time.

    Args:
        plan: Search plan items.
        search: Search service.
        trace: Run trace.
        max_queries: Queries issued per category; extras are dropped.
        max_results: Snippets kept per query.

    Returns:
        Mapping of category name to collected results, in plan order.
    """

    results_by_category: dict[str, list[SearchResult]] = {}
    for item in plan:
        trace.add(
            f"Searching for {item.category} components",
            reasoning=(
                "Executing web searches to find options, specifications, and vendor "
                "information"
            ),
            search_queries=list(item.queries),
        )
        if len(item.queries) > max_queries:
            logger.info(
                "Truncating %d planned queries to %d for %s",
                len(item.queries),
                max_queries,
                item.category,
            )

        collected: list[SearchResult] = []
        for query in item.queries[:max_queries]:
            try:
                response = await search.search(query)
            except SearchUnavailable as exc:
                logger.warning("Search failed for query %r: %s", query, exc)
                continue
            collected.append(
                SearchResult(
                    query=query,
                    snippets=response.results[:max_results],
                    answer=response.answer,
                )
            )

        logger.info(
            "Category %s: %d/%d searches succeeded",
            item.category,
            len(collected),
            min(len(item.queries), max_queries),
        )
        results_by_category[item.category] = collected
    return results_by_category
