"""Search planning stage."""

from __future__ import annotations

import json
import logging

from partscout.agents.base import dedupe_by_name, parse_records
from partscout.constants import STEP_SEARCH_PLAN
from partscout.models.parts import Category, SearchPlanItem
from partscout.services.json_extractor import MalformedExtraction, extract_json, preview
from partscout.services.reasoning_client import ReasoningClient, ReasoningUnavailable
from partscout.services.reporter import RunTrace

logger = logging.getLogger(__name__)

SEARCH_PLAN_SYSTEM_PROMPT = (
    "You are an expert at finding electronic components. Generate effective search queries."
)


def build_search_plan_prompt(categories: list[Category]) -> str:
    categories_json = json.dumps(
        [category.model_dump(by_alias=True) for category in categories],
        indent=2,
    )
    return (
        "Based on the following component categories, generate specific search queries "
        "to find:\n"
        "1. Component options and alternatives\n"
        "2. Datasheets and technical specifications\n"
        "3. Digikey vendor information and pricing\n"
        "4. Comparison reviews\n\n"
        f"Categories: {categories_json}\n\n"
        "Generate 3-5 specific search queries for each category. Format as a JSON array of "
        'objects EXACTLY in this format, including "category" and "queries":\n'
        '[\n  {"category": "category name", "queries": ["query1", "query2", "query3"]}\n]\n'
        'If you must return a JSON object, put the array under a "searchPlan" key.'
    )


def _plan_items(payload: object) -> object:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if "category" in payload:
            return [payload]
        for value in payload.values():
            if isinstance(value, list):
                return value
    return None


def parse_search_plan(text: str) -> list[SearchPlanItem]:
    """Parse a search-plan response, degrading to an empty plan.

    Args:
        text: Raw reasoning-service response.

    Returns:
        Unique plan items in response order.
    """

    try:
        payload = extract_json(text)
    except MalformedExtraction as exc:
        logger.warning("Failed to parse search plan (%s): %s", exc, preview(text))
        return []

    items = parse_records(_plan_items(payload), SearchPlanItem, "search plan item")
    return dedupe_by_name(items, key=lambda item: item.category)


async def plan_searches(
    categories: list[Category],
    reasoning: ReasoningClient,
    trace: RunTrace,
) -> list[SearchPlanItem]:
    """Generate search queries for each category.

    Args:
        categories: Unique categories from requirement extraction.
        reasoning: Shared reasoning client.
        trace: Run trace.

    Returns:
        Search plan, empty when the call or parse fails.
    """

    trace.add(
        STEP_SEARCH_PLAN,
        reasoning="Creating a structured plan to search for components",
    )
    if not categories:
        logger.info("No categories to plan searches for")
        return []

    try:
        response = await reasoning.complete(
            build_search_plan_prompt(categories),
            SEARCH_PLAN_SYSTEM_PROMPT,
        )
    except ReasoningUnavailable:
        logger.exception("Search planning unavailable; continuing with an empty plan")
        return []

    plan = parse_search_plan(response)
    logger.info("Planned searches for %d categories", len(plan))
    trace.categories_planned(len(plan))
    return plan
