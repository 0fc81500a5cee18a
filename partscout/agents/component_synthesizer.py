"""Component synthesis stage."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from partscout.agents.base import parse_records
from partscout.constants import (
    DATASHEET_SOURCES,
    MAX_COMPONENTS_PER_CATEGORY,
    MAX_OPTIONS_PER_COMPONENT,
    MAX_SNIPPETS_PER_QUERY,
    STEP_ANALYZE_RESULTS,
)
from partscout.models.parts import (
    CategoryParts,
    Component,
    ComponentOption,
    PartsList,
    SearchResult,
)
from partscout.services.json_extractor import MalformedExtraction, extract_json, preview
from partscout.services.reasoning_client import ReasoningClient, ReasoningUnavailable
from partscout.services.reporter import RunTrace

logger = logging.getLogger(__name__)

SYNTHESIS_SYSTEM_PROMPT = (
    "You are an expert electronics engineer. Respond ONLY with valid JSON, no other text."
)


def build_evidence(results: list[SearchResult]) -> str:
    """Render collected search results into one evidence block."""

    blocks = []
    for result in results:
        snippets = "\n\n".join(
            f"{snippet.title}: {snippet.content}"
            for snippet in result.snippets[:MAX_SNIPPETS_PER_QUERY]
        )
        blocks.append(
            f"Query: {result.query}\nAnswer: {result.answer or ''}\nResults:\n{snippets}"
        )
    return "\n\n---\n\n".join(blocks)


def build_synthesis_prompt(category: str, evidence: str) -> str:
    sources = ", ".join(DATASHEET_SOURCES)
    return (
        f"Based on the following search results for {category}, extract and structure "
        "component recommendations.\n\n"
        f"Search Results:\n{evidence or '(no search results were found)'}\n\n"
        "CRITICAL: Respond with ONLY valid JSON. No explanations, no markdown, no text before "
        "or after. Start your response with { and end with }.\n\n"
        "Provide a JSON response with this exact structure:\n"
        "{\n"
        '  "components": [\n'
        "    {\n"
        '      "name": "component name",\n'
        '      "options": [\n'
        "        {\n"
        "          \"name\": \"option name (e.g., 'Arduino Uno', 'Raspberry Pi 4')\",\n"
        '          "specifications": ["spec1", "spec2"],\n'
        '          "pros": ["pro1", "pro2"],\n'
        '          "cons": ["con1", "con2"],\n'
        '          "datasheetLink": "datasheet url or empty string",\n'
        '          "vendorLinks": [\n'
        '            {"name": "vendor name", "url": "vendor url", "price": "price if available"}\n'
        "          ]\n"
        "        }\n"
        "      ]\n"
        "    }\n"
        "  ]\n"
        "}\n\n"
        f"Include 1-{MAX_OPTIONS_PER_COMPONENT} options per component and "
        f"1-{MAX_COMPONENTS_PER_CATEGORY} components per category. Be specific with "
        "specifications, pros, and cons. Only fill datasheetLink with a URL that appears in "
        f"the search results and comes from a manufacturer or one of: {sources}. Otherwise "
        "leave it as an empty string. Never invent URLs."
    )


def parse_components(text: str, category: str) -> list[Component]:
    """Parse one category's synthesis response, degrading to no components.

    Args:
        text: Raw reasoning-service response.
        category: Category name for logging.

    Returns:
        At most four components with at most four options each.
    """

    try:
        payload = extract_json(text)
    except MalformedExtraction as exc:
        logger.warning(
            "Failed to parse component analysis for %s (%s): %s",
            category,
            exc,
            preview(text),
        )
        return []

    raw_components = payload.get("components") if isinstance(payload, dict) else payload
    if not isinstance(raw_components, list):
        logger.warning("No component list in analysis for %s", category)
        return []

    components: list[Component] = []
    for raw in raw_components:
        if len(components) >= MAX_COMPONENTS_PER_CATEGORY:
            break
        if not isinstance(raw, dict):
            continue
        options = parse_records(raw.get("options"), ComponentOption, "option")
        if not options:
            continue
        try:
            components.append(
                Component(name=raw.get("name"), options=options[:MAX_OPTIONS_PER_COMPONENT])
            )
        except ValidationError as exc:
            logger.warning("Dropping invalid component for %s: %s", category, exc.errors()[:1])
    return components


async def synthesize_components(
    search_results: dict[str, list[SearchResult]],
    reasoning: ReasoningClient,
    trace: RunTrace,
) -> PartsList:
    """Turn each category's search evidence into component options.

    Failures are isolated per category.

    Args:
        search_results: Results keyed by category, in plan order.
        reasoning: Shared reasoning client.
        trace: Run trace.

    Returns:
        PartsList with one entry per category.
    """

    trace.add(
        STEP_ANALYZE_RESULTS,
        reasoning=(
            "Extracting component specifications, pros/cons, and vendor information from "
            "search results"
        ),
    )

    categories: list[CategoryParts] = []
    for category, results in search_results.items():
        trace.add(
            f"Extracting {category} components",
            reasoning=f"Summarizing {len(results)} searches into component options",
        )
        try:
            response = await reasoning.complete(
                build_synthesis_prompt(category, build_evidence(results)),
                SYNTHESIS_SYSTEM_PROMPT,
            )
        except ReasoningUnavailable:
            logger.exception("Component analysis unavailable for %s", category)
            categories.append(CategoryParts(name=category, components=[]))
            continue

        components = parse_components(response, category)
        logger.info(
            "Category %s: %d components, %d options",
            category,
            len(components),
            sum(len(component.options) for component in components),
        )
        categories.append(CategoryParts(name=category, components=components))

    return PartsList(categories=categories)
