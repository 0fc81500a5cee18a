"""Final compatible-selection stage."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from partscout.agents.base import dedupe_by_name, parse_records
from partscout.constants import STEP_RECOMMEND_FINAL, STEP_SYNTHESIZE_PARTS
from partscout.models.parts import FinalList, FinalPart, PartsList
from partscout.services.json_extractor import (
    MalformedExtraction,
    extract_json_object_span,
    preview,
)
from partscout.services.reasoning_client import ReasoningClient, ReasoningUnavailable
from partscout.services.reporter import RunTrace

logger = logging.getLogger(__name__)

FINAL_SYSTEM_PROMPT = (
    "You are an expert electronics engineer. Select compatible components for a complete "
    "system."
)


def build_final_prompt(parts_list: PartsList, project_description: str) -> str:
    parts_json = json.dumps(parts_list.model_dump(by_alias=True, exclude_none=True), indent=2)
    return (
        "Based on the following parts list, recommend a final set of compatible components "
        "for the project.\n\n"
        f"Parts List:\n{parts_json}\n\n"
        f"Project Description: {project_description}\n\n"
        "Select exactly one option per component (unless the component is not necessary, in "
        "which case do not include it), ensuring all selected parts are compatible with each "
        "other (e.g., voltage levels, interfaces, power requirements). Consider the project "
        "requirements and constraints.\n\n"
        "Respond ONLY with valid JSON in this structure:\n"
        "{\n"
        '  "finalParts": [\n'
        "    {\n"
        '      "category": "category name",\n'
        '      "component": "component name",\n'
        '      "selectedOption": {\n'
        '        "name": "option name",\n'
        '        "specifications": ["spec1", "spec2"],\n'
        '        "pros": ["pro1", "pro2"],\n'
        '        "cons": ["con1", "con2"],\n'
        '        "datasheetLink": "link or empty",\n'
        '        "vendorLinks": [{"name": "vendor", "url": "url", "price": "price"}]\n'
        "      },\n"
        '      "compatibilityNotes": "brief notes on compatibility"\n'
        "    }\n"
        "  ],\n"
        '  "totalEstimatedCost": "approximate total cost if available",\n'
        '  "compatibilitySummary": "overall compatibility assessment"\n'
        "}"
    )


def parse_final_list(text: str) -> FinalList:
    """Parse a final-selection response, degrading to an empty list.

    Args:
        text: Raw reasoning-service response.

    Returns:
        FinalList with at most one part per component name.
    """

    try:
        payload = extract_json_object_span(text)
    except MalformedExtraction as exc:
        logger.warning("Failed to parse final list (%s): %s", exc, preview(text))
        return FinalList.empty()

    if not isinstance(payload, dict):
        return FinalList.empty()

    parts = parse_records(payload.get("finalParts"), FinalPart, "final part")
    unique_parts = dedupe_by_name(parts, key=lambda part: part.component)
    if len(unique_parts) < len(parts):
        logger.warning("Dropped %d duplicate component selections", len(parts) - len(unique_parts))

    try:
        return FinalList(
            final_parts=unique_parts,
            total_estimated_cost=payload.get("totalEstimatedCost") or "",
            compatibility_summary=payload.get("compatibilitySummary") or "",
        )
    except ValidationError as exc:
        logger.warning("Final list summary fields invalid: %s", exc.errors()[:1])
        return FinalList(final_parts=unique_parts)


async def select_final_parts(
    parts_list: PartsList,
    project_description: str,
    reasoning: ReasoningClient,
    trace: RunTrace,
) -> FinalList:
    """Pick one mutually compatible option per component.

    Args:
        parts_list: Candidate parts from synthesis.
        project_description: Original project description.
        reasoning: Shared reasoning client.
        trace: Run trace.

    Returns:
        FinalList, empty when the call or parse fails.
    """

    trace.add(
        STEP_SYNTHESIZE_PARTS,
        reasoning="Compiling all findings into a comprehensive, organized parts list",
    )
    trace.add(
        STEP_RECOMMEND_FINAL,
        reasoning=(
            "Selecting one compatible option per component to create a recommended final "
            "parts list"
        ),
    )
    if parts_list.component_count() == 0:
        logger.info("No candidate components; skipping final selection")
        return FinalList.empty()

    try:
        response = await reasoning.complete(
            build_final_prompt(parts_list, project_description),
            FINAL_SYSTEM_PROMPT,
        )
    except ReasoningUnavailable:
        logger.exception("Final selection unavailable; returning an empty final list")
        return FinalList.empty()

    final_list = parse_final_list(response)
    logger.info("Selected %d final parts", len(final_list.final_parts))
    return final_list
