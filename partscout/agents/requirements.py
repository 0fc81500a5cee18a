"""Requirement extraction stage."""

from __future__ import annotations

import logging

from partscout.agents.base import dedupe_by_name, parse_records
from partscout.constants import STEP_ANALYZE_REQUIREMENTS
from partscout.models.parts import Category, RequirementsData
from partscout.services.json_extractor import MalformedExtraction, extract_json, preview
from partscout.services.reasoning_client import ReasoningClient
from partscout.services.reporter import RunTrace

logger = logging.getLogger(__name__)

REQUIREMENTS_SYSTEM_PROMPT = (
    "You are an expert electronics engineer. Analyze project requirements and identify "
    "needed components."
)


def build_requirements_prompt(project_description: str) -> str:
    return (
        "Analyze the following project description and identify the electronic components "
        "needed. Provide a structured JSON response with:\n"
        "1. Required component categories (limit to 3-5 key categories, e.g. "
        '"Microcontrollers", "Sensors". Do NOT repeat categories)\n'
        "2. Key specifications for each category\n"
        "3. Any constraints or special requirements\n\n"
        f"Project description: {project_description}\n\n"
        "Respond in JSON format with this structure:\n"
        "{\n"
        '  "categories": [\n'
        "    {\n"
        '      "name": "category name",\n'
        '      "specifications": ["spec1", "spec2"],\n'
        '      "constraints": ["constraint1", "constraint2"]\n'
        "    }\n"
        "  ]\n"
        "}"
    )


def parse_requirements(text: str) -> RequirementsData:
    """Parse a requirements response, degrading to no categories.

    Args:
        text: Raw reasoning-service response.

    Returns:
        RequirementsData with unique categories.
    """

    try:
        payload = extract_json(text)
    except MalformedExtraction as exc:
        logger.warning("Failed to parse requirements (%s): %s", exc, preview(text))
        return RequirementsData()

    raw_categories = payload.get("categories") if isinstance(payload, dict) else payload
    categories = parse_records(raw_categories, Category, "category")
    return RequirementsData(categories=dedupe_by_name(categories, key=lambda c: c.name))


async def extract_requirements(
    project_description: str,
    reasoning: ReasoningClient,
    trace: RunTrace,
) -> RequirementsData:
    """Identify component categories for a project.

    ReasoningUnavailable propagates: this is the first call of a run.

    Args:
        project_description: Free-text project description.
        reasoning: Shared reasoning client.
        trace: Run trace.

    Returns:
        RequirementsData, possibly with zero categories.
    """

    trace.add(
        STEP_ANALYZE_REQUIREMENTS,
        reasoning=(
            "Parsing the project description to identify required components and "
            "specifications"
        ),
    )
    response = await reasoning.complete(
        build_requirements_prompt(project_description),
        REQUIREMENTS_SYSTEM_PROMPT,
    )
    requirements = parse_requirements(response)
    logger.info(
        "Identified %d categories: %s",
        len(requirements.categories),
        ", ".join(category.name for category in requirements.categories),
    )
    return requirements
