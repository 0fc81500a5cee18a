"""Parts-list workflow orchestration."""

import logging
import time

from partscout.agents.base import AgentDeps
from partscout.agents.component_synthesizer import synthesize_components
from partscout.agents.final_selector import select_final_parts
from partscout.agents.requirements import extract_requirements
from partscout.agents.search_planner import plan_searches
from partscout.core.settings import Settings
from partscout.models.parts import AgentRunResult
from partscout.services.catalog_enricher import enrich_final_list
from partscout.services.digikey_client import DigiKeyCatalogService
from partscout.services.llm_provider import PydanticAIReasoningService
from partscout.services.reasoning_client import ReasoningClient, ReasoningUnavailable
from partscout.services.reporter import RunReporter, RunTrace
from partscout.services.search_executor import execute_search_plan
from partscout.services.tavily_client import TavilySearchService
from partscout.services.throttle import RequestThrottle
from partscout.services.usage_tracker import UsageSnapshot, UsageTracker

logger = logging.getLogger(__name__)

REQUIRED_CREDENTIALS = (
    ("groq_api_key", "GROQ_API_KEY"),
    ("tavily_api_key", "TAVILY_API_KEY"),
    ("digikey_client_id", "DIGIKEY_CLIENT_ID"),
    ("digikey_client_secret", "DIGIKEY_CLIENT_SECRET"),
)


class PartsAgentError(RuntimeError):
    """Raised when a run cannot produce any result."""


def build_agent_deps(settings: Settings, model_name: str | None = None) -> AgentDeps:
    """Construct provider adapters from settings.

    Args:
        settings: Application settings.
        model_name: Optional reasoning model override.

    Returns:
        AgentDeps wired to Groq, Tavily and DigiKey.
    """

    for field_name, env_name in REQUIRED_CREDENTIALS:
        if not getattr(settings, field_name):
            raise PartsAgentError(f"{env_name} is not configured")

    usage_tracker = UsageTracker()
    service = PydanticAIReasoningService(
        model_name=model_name or settings.reasoning_model,
        api_key=settings.groq_api_key,
        temperature=settings.reasoning_temperature,
        usage_tracker=usage_tracker,
    )
    reasoning = ReasoningClient(
        service,
        throttle=RequestThrottle(
            cooldown_seconds=settings.reasoning_cooldown_seconds,
            default_wait_seconds=settings.rate_limit_default_wait_seconds,
        ),
        max_attempts=settings.reasoning_max_attempts,
        json_mode=settings.reasoning_json_mode,
    )
    search = TavilySearchService(
        api_key=settings.tavily_api_key,
        max_results=settings.search_max_results,
        search_depth=settings.search_depth,
        url=settings.tavily_search_url,
        timeout=settings.http_timeout_seconds,
        usage_tracker=usage_tracker,
    )
    catalog = DigiKeyCatalogService(
        base_url=settings.digikey_base_url,
        token_url=settings.digikey_token_url,
        timeout=settings.http_timeout_seconds,
        usage_tracker=usage_tracker,
    )
    return AgentDeps(
        reasoning=reasoning,
        search=search,
        catalog=catalog,
        catalog_client_id=settings.digikey_client_id,
        catalog_client_secret=settings.digikey_client_secret,
        usage_tracker=usage_tracker,
        max_queries_per_category=settings.search_max_queries_per_category,
        max_results_per_query=settings.search_max_results,
    )


async def run_parts_agent(
    project_description: str,
    deps: AgentDeps,
    reporter: RunReporter | None = None,
) -> AgentRunResult:
    """Run the full parts-list workflow.

    Args:
        project_description: Free-text project description.
        deps: Agent dependencies.
        reporter: Optional progress callbacks.

    Returns:
        AgentRunResult with the trace, candidate parts and final selection.
    """

    description = (project_description or "").strip()
    if not description:
        raise PartsAgentError("Project description is required")

    logger.info("Starting parts run")
    start = time.perf_counter()
    trace = RunTrace(reporter=reporter)

    try:
        requirements = await extract_requirements(description, deps.reasoning, trace)
    except ReasoningUnavailable as exc:
        logger.exception("Run failed")
        raise PartsAgentError(f"Reasoning service unavailable: {exc}") from exc

    plan = await plan_searches(requirements.categories, deps.reasoning, trace)
    search_results = await execute_search_plan(
        plan,
        deps.search,
        trace,
        max_queries=deps.max_queries_per_category,
        max_results=deps.max_results_per_query,
    )
    parts_list = await synthesize_components(search_results, deps.reasoning, trace)
    final_list = await select_final_parts(parts_list, description, deps.reasoning, trace)
    report = await enrich_final_list(
        final_list,
        deps.catalog,
        deps.catalog_client_id,
        deps.catalog_client_secret,
        trace,
    )

    usage = await deps.usage_tracker.snapshot()
    logger.info(
        "Run complete in %.1fs: %d categories, %d components, %d final parts (%d catalog matches)",
        time.perf_counter() - start,
        len(parts_list.categories),
        parts_list.component_count(),
        len(final_list.final_parts),
        report.matched,
    )
    _log_usage_snapshot(usage)

    return AgentRunResult(
        steps=trace.steps,
        parts_list=parts_list,
        final_list=final_list,
        usage=usage,
    )


def _log_usage_snapshot(snapshot: UsageSnapshot) -> None:
    logger.info("Usage: %s", snapshot.summary())
