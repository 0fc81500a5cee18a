"""Run trace and progress reporting helpers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from partscout.models.parts import AgentStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunReporter:
    """Optional callbacks for reporting run progress."""

    on_step: Callable[[AgentStep], None] | None = None
    on_categories_planned: Callable[[int], None] | None = None
    on_part_enriched: Callable[[str, bool], None] | None = None


@dataclass
class RunTrace:
    """Append-only list of stage steps for one run."""

    reporter: RunReporter | None = None
    steps: list[AgentStep] = field(default_factory=list)

    def add(
        self,
        step: str,
        reasoning: str | None = None,
        search_queries: list[str] | None = None,
    ) -> AgentStep:
        """Record the start of a stage."""

        entry = AgentStep(step=step, reasoning=reasoning, search_queries=search_queries)
        self.steps.append(entry)
        logger.info("Step: %s", step)
        if self.reporter is not None and self.reporter.on_step is not None:
            self.reporter.on_step(entry)
        return entry

    def categories_planned(self, count: int) -> None:
        if self.reporter is not None and self.reporter.on_categories_planned is not None:
            self.reporter.on_categories_planned(count)

    def part_enriched(self, name: str, matched: bool) -> None:
        if self.reporter is not None and self.reporter.on_part_enriched is not None:
            self.reporter.on_part_enriched(name, matched)
