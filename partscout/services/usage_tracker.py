"""Usage tracking for reasoning calls and external lookups."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from pydantic_ai.usage import RunUsage


@dataclass(frozen=True)
class UsageSnapshot:
    """Totals for one pipeline run."""

    input_tokens: int
    output_tokens: int
    requests: int
    rate_limited: int = 0
    sources: dict[str, int] = field(default_factory=dict)
    source_failures: dict[str, int] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def summary(self) -> str:
        """One-line rendering for logs and the terminal."""

        calls = ", ".join(
            f"{name}={count} ({self.source_failures.get(name, 0)} failed)"
            for name, count in sorted(self.sources.items())
        )
        return (
            f"{self.requests} reasoning requests, {self.total_tokens} tokens, "
            f"{self.rate_limited} rate limited; lookups: {calls or 'none'}"
        )


class UsageTracker:
    """Aggregate reasoning tokens and search/catalog calls across a run."""

    def __init__(self) -> None:
        self._usage = RunUsage()
        self._rate_limited = 0
        self._sources: dict[str, int] = {}
        self._source_failures: dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def add(self, usage: RunUsage | None) -> None:
        """Fold a completed reasoning call into the totals."""

        if usage is None:
            return
        async with self._lock:
            self._usage.incr(usage)

    async def add_rate_limit(self) -> None:
        async with self._lock:
            self._rate_limited += 1

    async def add_source(self, source: str, count: int = 1) -> None:
        """Count calls made to an external lookup service."""

        await self._bump(self._sources, source, count)

    async def add_source_failure(self, source: str) -> None:
        await self._bump(self._source_failures, source, 1)

    async def _bump(self, counts: dict[str, int], source: str, count: int) -> None:
        if not source or count <= 0:
            return
        normalized = source.strip().lower()
        async with self._lock:
            counts[normalized] = counts.get(normalized, 0) + count

    async def snapshot(self) -> UsageSnapshot:
        """Return an immutable snapshot of totals."""

        async with self._lock:
            return UsageSnapshot(
                input_tokens=self._usage.input_tokens,
                output_tokens=self._usage.output_tokens,
                requests=self._usage.requests,
                rate_limited=self._rate_limited,
                sources=dict(self._sources),
                source_failures=dict(self._source_failures),
            )
