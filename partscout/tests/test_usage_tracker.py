import asyncio

from pydantic_ai.usage import RunUsage

from partscout.services.usage_tracker import UsageTracker


def test_usage_tracker_aggregates() -> None:
    tracker = UsageTracker()

    async def _run() -> None:
        await tracker.add(RunUsage(input_tokens=10, output_tokens=5, requests=1))
        await tracker.add(RunUsage(input_tokens=3, output_tokens=7, requests=2))
        await tracker.add(None)
        await tracker.add_rate_limit()
        await tracker.add_source("Tavily", count=2)
        await tracker.add_source("digikey")
        await tracker.add_source("", count=4)
        await tracker.add_source_failure("tavily")
        snapshot = await tracker.snapshot()
        assert snapshot.input_tokens == 13
        assert snapshot.output_tokens == 12
        assert snapshot.requests == 3
        assert snapshot.total_tokens == 25
        assert snapshot.rate_limited == 1
        assert snapshot.sources == {"tavily": 2, "digikey": 1}
        assert snapshot.source_failures == {"tavily": 1}
        assert "tavily=2 (1 failed)" in snapshot.summary()

    asyncio.run(_run())
