import asyncio

from partscout.services.throttle import RequestThrottle


def test_throttle_cooldown_and_backoff(recording_sleep) -> None:
    throttle = RequestThrottle(cooldown_seconds=2.0, default_wait_seconds=5.0, sleep=recording_sleep)

    async def _run() -> None:
        await throttle.cooldown()
        assert await throttle.backoff() == 5.0
        assert await throttle.backoff(0.5) == 0.5
        assert await throttle.backoff(-3) == 0.0

    asyncio.run(_run())

    assert recording_sleep.calls == [2.0, 5.0, 0.5]
    assert throttle.total_waited == 7.5


def test_throttle_zero_cooldown_never_sleeps(recording_sleep) -> None:
    throttle = RequestThrottle(cooldown_seconds=0, sleep=recording_sleep)

    asyncio.run(throttle.cooldown())

    assert recording_sleep.calls == []
    assert throttle.total_waited == 0.0
