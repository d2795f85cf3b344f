import asyncio
import time

import pytest

from fareview.services.rate_limiter import RateLimiter, build_rate_limiter

# Scheduling jitter allowed when comparing loop timestamps
TOLERANCE = 0.003


async def _run_tasks(limiter, count, duration=0.0):
    starts = []
    state = {"in_flight": 0, "max_in_flight": 0}

    async def task(i):
        starts.append((i, time.monotonic()))
        state["in_flight"] += 1
        state["max_in_flight"] = max(state["max_in_flight"], state["in_flight"])
        try:
            await asyncio.sleep(duration)
            return i
        finally:
            state["in_flight"] -= 1

    results = await asyncio.gather(*(limiter.schedule(task, i) for i in range(count)))
    return results, starts, state["max_in_flight"]


def test_bounded_interval_caps_concurrency_and_spacing():
    # The test profile (100ms spacing) scaled down tenfold to keep the suite fast
    limiter = RateLimiter(max_concurrent=50, min_time=0.01)

    results, starts, max_in_flight = asyncio.run(_run_tasks(limiter, 100, duration=0.8))

    assert results == list(range(100))
    assert max_in_flight == 50
    times = [t for _, t in starts]
    gaps = [b - a for a, b in zip(times, times[1:])]
    assert min(gaps) >= 0.01 - TOLERANCE


def test_admission_is_fifo():
    limiter = RateLimiter(max_concurrent=1)

    _, starts, max_in_flight = asyncio.run(_run_tasks(limiter, 20, duration=0.001))

    assert [i for i, _ in starts] == list(range(20))
    assert max_in_flight == 1


def test_reservoir_limits_dispatches_per_interval():
    limiter = RateLimiter(max_concurrent=50, reservoir=5, reservoir_refresh_amount=5,
                          reservoir_refresh_interval=0.2)

    _, starts, _ = asyncio.run(_run_tasks(limiter, 12))

    times = sorted(t for _, t in starts)
    first = times[0]
    assert all(t - first < 0.2 - TOLERANCE for t in times[:5])
    assert all(t - first >= 0.2 - TOLERANCE for t in times[5:])
    assert all(t - first >= 0.4 - TOLERANCE for t in times[10:])


def test_task_errors_reach_the_caller_and_free_the_slot():
    limiter = RateLimiter(max_concurrent=1)

    async def boom():
        raise RuntimeError("upstream down")

    async def ok():
        return "ok"

    async def scenario():
        with pytest.raises(RuntimeError):
            await limiter.schedule(boom)
        return await limiter.schedule(ok)

    assert asyncio.run(scenario()) == "ok"
    assert limiter.running == 0
    assert limiter.queued == 0


def test_schedule_passes_arguments():
    limiter = RateLimiter()

    async def add(a, b=0):
        return a + b

    assert asyncio.run(limiter.schedule(add, 2, b=3)) == 5


def test_profiles_per_environment():
    test_limiter = build_rate_limiter("test")
    assert test_limiter.min_time == 0.1
    assert test_limiter.max_concurrent == 50
    assert test_limiter.reservoir_refresh_interval is None

    prod_limiter = build_rate_limiter("production")
    assert prod_limiter.min_time == 0.0
    assert prod_limiter.max_concurrent == 50
    assert prod_limiter.reservoir_refresh_amount == 40
    assert prod_limiter.reservoir_refresh_interval == 1.0


def test_rejects_invalid_configuration():
    with pytest.raises(ValueError):
        RateLimiter(max_concurrent=0)
    with pytest.raises(ValueError):
        RateLimiter(reservoir=10)


def test_test_profile_paces_100_tasks():
    limiter = build_rate_limiter("test")

    results, starts, max_in_flight = asyncio.run(_run_tasks(limiter, 100, duration=5.05))

    assert results == list(range(100))
    assert max_in_flight == 50
    times = [t for _, t in starts]
    gaps = [b - a for a, b in zip(times, times[1:])]
    assert min(gaps) >= 0.1 - TOLERANCE
