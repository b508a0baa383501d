import asyncio
import time

import pytest

from balloonwatch.core.rate_limiter import SnapshotCache, round_coordinate


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_round_coordinate_and_key():
    cache = SnapshotCache()

    assert round_coordinate(10.126) == 10.13
    assert round_coordinate(-10.126) == -10.13
    assert round_coordinate(-0.001) == 0.0
    assert cache.key_for(10.1234, -20.5678) == "10.12,-20.57"
    assert cache.key_for(-0.001, 0.001) == "0.00,0.00"


@pytest.mark.anyio
async def test_same_key_waits_out_remaining_interval():
    clock = FakeClock()
    cache = SnapshotCache(1.0, clock=clock, sleep=clock.sleep)
    dispatched: list[float] = []

    async def fetch():
        dispatched.append(clock.now)
        return "ok"

    assert await cache.run(10.001, 20.001, fetch) == "ok"
    clock.now += 0.4
    await cache.run(10.002, 20.002, fetch)

    assert clock.sleeps == [pytest.approx(0.6)]
    assert dispatched[1] - dispatched[0] >= 1.0


@pytest.mark.anyio
async def test_different_keys_do_not_block_each_other():
    clock = FakeClock()
    cache = SnapshotCache(1.0, clock=clock, sleep=clock.sleep)

    assert await cache.acquire(10.0, 20.0) == 0.0
    assert await cache.acquire(11.0, 20.0) == 0.0
    assert clock.sleeps == []
    assert len(cache) == 2


@pytest.mark.anyio
async def test_key_is_free_after_interval_elapses():
    clock = FakeClock()
    cache = SnapshotCache(1.0, clock=clock, sleep=clock.sleep)

    await cache.acquire(10.0, 20.0)
    clock.now += 1.5

    assert await cache.acquire(10.0, 20.0) == 0.0
    assert cache.last_issued(10.0, 20.0) == 1.5


@pytest.mark.anyio
async def test_concurrent_same_key_requests_are_serialized():
    interval = 0.05
    cache = SnapshotCache(interval)
    dispatched: list[float] = []

    async def fetch():
        dispatched.append(time.monotonic())

    await asyncio.gather(*(cache.run(1.0, 2.0, fetch) for _ in range(3)))

    dispatched.sort()
    gaps = [b - a for a, b in zip(dispatched, dispatched[1:])]
    assert len(gaps) == 2
    assert all(gap >= interval - 0.005 for gap in gaps)


@pytest.mark.anyio
async def test_concurrent_different_keys_dispatch_together():
    interval = 0.5
    cache = SnapshotCache(interval)
    dispatched: list[float] = []

    async def fetch():
        dispatched.append(time.monotonic())

    await asyncio.gather(cache.run(1.0, 2.0, fetch), cache.run(3.0, 4.0, fetch))

    assert abs(dispatched[1] - dispatched[0]) < interval


@pytest.mark.anyio
async def test_elapsed_keys_are_pruned_on_acquire():
    clock = FakeClock()
    cache = SnapshotCache(1.0, clock=clock, sleep=clock.sleep)

    for lat in range(5):
        await cache.acquire(float(lat), 20.0)
    assert len(cache) == 5

    clock.now += 0.5
    await cache.acquire(40.0, 20.0)
    assert len(cache) == 6

    clock.now += 0.8
    await cache.acquire(50.0, 20.0)

    assert len(cache) == 2
    assert cache.last_issued(0.0, 20.0) is None
    assert cache.last_issued(40.0, 20.0) == 0.5
