"""Shared test fixtures.

The API tests run the real worker against the wall clock, scaled down ten
times (0.5 s between dispatches, 0.1 s per id) so the 5 s / 1 s ratios of
production hold without making the suite slow.
"""
import asyncio
import os

import pytest


def pytest_configure(config):
    """Scale timings down before ``main`` reads its settings at import."""
    os.environ.setdefault("INGEST_RATE_LIMIT_SECONDS", "0.5")
    os.environ.setdefault("INGEST_PER_ID_SECONDS", "0.1")
    os.environ.setdefault("LOG_LEVEL", "WARNING")


class FakeClock:
    """Virtual monotonic clock whose ``sleep`` advances time instantly.

    Callbacks registered with ``at`` run once the clock has moved past their
    time, at the end of the sleep that crossed it.
    """

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps = []
        self._hooks = []

    def __call__(self) -> float:
        return self.now

    def at(self, when: float, callback) -> None:
        self._hooks.append((when, callback))
        self._hooks.sort(key=lambda hook: hook[0])

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        due = [hook for hook in self._hooks if hook[0] <= self.now]
        self._hooks = [hook for hook in self._hooks if hook[0] > self.now]
        for _, callback in due:
            callback()
        await asyncio.sleep(0)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
