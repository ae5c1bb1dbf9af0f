"""Shared pytest fixtures for commodity-pulse."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime, timezone

import pytest

from commodity_pulse.core.models import (
    ChartRange,
    Commodity,
    HistoryKey,
    PricePoint,
    Quote,
)
from commodity_pulse.storage import MemoryStore

FIXED_NOW = datetime(2024, 5, 1, 14, 30, tzinfo=timezone.utc)


class FakeDataSource:
    """Scriptable QuoteDataSource.

    Responses are consumed in order; the last one repeats. A response that
    is an exception is raised instead of returned. Setting a gate makes the
    matching fetch block until the gate's event is set.
    """

    def __init__(self) -> None:
        self.quote_responses: list = []
        self.history_responses: dict[HistoryKey, list] = defaultdict(list)
        self.quote_calls = 0
        self.history_calls: list[HistoryKey] = []
        self.quote_gate: asyncio.Event | None = None
        self.history_gates: dict[HistoryKey, asyncio.Event] = {}
        self.closed = False

    def hold_quotes(self) -> asyncio.Event:
        self.quote_gate = asyncio.Event()
        return self.quote_gate

    def hold_history(self, commodity: Commodity, chart_range: ChartRange) -> asyncio.Event:
        gate = asyncio.Event()
        self.history_gates[HistoryKey(commodity=commodity, chart_range=chart_range)] = gate
        return gate

    def add_history(self, commodity: Commodity, chart_range: ChartRange, response) -> None:
        key = HistoryKey(commodity=commodity, chart_range=chart_range)
        self.history_responses[key].append(response)

    @staticmethod
    def _next(responses: list):
        result = responses.pop(0) if len(responses) > 1 else responses[0]
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def fetch_quotes(self) -> list[Quote]:
        self.quote_calls += 1
        if self.quote_gate is not None:
            await self.quote_gate.wait()
        return self._next(self.quote_responses)

    async def fetch_history(
        self, commodity: Commodity, chart_range: ChartRange
    ) -> list[PricePoint]:
        key = HistoryKey(commodity=commodity, chart_range=chart_range)
        self.history_calls.append(key)
        gate = self.history_gates.get(key)
        if gate is not None:
            await gate.wait()
        return self._next(self.history_responses[key])

    async def __aenter__(self) -> FakeDataSource:
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.closed = True


def make_quote(commodity: Commodity, price: float, change: float = 0.0) -> Quote:
    return Quote(
        commodity=commodity,
        price=price,
        change=change,
        change_percent=round(change / price * 100, 4) if price else 0.0,
        observed_at=datetime(2024, 5, 1, 14, 0, tzinfo=timezone.utc),
    )


def make_points(*pairs: tuple[int, float]) -> list[PricePoint]:
    return [
        PricePoint(timestamp=datetime.fromtimestamp(ts, tz=timezone.utc), price=price)
        for ts, price in pairs
    ]


@pytest.fixture
def fake_source() -> FakeDataSource:
    return FakeDataSource()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def sample_quotes() -> list[Quote]:
    return [
        make_quote(Commodity.OIL, 78.42, 1.12),
        make_quote(Commodity.GAS, 2.05, -0.04),
        make_quote(Commodity.GOLD, 2301.5, 12.3),
        make_quote(Commodity.SILVER, 26.81, -0.22),
    ]


@pytest.fixture
def quote_factory():
    return make_quote


@pytest.fixture
def points_factory():
    return make_points
