"""Tests for commodity_pulse.core.models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from commodity_pulse.core.models import (
    CacheSnapshot,
    ChartRange,
    Commodity,
    CoordinatorState,
    FailureKind,
    HistoryKey,
    PricePoint,
    Quote,
    QuoteFilter,
    resolve_commodity,
)


class TestCommodity:
    def test_canonical_order(self):
        assert list(Commodity) == [
            Commodity.OIL,
            Commodity.GAS,
            Commodity.GOLD,
            Commodity.SILVER,
        ]
        assert [c.canonical_index for c in Commodity] == [0, 1, 2, 3]

    def test_symbols_are_values(self):
        assert Commodity.OIL.value == "CL=F"
        assert Commodity("GC=F") is Commodity.GOLD

    def test_display_names_and_units(self):
        assert Commodity.OIL.display_name == "Crude Oil"
        assert Commodity.GAS.unit == "USD / MMBtu"
        assert Commodity.GOLD.unit == Commodity.SILVER.unit == "USD / troy oz"

    @pytest.mark.parametrize(
        "text",
        ["GC=F", "gc=f", "gold", "GOLD", "Gold", "  gold "],
    )
    def test_resolve_commodity(self, text):
        assert resolve_commodity(text) is Commodity.GOLD

    def test_resolve_display_name_with_space(self):
        assert resolve_commodity("natural gas") is Commodity.GAS

    def test_resolve_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown commodity"):
            resolve_commodity("copper")


class TestChartRange:
    def test_query_tokens(self):
        assert ChartRange.ONE_MONTH.query_range == "1mo"
        assert ChartRange.ONE_MONTH.query_interval == "1d"
        assert ChartRange.ONE_YEAR.query_interval == "1wk"
        assert ChartRange.ONE_DAY.query_interval == "5m"

    def test_every_range_has_tokens(self):
        for r in ChartRange:
            assert r.query_range
            assert r.query_interval


class TestFailureKind:
    def test_every_kind_has_message(self):
        for kind in FailureKind:
            assert kind.user_message

    def test_timeout_message(self):
        assert FailureKind.REQUEST_TIMED_OUT.user_message == (
            "Request timed out. Please try again."
        )


class TestQuote:
    def test_defaults(self):
        q = Quote(commodity=Commodity.OIL, price=80.0)
        assert q.change == 0.0
        assert q.change_percent == 0.0
        assert q.observed_at is None
        assert q.symbol == "CL=F"

    def test_frozen(self):
        q = Quote(commodity=Commodity.OIL, price=80.0)
        with pytest.raises(ValidationError):
            q.price = 1.0  # type: ignore[misc]


class TestCacheSnapshot:
    def test_rejects_duplicate_commodity(self):
        with pytest.raises(ValidationError, match="duplicate quote"):
            CacheSnapshot(
                quotes=[
                    Quote(commodity=Commodity.GOLD, price=1.0),
                    Quote(commodity=Commodity.GOLD, price=2.0),
                ]
            )

    def test_json_round_trip(self, sample_quotes):
        observed = datetime(2024, 5, 1, 14, 30, tzinfo=timezone.utc)
        snapshot = CacheSnapshot(quotes=sample_quotes, observed_at=observed)
        restored = CacheSnapshot.model_validate(snapshot.model_dump(mode="json"))
        assert restored.quotes == sample_quotes
        assert restored.observed_at == observed

    def test_empty_is_valid(self):
        snapshot = CacheSnapshot(quotes=[])
        assert snapshot.observed_at is None


class TestHistoryKey:
    def test_hashable_and_equal_by_value(self):
        a = HistoryKey(commodity=Commodity.OIL, chart_range=ChartRange.ONE_MONTH)
        b = HistoryKey(commodity=Commodity.OIL, chart_range=ChartRange.ONE_MONTH)
        c = HistoryKey(commodity=Commodity.GOLD, chart_range=ChartRange.ONE_MONTH)
        assert a == b
        assert a != c
        assert {a: 1}[b] == 1


class TestCoordinatorState:
    def test_defaults(self):
        state = CoordinatorState()
        assert state.quotes == ()
        assert state.active_filter == QuoteFilter.ALL
        assert state.history_selection is None
        assert not state.is_loading

    def test_holds_points(self):
        point = PricePoint(timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc), price=1.0)
        state = CoordinatorState(visible_history=(point,))
        assert state.visible_history[0].price == 1.0
