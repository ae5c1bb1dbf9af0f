"""Pydantic data models — the system's type contracts."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

# --- Type Aliases ---

Symbol = str

# --- Enumerations ---


class Commodity(StrEnum):
    """Tracked instruments, valued by their Yahoo Finance symbol.

    Declaration order is the canonical order used for deterministic output.
    """

    OIL = "CL=F"
    GAS = "NG=F"
    GOLD = "GC=F"
    SILVER = "SI=F"

    @property
    def display_name(self) -> str:
        return _COMMODITY_INFO[self].display_name

    @property
    def unit(self) -> str:
        return _COMMODITY_INFO[self].unit

    @property
    def canonical_index(self) -> int:
        return _CANONICAL_INDEX[self]


class CommodityInfo(NamedTuple):
    display_name: str
    unit: str


_COMMODITY_INFO: dict[Commodity, CommodityInfo] = {
    Commodity.OIL: CommodityInfo("Crude Oil", "USD / barrel"),
    Commodity.GAS: CommodityInfo("Natural Gas", "USD / MMBtu"),
    Commodity.GOLD: CommodityInfo("Gold", "USD / troy oz"),
    Commodity.SILVER: CommodityInfo("Silver", "USD / troy oz"),
}

_CANONICAL_INDEX: dict[Commodity, int] = {c: i for i, c in enumerate(Commodity)}


def resolve_commodity(text: str) -> Commodity:
    """Resolve a symbol, member name or display name to a Commodity.

    Matching is case-insensitive: ``"GC=F"``, ``"gold"`` and ``"Gold"`` all
    resolve to ``Commodity.GOLD``.

    Raises:
        ValueError: If nothing in the catalog matches.
    """
    needle = text.strip().lower()
    for commodity in Commodity:
        candidates = (
            commodity.value.lower(),
            commodity.name.lower(),
            commodity.display_name.lower(),
        )
        if needle in candidates:
            return commodity
    raise ValueError(f"Unknown commodity: {text!r}")


class ChartRange(StrEnum):
    """Historical windows offered for the detail chart."""

    ONE_DAY = "1D"
    FIVE_DAYS = "5D"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    ONE_YEAR = "1Y"

    @property
    def query_range(self) -> str:
        return _RANGE_TOKENS[self][0]

    @property
    def query_interval(self) -> str:
        return _RANGE_TOKENS[self][1]


# (range, interval) tokens passed verbatim to the data source
_RANGE_TOKENS: dict[ChartRange, tuple[str, str]] = {
    ChartRange.ONE_DAY: ("1d", "5m"),
    ChartRange.FIVE_DAYS: ("5d", "30m"),
    ChartRange.ONE_MONTH: ("1mo", "1d"),
    ChartRange.THREE_MONTHS: ("3mo", "1d"),
    ChartRange.ONE_YEAR: ("1y", "1wk"),
}


class QuoteFilter(StrEnum):
    """Which quotes the dashboard shows."""

    ALL = "All"
    FAVORITES = "Favorites"


class FailureKind(StrEnum):
    """Flat taxonomy of data source failures. All are recoverable."""

    NETWORK_UNAVAILABLE = "network_unavailable"
    REQUEST_TIMED_OUT = "request_timed_out"
    SERVER_ERROR = "server_error"
    INVALID_RESPONSE = "invalid_response"
    EMPTY_PAYLOAD = "empty_payload"
    EMPTY_HISTORY = "empty_history"

    @property
    def user_message(self) -> str:
        return _FAILURE_MESSAGES[self]


_FAILURE_MESSAGES: dict[FailureKind, str] = {
    FailureKind.NETWORK_UNAVAILABLE: (
        "No internet connection. Please check your network and try again."
    ),
    FailureKind.REQUEST_TIMED_OUT: "Request timed out. Please try again.",
    FailureKind.SERVER_ERROR: "The price service is temporarily unavailable.",
    FailureKind.INVALID_RESPONSE: "Unable to parse quote data right now.",
    FailureKind.EMPTY_PAYLOAD: "No quote data was returned.",
    FailureKind.EMPTY_HISTORY: "No historical price data is available for this period.",
}


# --- Quote Models ---


class Quote(BaseModel):
    """Latest market quote for one commodity."""

    model_config = ConfigDict(frozen=True)

    commodity: Commodity
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    observed_at: datetime | None = None

    @property
    def symbol(self) -> Symbol:
        return self.commodity.value


class CacheSnapshot(BaseModel):
    """The quote set persisted across process restarts."""

    model_config = ConfigDict(frozen=True)

    quotes: list[Quote]
    observed_at: datetime | None = None

    @field_validator("quotes")
    @classmethod
    def one_quote_per_commodity(cls, v: list[Quote]) -> list[Quote]:
        seen: set[Commodity] = set()
        for quote in v:
            if quote.commodity in seen:
                raise ValueError(f"duplicate quote for {quote.commodity.value}")
            seen.add(quote.commodity)
        return v


# --- History Models ---


class PricePoint(BaseModel):
    """One sample of a historical price series."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    price: float


class HistoryKey(BaseModel):
    """Compound cache key for a historical series."""

    model_config = ConfigDict(frozen=True)

    commodity: Commodity
    chart_range: ChartRange


# --- Presentation State ---


class CoordinatorState(BaseModel):
    """Everything the presentation layer reads, captured after a mutation."""

    model_config = ConfigDict(frozen=True)

    quotes: tuple[Quote, ...] = ()
    displayed_quotes: tuple[Quote, ...] = ()
    last_updated: datetime | None = None
    is_loading: bool = False
    error_message: str | None = None
    info_message: str | None = None
    active_filter: QuoteFilter = QuoteFilter.ALL
    favorites: frozenset[Symbol] = frozenset()
    history_selection: HistoryKey | None = None
    visible_history: tuple[PricePoint, ...] = ()
    history_loading: bool = False
    history_error_message: str | None = None
