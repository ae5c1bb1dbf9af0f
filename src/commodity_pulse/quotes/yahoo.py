"""Yahoo Finance data source — direct HTTP implementation.

Uses the unauthenticated ``/v7/finance/quote`` endpoint for current quotes
and ``/v8/finance/chart/`` for history, via httpx.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from commodity_pulse.core.config import DataSourceConfig
from commodity_pulse.core.exceptions import DataSourceError
from commodity_pulse.core.models import (
    ChartRange,
    Commodity,
    FailureKind,
    PricePoint,
    Quote,
)

logger = logging.getLogger(__name__)

_QUOTE_PATH = "/v7/finance/quote"
_CHART_PATH = "/v8/finance/chart"

_SYMBOL_MAP: dict[str, Commodity] = {c.value: c for c in Commodity}


# --- Response envelopes ---


class _QuoteEntry(BaseModel):
    symbol: str
    price: float | None = Field(default=None, alias="regularMarketPrice")
    change: float | None = Field(default=None, alias="regularMarketChange")
    change_percent: float | None = Field(
        default=None, alias="regularMarketChangePercent"
    )
    market_time: int | None = Field(default=None, alias="regularMarketTime")


class _QuoteResult(BaseModel):
    result: list[_QuoteEntry]


class _QuoteEnvelope(BaseModel):
    quote_response: _QuoteResult = Field(alias="quoteResponse")


class _ChartQuote(BaseModel):
    close: list[float | None] | None = None


class _ChartIndicators(BaseModel):
    quote: list[_ChartQuote]


class _ChartResult(BaseModel):
    timestamp: list[int] | None = None
    indicators: _ChartIndicators


class _Chart(BaseModel):
    result: list[_ChartResult] | None = None


class _ChartEnvelope(BaseModel):
    chart: _Chart


def _from_epoch(ts: int) -> datetime:
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise DataSourceError(
            FailureKind.INVALID_RESPONSE,
            f"Timestamp out of range: {ts}",
        ) from e


# --- Adapters ---


class YahooQuoteAdapter:
    """Transforms a raw ``/v7/finance/quote`` body into Quote records."""

    def adapt(self, raw_data: Any) -> list[Quote]:
        """Parse the quote response.

        Entries for symbols outside the catalog, or with no price, are
        dropped. Missing change fields default to zero. The result follows
        catalog order regardless of response order.

        Raises
        ------
        DataSourceError
            INVALID_RESPONSE if the body does not match the envelope.
        """
        try:
            envelope = _QuoteEnvelope.model_validate(raw_data)
        except ValidationError as e:
            raise DataSourceError(
                FailureKind.INVALID_RESPONSE,
                f"Malformed quote response: {e.error_count()} validation errors",
            ) from e

        by_commodity: dict[Commodity, Quote] = {}
        for entry in envelope.quote_response.result:
            commodity = _SYMBOL_MAP.get(entry.symbol)
            if commodity is None or entry.price is None:
                continue
            # First entry wins if the service repeats a symbol
            if commodity in by_commodity:
                continue
            by_commodity[commodity] = Quote(
                commodity=commodity,
                price=entry.price,
                change=entry.change or 0.0,
                change_percent=entry.change_percent or 0.0,
                observed_at=(
                    _from_epoch(entry.market_time)
                    if entry.market_time is not None
                    else None
                ),
            )

        return [by_commodity[c] for c in Commodity if c in by_commodity]


class YahooChartAdapter:
    """Transforms a raw ``/v8/finance/chart`` body into PricePoints."""

    def adapt(self, raw_data: Any) -> list[PricePoint]:
        """Parse the chart response.

        Timestamps and closes are zipped index-wise; samples with a null
        close (holidays, missing data) are skipped.

        Raises
        ------
        DataSourceError
            INVALID_RESPONSE if the envelope, the first result, its
            timestamps or its close series are missing.
        """
        try:
            envelope = _ChartEnvelope.model_validate(raw_data)
        except ValidationError as e:
            raise DataSourceError(
                FailureKind.INVALID_RESPONSE,
                f"Malformed chart response: {e.error_count()} validation errors",
            ) from e

        results = envelope.chart.result
        if not results:
            raise DataSourceError(FailureKind.INVALID_RESPONSE, "Chart has no result")
        result = results[0]
        quotes = result.indicators.quote
        closes = quotes[0].close if quotes else None
        if result.timestamp is None or closes is None:
            raise DataSourceError(
                FailureKind.INVALID_RESPONSE, "Chart result lacks timestamps or closes"
            )

        points = [
            PricePoint(timestamp=_from_epoch(ts), price=close)
            for ts, close in zip(result.timestamp, closes)
            if close is not None
        ]
        return sorted(points, key=lambda p: p.timestamp)


# --- Data source ---


class YahooFinanceDataSource:
    """Fetches quotes and history from Yahoo Finance.

    Every request carries the configured timeout and User-Agent. Failures
    of any kind surface as ``DataSourceError``; nothing is retried here.

    Use via ``async with YahooFinanceDataSource(config) as source:``.

    Parameters
    ----------
    config : DataSourceConfig
        Base URL, timeout and client identifier.
    quote_adapter, chart_adapter
        Custom adapters. Defaults are used if None.
    """

    def __init__(
        self,
        config: DataSourceConfig | None = None,
        quote_adapter: YahooQuoteAdapter | None = None,
        chart_adapter: YahooChartAdapter | None = None,
    ) -> None:
        self._config = config or DataSourceConfig()
        self._quote_adapter = quote_adapter or YahooQuoteAdapter()
        self._chart_adapter = chart_adapter or YahooChartAdapter()
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self._config.user_agent},
            timeout=httpx.Timeout(self._config.request_timeout),
            follow_redirects=True,
        )

    async def __aenter__(self) -> YahooFinanceDataSource:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client. Called automatically by __aexit__."""
        await self._client.aclose()

    async def fetch_quotes(self) -> list[Quote]:
        """Fetch current quotes for every catalog commodity in one request."""
        url = f"{self._config.base_url}{_QUOTE_PATH}"
        params = {"symbols": ",".join(c.value for c in Commodity)}
        raw = await self._get_json(url, params)

        quotes = self._quote_adapter.adapt(raw)
        if not quotes:
            raise DataSourceError(
                FailureKind.EMPTY_PAYLOAD,
                "No catalog commodity in quote response",
                context={"url": url},
            )
        logger.debug("Fetched %d quotes", len(quotes))
        return quotes

    async def fetch_history(
        self, commodity: Commodity, chart_range: ChartRange
    ) -> list[PricePoint]:
        """Fetch the close series for one commodity over a chart range."""
        url = f"{self._config.base_url}{_CHART_PATH}/{commodity.value}"
        params = {
            "range": chart_range.query_range,
            "interval": chart_range.query_interval,
            "includePrePost": "false",
            "events": "div,splits",
        }
        raw = await self._get_json(url, params)

        points = self._chart_adapter.adapt(raw)
        if not points:
            raise DataSourceError(
                FailureKind.EMPTY_HISTORY,
                f"No history for {commodity.value} over {chart_range.value}",
                context={"url": url, "symbol": commodity.value},
            )
        logger.debug(
            "Fetched %d points for %s/%s", len(points), commodity.value, chart_range.value
        )
        return points

    async def _get_json(self, url: str, params: dict[str, str]) -> Any:
        """GET a URL and decode the JSON body, mapping every failure to a kind."""
        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            logger.warning("Request to %s timed out: %s", url, e)
            raise DataSourceError(
                FailureKind.REQUEST_TIMED_OUT, str(e), context={"url": url}
            ) from e
        except httpx.NetworkError as e:
            logger.warning("Network error on %s: %s", url, e)
            raise DataSourceError(
                FailureKind.NETWORK_UNAVAILABLE, str(e), context={"url": url}
            ) from e
        except httpx.HTTPError as e:
            logger.warning("HTTP error on %s: %s", url, e)
            raise DataSourceError(
                FailureKind.SERVER_ERROR, str(e), context={"url": url}
            ) from e

        if not response.is_success:
            logger.warning(
                "Yahoo Finance HTTP error for %s: %s %s",
                url,
                response.status_code,
                response.text[:200],
            )
            raise DataSourceError(
                FailureKind.SERVER_ERROR,
                f"HTTP {response.status_code} from {url}",
                context={"url": url, "status_code": response.status_code},
            )

        try:
            return response.json()
        except ValueError as e:
            raise DataSourceError(
                FailureKind.INVALID_RESPONSE,
                f"Response from {url} is not JSON",
                context={"url": url},
            ) from e
