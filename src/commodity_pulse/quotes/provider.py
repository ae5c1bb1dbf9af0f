"""Quote data source protocols — the source-agnostic interface layer.

Architecture
------------
The coordinator never talks HTTP. It depends on a data source that hands
back canonical models or raises a typed failure:

    RawResponse → Adapter → list[Quote] / list[PricePoint] → DataSource → Coordinator

- **QuoteDataSource** is the consumer-facing protocol.
- **QuoteAdapter** / **HistoryAdapter** turn a decoded response body into
  canonical models. To support another vendor, write adapters and a
  source; the coordinator does not change.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from commodity_pulse.core.models import ChartRange, Commodity, PricePoint, Quote


@runtime_checkable
class QuoteAdapter(Protocol):
    """Transforms a decoded quote response into Quote records.

    Returns quotes in the catalog's canonical order, at most one per
    commodity. Raises ``DataSourceError(INVALID_RESPONSE)`` when the body
    does not have the expected shape.
    """

    def adapt(self, raw_data: Any) -> list[Quote]: ...


@runtime_checkable
class HistoryAdapter(Protocol):
    """Transforms a decoded chart response into ascending PricePoints."""

    def adapt(self, raw_data: Any) -> list[PricePoint]: ...


@runtime_checkable
class QuoteDataSource(Protocol):
    """Consumer-facing interface for fetching quotes and history.

    Implementations raise ``DataSourceError`` for every failure and nothing
    else. Each request carries its own timeout; callers do not add one.
    """

    async def fetch_quotes(self) -> list[Quote]:
        """Fetch current quotes for the catalog.

        Returns
        -------
        list[Quote]
            Non-empty, in canonical catalog order. Commodities missing from
            the response are omitted.
        """
        ...

    async def fetch_history(
        self, commodity: Commodity, chart_range: ChartRange
    ) -> list[PricePoint]:
        """Fetch a historical price series.

        Returns
        -------
        list[PricePoint]
            Non-empty, sorted by timestamp ascending.
        """
        ...
