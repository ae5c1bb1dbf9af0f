"""Historical series cache and the detail-view history loader.

The loader keeps one "visible history" slot for the current selection.
Responses are always cached under their own key, but only reach the
visible slot if their key is still the selection when they arrive.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from commodity_pulse.core.exceptions import DataSourceError
from commodity_pulse.core.models import (
    ChartRange,
    Commodity,
    FailureKind,
    HistoryKey,
    PricePoint,
)
from commodity_pulse.quotes.provider import QuoteDataSource

logger = logging.getLogger(__name__)

History = tuple[PricePoint, ...]


class HistoryCache:
    """Maps (commodity, range) to a non-empty price series.

    Entries are never evicted; the key space is the small, fixed
    commodity × range product.
    """

    def __init__(self) -> None:
        self._entries: dict[HistoryKey, History] = {}

    def get(self, key: HistoryKey) -> History | None:
        return self._entries.get(key)

    def put(self, key: HistoryKey, points: Sequence[PricePoint]) -> None:
        if not points:
            raise ValueError(f"refusing to cache an empty series for {key}")
        self._entries[key] = tuple(points)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class HistoryLoader:
    """Loads history for the detail view with cache reuse and race safety.

    Parameters
    ----------
    data_source : QuoteDataSource
        Where series are fetched from on a cache miss.
    on_change : Callable[[], None] | None
        Called after every change to the selection, visible history,
        loading flag or error.
    """

    def __init__(
        self,
        data_source: QuoteDataSource,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._data_source = data_source
        self._on_change = on_change or (lambda: None)
        self._cache = HistoryCache()
        self._in_flight: dict[HistoryKey, asyncio.Task[None]] = {}
        self._selection: HistoryKey | None = None
        self._visible: History = ()
        self._error: str | None = None

    @property
    def selection(self) -> HistoryKey | None:
        return self._selection

    @property
    def visible_history(self) -> History:
        return self._visible

    @property
    def error_message(self) -> str | None:
        return self._error

    @property
    def is_loading(self) -> bool:
        """True while the selected key has a fetch in flight."""
        return self._selection is not None and self._selection in self._in_flight

    def cached(self, commodity: Commodity, chart_range: ChartRange) -> History | None:
        return self._cache.get(HistoryKey(commodity=commodity, chart_range=chart_range))

    async def load(
        self,
        commodity: Commodity,
        chart_range: ChartRange,
        force: bool = False,
    ) -> None:
        """Select (commodity, range) and make its history visible.

        A cached series is shown without a fetch unless ``force`` is set.
        A fetch already in flight for the same key is joined, not repeated.
        Failures never raise; they set ``error_message`` for the selection.
        """
        key = HistoryKey(commodity=commodity, chart_range=chart_range)
        self._select(key)

        cached = self._cache.get(key)
        if cached and not force:
            self._visible = cached
            self._error = None
            self._on_change()
            return

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._fetch(key))
            self._in_flight[key] = task
            self._on_change()
        # The fetch outlives a cancelled caller; its result is still cached.
        await asyncio.shield(task)

    def clear_selection(self) -> None:
        """Leave the detail view. The cache is kept."""
        self._selection = None
        self._visible = ()
        self._error = None
        self._on_change()

    def clear_cache(self) -> None:
        self._cache.clear()

    def _select(self, key: HistoryKey) -> None:
        if key == self._selection:
            return
        self._selection = key
        self._visible = self._cache.get(key) or ()
        self._error = None
        self._on_change()

    async def _fetch(self, key: HistoryKey) -> None:
        try:
            points = tuple(
                await self._data_source.fetch_history(key.commodity, key.chart_range)
            )
            if not points:
                raise DataSourceError(FailureKind.EMPTY_HISTORY)
        except DataSourceError as e:
            self._apply_failure(key, e)
        else:
            self._apply_success(key, points)
        finally:
            self._in_flight.pop(key, None)
            self._on_change()

    def _apply_success(self, key: HistoryKey, points: History) -> None:
        self._cache.put(key, points)
        if key != self._selection:
            logger.debug(
                "Cached late history for %s/%s; selection moved on",
                key.commodity.value,
                key.chart_range.value,
            )
            return
        self._visible = points
        self._error = None

    def _apply_failure(self, key: HistoryKey, error: DataSourceError) -> None:
        logger.warning(
            "History fetch failed for %s/%s: %s",
            key.commodity.value,
            key.chart_range.value,
            error,
        )
        if key != self._selection:
            return
        prior = self._cache.get(key)
        if prior:
            self._visible = prior
        self._error = error.user_message
