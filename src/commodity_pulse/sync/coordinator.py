"""Quote state owner: refresh, stale fallback, persistence, and history.

All state lives on one asyncio event loop. The only awaits inside an
operation are data source calls, so mutations never interleave.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from pydantic import ValidationError

from commodity_pulse.core.exceptions import DataSourceError
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
    Symbol,
)
from commodity_pulse.quotes.provider import QuoteDataSource
from commodity_pulse.storage import CACHED_QUOTES_KEY, FILTER_KEY, PersistentStore
from commodity_pulse.sync.favorites import FavoritesRegistry
from commodity_pulse.sync.history import HistoryLoader
from commodity_pulse.sync.projection import project

logger = logging.getLogger(__name__)

CACHE_LOADED_NOTICE = "Loaded cached prices while fetching live updates."
STALE_SNAPSHOT_NOTICE = "Showing the latest available snapshot."
CACHE_CLEARED_NOTICE = "Cache cleared. Pull to refresh for live quotes."

Observer = Callable[[CoordinatorState], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _canonical(quotes: Iterable[Quote]) -> tuple[Quote, ...]:
    """One quote per commodity (first wins), in catalog order."""
    by_commodity: dict[Commodity, Quote] = {}
    for quote in quotes:
        by_commodity.setdefault(quote.commodity, quote)
    return tuple(sorted(by_commodity.values(), key=lambda q: q.commodity.canonical_index))


class QuoteSyncCoordinator:
    """Owns live quotes, user-facing messages, favorites, filter and history.

    Persisted state is read once, at construction. Every successful change
    to the quote cache, favorites or filter is written back to the store.
    Data source failures never propagate; they become ``error_message`` /
    ``history_error_message`` while the last good data stays in place.

    Parameters
    ----------
    data_source : QuoteDataSource
        Quote and history provider.
    store : PersistentStore
        Durable key/value store. Outlives the coordinator.
    clock : Callable[[], datetime] | None
        Source of ``last_updated`` timestamps. Defaults to UTC now.
    """

    def __init__(
        self,
        data_source: QuoteDataSource,
        store: PersistentStore,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._data_source = data_source
        self._store = store
        self._clock = clock or _utc_now
        self._observers: list[Observer] = []
        self._favorites = FavoritesRegistry(store)
        self._history = HistoryLoader(data_source, on_change=self._notify)

        self._quotes: tuple[Quote, ...] = ()
        self._last_updated: datetime | None = None
        self._is_loading = False
        self._error_message: str | None = None
        self._info_message: str | None = None
        self._filter = QuoteFilter.ALL

        self.initialize_from_store()

    # --- Read side ---

    @property
    def quotes(self) -> tuple[Quote, ...]:
        return self._quotes

    @property
    def last_updated(self) -> datetime | None:
        return self._last_updated

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def info_message(self) -> str | None:
        return self._info_message

    @property
    def active_filter(self) -> QuoteFilter:
        return self._filter

    @property
    def favorites(self) -> frozenset[Symbol]:
        return self._favorites.symbols

    @property
    def has_favorites(self) -> bool:
        return len(self._favorites) > 0

    @property
    def displayed_quotes(self) -> list[Quote]:
        """Quotes to show for the active filter, favorites first."""
        return project(self._quotes, self._filter, self._favorites.symbols)

    def is_favorite(self, commodity: Commodity) -> bool:
        return self._favorites.is_favorite(commodity)

    @property
    def history_selection(self) -> HistoryKey | None:
        return self._history.selection

    @property
    def visible_history(self) -> tuple[PricePoint, ...]:
        return self._history.visible_history

    @property
    def history_loading(self) -> bool:
        return self._history.is_loading

    @property
    def history_error_message(self) -> str | None:
        return self._history.error_message

    def state(self) -> CoordinatorState:
        """Snapshot of everything the presentation layer reads."""
        return CoordinatorState(
            quotes=self._quotes,
            displayed_quotes=tuple(self.displayed_quotes),
            last_updated=self._last_updated,
            is_loading=self._is_loading,
            error_message=self._error_message,
            info_message=self._info_message,
            active_filter=self._filter,
            favorites=self._favorites.symbols,
            history_selection=self._history.selection,
            visible_history=self._history.visible_history,
            history_loading=self._history.is_loading,
            history_error_message=self._history.error_message,
        )

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Call ``observer`` with a fresh state after every mutation.

        Returns a function that removes the observer.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # --- Quotes ---

    def initialize_from_store(self) -> None:
        """Seed favorites, filter and quotes from the persistent store.

        Absent or corrupt entries are treated as a cold start.
        """
        self._favorites.load()

        raw_filter = self._store.get(FILTER_KEY)
        if raw_filter is not None:
            try:
                self._filter = QuoteFilter(raw_filter)
            except ValueError:
                logger.warning("Ignoring unknown persisted filter: %r", raw_filter)

        snapshot = self._load_snapshot()
        if snapshot is not None and snapshot.quotes:
            self._quotes = _canonical(snapshot.quotes)
            self._last_updated = snapshot.observed_at
            self._info_message = CACHE_LOADED_NOTICE
            logger.info("Loaded %d cached quotes", len(self._quotes))

    async def refresh(self) -> None:
        """Fetch fresh quotes. A call made while one is in flight is a no-op.

        On success the quote set is replaced and persisted. On failure the
        previous quotes stay and, if there are any, ``info_message`` says
        they are a stale snapshot.
        """
        if self._is_loading:
            logger.debug("Refresh already in flight; skipping")
            return

        self._is_loading = True
        self._error_message = None
        self._notify()
        try:
            quotes = _canonical(await self._data_source.fetch_quotes())
            if not quotes:
                raise DataSourceError(FailureKind.EMPTY_PAYLOAD)
        except DataSourceError as e:
            logger.warning("Quote refresh failed (%s): %s", e.kind.value, e)
            self._error_message = e.user_message
            if self._quotes:
                self._info_message = STALE_SNAPSHOT_NOTICE
        else:
            self._quotes = quotes
            self._last_updated = self._clock()
            self._error_message = None
            self._info_message = None
            self._persist_snapshot()
        finally:
            self._is_loading = False
            self._notify()

    def clear_cached_quotes(self) -> None:
        """Drop the persisted snapshot and the in-memory quotes."""
        self._store.remove(CACHED_QUOTES_KEY)
        self._quotes = ()
        self._last_updated = None
        self._error_message = None
        self._info_message = CACHE_CLEARED_NOTICE
        self._notify()

    def dismiss_error(self) -> None:
        self._error_message = None
        self._notify()

    # --- Preferences ---

    def set_filter(self, quote_filter: QuoteFilter | str) -> None:
        """Persist the active filter. Never triggers a fetch."""
        self._filter = QuoteFilter(quote_filter)
        self._store.set(FILTER_KEY, self._filter.value)
        self._notify()

    def toggle_favorite(self, commodity: Commodity) -> bool:
        """Flip a favorite and persist the set. Returns the new flag."""
        flag = self._favorites.toggle(commodity)
        self._notify()
        return flag

    def reset_preferences(self) -> None:
        """Forget favorites and go back to showing all quotes."""
        self._favorites.clear()
        self._filter = QuoteFilter.ALL
        self._store.remove(FILTER_KEY)
        self._notify()

    # --- History ---

    async def load_history(
        self,
        commodity: Commodity,
        chart_range: ChartRange,
        force: bool = False,
    ) -> None:
        """Select a commodity/range for the detail view and load its series."""
        await self._history.load(commodity, chart_range, force=force)

    def clear_history_selection(self) -> None:
        self._history.clear_selection()

    # --- Internals ---

    def _load_snapshot(self) -> CacheSnapshot | None:
        raw = self._store.get(CACHED_QUOTES_KEY)
        if raw is None:
            return None
        try:
            return CacheSnapshot.model_validate(raw)
        except ValidationError as e:
            logger.warning("Ignoring corrupt quote cache: %s", e)
            return None

    def _persist_snapshot(self) -> None:
        snapshot = CacheSnapshot(quotes=list(self._quotes), observed_at=self._last_updated)
        self._store.set(CACHED_QUOTES_KEY, snapshot.model_dump(mode="json"))

    def _notify(self) -> None:
        if not self._observers:
            return
        state = self.state()
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:
                logger.exception("State observer %r failed", observer)
