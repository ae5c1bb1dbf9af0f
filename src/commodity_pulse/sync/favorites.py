"""Favorited commodities, written through to the persistent store."""

from __future__ import annotations

import logging

from commodity_pulse.core.models import Commodity, Symbol
from commodity_pulse.storage import FAVORITES_KEY, PersistentStore

logger = logging.getLogger(__name__)

_KNOWN_SYMBOLS = frozenset(c.value for c in Commodity)


class FavoritesRegistry:
    """In-memory favorite set backed by a PersistentStore.

    Every ``toggle`` persists the full set immediately. The set is stored
    as a list of symbols and rebuilt as a set on load.
    """

    def __init__(self, store: PersistentStore) -> None:
        self._store = store
        self._symbols: set[Symbol] = set()

    def load(self) -> None:
        """Replace the in-memory set with the persisted one."""
        raw = self._store.get(FAVORITES_KEY)
        if raw is None:
            self._symbols = set()
            return
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed favorites entry: %r", raw)
            self._symbols = set()
            return
        self._symbols = {s for s in raw if isinstance(s, str) and s in _KNOWN_SYMBOLS}

    @property
    def symbols(self) -> frozenset[Symbol]:
        return frozenset(self._symbols)

    def is_favorite(self, commodity: Commodity) -> bool:
        return commodity.value in self._symbols

    def toggle(self, commodity: Commodity) -> bool:
        """Flip the favorite flag and persist. Returns the new flag."""
        if commodity.value in self._symbols:
            self._symbols.discard(commodity.value)
        else:
            self._symbols.add(commodity.value)
        self._persist()
        return commodity.value in self._symbols

    def clear(self) -> None:
        """Forget every favorite, including the persisted entry."""
        self._symbols.clear()
        self._store.remove(FAVORITES_KEY)

    def _persist(self) -> None:
        self._store.set(FAVORITES_KEY, sorted(self._symbols))

    def __contains__(self, commodity: object) -> bool:
        return isinstance(commodity, Commodity) and self.is_favorite(commodity)

    def __len__(self) -> int:
        return len(self._symbols)
