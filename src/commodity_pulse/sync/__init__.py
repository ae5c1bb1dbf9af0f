"""Data synchronization: quote state, favorites, history, and auto-refresh."""

from commodity_pulse.sync.coordinator import (
    CACHE_CLEARED_NOTICE,
    CACHE_LOADED_NOTICE,
    STALE_SNAPSHOT_NOTICE,
    QuoteSyncCoordinator,
)
from commodity_pulse.sync.favorites import FavoritesRegistry
from commodity_pulse.sync.history import HistoryCache, HistoryLoader
from commodity_pulse.sync.projection import project
from commodity_pulse.sync.scheduler import RefreshScheduler

__all__ = [
    "QuoteSyncCoordinator",
    "FavoritesRegistry",
    "HistoryCache",
    "HistoryLoader",
    "RefreshScheduler",
    "project",
    "CACHE_LOADED_NOTICE",
    "STALE_SNAPSHOT_NOTICE",
    "CACHE_CLEARED_NOTICE",
]
