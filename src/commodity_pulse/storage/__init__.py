"""Durable key/value state: quote snapshot, favorites, and filter."""

from commodity_pulse.storage.keys import CACHED_QUOTES_KEY, FAVORITES_KEY, FILTER_KEY
from commodity_pulse.storage.store import (
    JsonFileStore,
    MemoryStore,
    PersistentStore,
    create_store,
)

__all__ = [
    "PersistentStore",
    "MemoryStore",
    "JsonFileStore",
    "create_store",
    "CACHED_QUOTES_KEY",
    "FAVORITES_KEY",
    "FILTER_KEY",
]
