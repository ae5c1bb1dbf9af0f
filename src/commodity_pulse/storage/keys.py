"""Persisted state keys. Bump the version suffix when a value's shape changes."""

CACHED_QUOTES_KEY = "commodity_pulse.cached_quotes.v1"
FAVORITES_KEY = "commodity_pulse.favorite_symbols.v1"
FILTER_KEY = "commodity_pulse.filter.v1"
