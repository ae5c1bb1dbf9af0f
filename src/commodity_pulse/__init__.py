"""commodity_pulse — commodity quote sync and caching core."""
