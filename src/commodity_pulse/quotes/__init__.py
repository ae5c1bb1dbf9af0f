"""Quote and history data sources.

Key abstractions:

- ``QuoteDataSource``: Consumer-facing async interface for quotes and history.
- ``QuoteAdapter`` / ``HistoryAdapter``: Turn a decoded body into models.

Built-in implementations:

- ``YahooFinanceDataSource``: Fetches from the Yahoo Finance quote and chart APIs.
- ``YahooQuoteAdapter`` / ``YahooChartAdapter``: Parse their JSON bodies.
"""

from commodity_pulse.quotes.provider import HistoryAdapter, QuoteAdapter, QuoteDataSource
from commodity_pulse.quotes.yahoo import (
    YahooChartAdapter,
    YahooFinanceDataSource,
    YahooQuoteAdapter,
)

__all__ = [
    # Protocols
    "QuoteDataSource",
    "QuoteAdapter",
    "HistoryAdapter",
    # Yahoo Finance
    "YahooFinanceDataSource",
    "YahooQuoteAdapter",
    "YahooChartAdapter",
]
