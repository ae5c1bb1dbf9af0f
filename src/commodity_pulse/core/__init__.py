"""commodity_pulse.core — Foundation types, config, and exceptions."""

from commodity_pulse.core.config import (
    DataSourceConfig,
    PulseConfig,
    RefreshConfig,
    StorageBackend,
    StorageConfig,
    load_config,
)
from commodity_pulse.core.exceptions import (
    CommodityPulseError,
    ConfigError,
    DataSourceError,
    StorageError,
)
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
    resolve_commodity,
)

__all__ = [
    # Type aliases
    "Symbol",
    # Enums
    "Commodity",
    "ChartRange",
    "QuoteFilter",
    "FailureKind",
    "StorageBackend",
    # Models
    "Quote",
    "CacheSnapshot",
    "PricePoint",
    "HistoryKey",
    "CoordinatorState",
    "resolve_commodity",
    # Config
    "PulseConfig",
    "DataSourceConfig",
    "RefreshConfig",
    "StorageConfig",
    "load_config",
    # Exceptions
    "CommodityPulseError",
    "ConfigError",
    "DataSourceError",
    "StorageError",
]
