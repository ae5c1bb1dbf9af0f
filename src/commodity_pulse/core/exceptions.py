"""Custom exception hierarchy for commodity-pulse."""

from typing import Any

from commodity_pulse.core.models import FailureKind


class CommodityPulseError(Exception):
    """Base exception for all commodity-pulse errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(CommodityPulseError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field: str — the config field that failed validation
        value: Any — the invalid value
    """


class DataSourceError(CommodityPulseError):
    """The quote or history fetch failed.

    Policy: never escapes the coordinator. Converted to a user-facing
    message while the last good data stays visible.

    Context keys:
        url: str — the URL that was being fetched
        status_code: int | None — HTTP status code if applicable
        symbol: str — the commodity symbol, for history requests
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message or kind.user_message, context)
        self.kind = kind

    @property
    def user_message(self) -> str:
        return self.kind.user_message


class StorageError(CommodityPulseError):
    """Persistent store operation failed.

    Policy: raise immediately. Reads of corrupt data are not errors; they
    are treated as absent.

    Context keys:
        operation: str — "write", "remove"
        path: str — the backing file
    """
