"""Tests for commodity_pulse.core.exceptions."""

import pytest

from commodity_pulse.core.exceptions import (
    CommodityPulseError,
    ConfigError,
    DataSourceError,
    StorageError,
)
from commodity_pulse.core.models import FailureKind


class TestExceptionHierarchy:
    """Verify the exception class hierarchy."""

    def test_config_is_subclass(self):
        assert issubclass(ConfigError, CommodityPulseError)

    def test_data_source_is_subclass(self):
        assert issubclass(DataSourceError, CommodityPulseError)

    def test_storage_is_subclass(self):
        assert issubclass(StorageError, CommodityPulseError)


class TestExceptionContext:
    """Verify context dict behavior."""

    def test_default_context_is_empty(self):
        err = CommodityPulseError("boom")
        assert err.context == {}
        assert str(err) == "boom"

    def test_context_preserved(self):
        err = StorageError("disk full", context={"operation": "write"})
        assert err.context["operation"] == "write"

    def test_catchable_as_base(self):
        with pytest.raises(CommodityPulseError):
            raise ConfigError("bad")


class TestDataSourceError:
    def test_default_message_is_user_message(self):
        err = DataSourceError(FailureKind.EMPTY_PAYLOAD)
        assert err.kind is FailureKind.EMPTY_PAYLOAD
        assert str(err) == "No quote data was returned."

    def test_detail_message_does_not_change_user_message(self):
        err = DataSourceError(
            FailureKind.SERVER_ERROR,
            "HTTP 503 from https://example.test",
            context={"status_code": 503},
        )
        assert "503" in str(err)
        assert err.user_message == "The price service is temporarily unavailable."
        assert err.context["status_code"] == 503
