"""Integration test fixtures: real HTTP client and file store, mocked transport."""

from __future__ import annotations

from pathlib import Path

import pytest

from commodity_pulse.core.config import DataSourceConfig
from commodity_pulse.quotes import YahooFinanceDataSource
from commodity_pulse.storage import JsonFileStore


@pytest.fixture
def store_path(tmp_path: Path) -> str:
    return str(tmp_path / "state" / "commodity-pulse.json")


@pytest.fixture
async def yahoo_source():
    """A YahooFinanceDataSource pointed at a host respx intercepts."""
    config = DataSourceConfig(base_url="https://yahoo.test", request_timeout=2.0)
    async with YahooFinanceDataSource(config) as source:
        yield source


@pytest.fixture
def file_store(store_path: str) -> JsonFileStore:
    return JsonFileStore(store_path)
