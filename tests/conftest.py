"""Shared test fixtures for the futures signal screener."""

import pytest

from screener.config import ScanSettings, ScreenerSettings


@pytest.fixture
def screener_settings() -> ScreenerSettings:
    """Default screen thresholds (reference BTCUSDT, USDT quote)."""
    return ScreenerSettings()


@pytest.fixture
def scan_settings() -> ScanSettings:
    """Short intervals so loop tests finish quickly."""
    return ScanSettings(scan_interval=0, status_interval=0.01)
