"""Custom exceptions for the futures signal screener.

All scan-pipeline exceptions live here to avoid circular imports between
the market data, advisory and orchestration modules.
"""


class ScreenerError(Exception):
    """Base exception for all screener errors."""


class DataFetchError(ScreenerError):
    """Raised when a market feed is unreachable or returns a non-success status."""


class AdvisoryError(ScreenerError):
    """Raised when the advisory collaborator fails or returns malformed JSON."""


class MalformedPickError(ScreenerError):
    """Raised for a single unusable analyst pick. Always handled by dropping the pick."""


class ScanInProgressError(ScreenerError):
    """Raised when a scan is requested while another cycle is still in flight."""


class ScanAbandonedError(ScreenerError):
    """Raised to a scan_once() caller whose cycle was cancelled by stop()."""
