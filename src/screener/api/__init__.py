"""JSON API over the scan driver."""

from screener.api.app import create_api_app

__all__ = ["create_api_app"]
