"""Errors raised by the fetch/normalize pipeline."""

from typing import Any


class ForecastError(Exception):
    """Base class for pipeline failures mapped to HTTP responses."""


class ConfigurationError(ForecastError):
    """Required credential is missing. Raised before any network I/O."""


class UpstreamHttpError(ForecastError):
    """CWA answered with a non-success status."""

    def __init__(self, status_code: int, payload: Any):
        super().__init__(f"CWA API returned HTTP {status_code}")
        self.status_code = status_code
        self.payload = payload


class TransportError(ForecastError):
    """No response at all from CWA."""


class DataNotFoundError(ForecastError):
    """Upstream document lacks the expected location or township records."""


class StructuralDataError(ForecastError):
    """Township record is missing a mandatory weather element."""
