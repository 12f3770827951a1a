"""Relay exception hierarchy. Each class carries the HTTP status it maps to."""

from __future__ import annotations


class RelayError(Exception):
    """Base error for the relay pipeline."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(RelayError):
    """Missing signing key or unusable configuration. Never retried."""

    status_code = 500


class ValidationError(RelayError):
    """Bad inbound trade parameters. Raised before any network call."""

    status_code = 400


class MarketDataError(RelayError):
    """Tick size or midpoint lookup failed. Callers recover with defaults."""

    status_code = 502


class SubmissionError(RelayError):
    """Venue rejected the order or the transport failed."""

    status_code = 400
