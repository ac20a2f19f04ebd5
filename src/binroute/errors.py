"""Exceptions raised by the routing and data layers."""

from __future__ import annotations


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude pair is non-finite or out of range."""

    def __init__(self, latitude: float, longitude: float, label: str | None = None) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.label = label
        target = f" for {label}" if label else ""
        super().__init__(f"Invalid coordinate{target}: ({latitude}, {longitude})")


class NotFoundError(LookupError):
    """Raised when a bin, collector or route item does not exist."""


class DataSourceError(RuntimeError):
    """Raised when no configured bin store could answer a request."""
