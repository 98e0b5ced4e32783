"""Custom exception hierarchy for pyfiremap."""

from __future__ import annotations


class FireMapError(Exception):
    """Base exception for all pyfiremap errors."""


class FireMapConfigError(FireMapError):
    """Invalid or missing configuration."""


class FireMapTransportError(FireMapError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FireMapApiError(FireMapError):
    """Backend returned well-formed JSON with an unexpected shape."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class FireMapValidationError(FireMapError, ValueError):
    """Client-side input rejected before any request was issued."""


class MapProviderError(FireMapError):
    """Map provider used before initialization or failed to load."""
