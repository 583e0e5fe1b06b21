"""Error taxonomy shared by the service and controller layers."""

from __future__ import annotations


class DirdeckError(Exception):
    """Base exception for client-side failures.

    Attributes:
        message: Human-readable description suitable for notifications.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DirdeckError):
    """Raised when user input is rejected before any request is issued."""


class TransportError(DirdeckError):
    """Raised when a request could not complete (network, HTTP status, decoding)."""


class BackendError(DirdeckError):
    """Raised when the backend answers with a non-zero envelope code.

    Attributes:
        code: Envelope code reported by the backend.
    """

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


class StaleResponseError(DirdeckError):
    """Raised when a listing response arrives after a newer load was issued."""


__all__ = [
    "DirdeckError",
    "ValidationError",
    "TransportError",
    "BackendError",
    "StaleResponseError",
]
