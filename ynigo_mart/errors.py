"""Exception hierarchy shared by the kiosk services and routes."""

from __future__ import annotations


class MartError(Exception):
    """Base class for all Ynigo Mart specific errors."""


class ValidationError(MartError, ValueError):
    """Raised when operator input is rejected before any network call."""


class SubmissionInProgressError(ValidationError):
    """Raised when a profile submission arrives while another is in flight."""


class TransportError(MartError):
    """Raised when the row store responds with an error or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class DecodeError(MartError):
    """Raised when an uploaded image cannot be decoded."""


class SessionStateError(MartError):
    """Raised when a session operation is not valid in the current state."""
