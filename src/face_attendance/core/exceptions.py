from __future__ import annotations

from .enums import ErrorCode


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DimensionMismatchError(ValidationError):
    """Raised when an embedding does not have the deployment dimension."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Embedding dimension mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class InvalidTransitionError(DomainError):
    """Raised by the daily fold when an event is not allowed in the current state."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code


class ConcurrentAppendError(DomainError):
    """Raised when a conditional event append lost a race with another writer."""
