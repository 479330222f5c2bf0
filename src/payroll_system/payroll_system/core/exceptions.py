from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, attendance or salary record is missing."""


class ConflictError(DomainError):
    """Raised when a keyed record already exists (or is already open)."""

    def __init__(self, message: str, *, record_id: Optional[int] = None):
        super().__init__(message)
        self.record_id = record_id


class StorageError(DomainError):
    """Raised when the underlying store cannot be read or written."""
