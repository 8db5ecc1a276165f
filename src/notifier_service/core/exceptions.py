"""Common exceptions for domain and repository layers."""
from __future__ import annotations


class NotifierServiceError(Exception):
    """Base error for service layer."""


class RepositoryError(NotifierServiceError):
    """Raised when repository operations fail."""


class InvalidEventTypeError(NotifierServiceError):
    """Raised when a dispatch is requested for a blank event type."""
