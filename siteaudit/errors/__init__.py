"""Custom exceptions."""

from siteaudit.errors.exceptions import (
    APIError,
    AuditError,
    InvalidUrlError,
    ValidationError,
)

__all__ = [
    "AuditError",
    "APIError",
    "ValidationError",
    "InvalidUrlError",
]
