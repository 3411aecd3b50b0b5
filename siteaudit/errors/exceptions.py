"""Custom exception classes for the site audit service."""


class AuditError(Exception):
    """Base exception for audit failures."""

    pass


class APIError(AuditError):
    """Exception for external provider failures (PageSpeed, SerpApi, page fetch, Gemini)."""

    pass


class ValidationError(AuditError):
    """Exception for input validation failures."""

    pass


class InvalidUrlError(ValidationError):
    """Raised when the audit target is not an absolute http(s) URL."""

    pass
