"""API dependencies for dependency injection."""

from fastapi import Depends, HTTPException

from siteaudit.config.settings import Config, get_config
from siteaudit.core.audit import AuditProviders, build_default_providers
from siteaudit.errors.exceptions import ValidationError
from siteaudit.schemas.audit import AuditRequest
from siteaudit.services.events import AuditContext
from siteaudit.services.validators import validate_url


def get_settings() -> Config:
    """Get application settings dependency."""
    return get_config()


def get_audit_request(request: AuditRequest) -> AuditRequest:
    """Get the audit request body, 400 when the URL is invalid."""
    try:
        url = validate_url(request.url)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return request.model_copy(update={"url": url})


def get_audit_providers(
    request: AuditRequest = Depends(get_audit_request),  # noqa: B008
) -> AuditProviders:
    """
    Get the provider bundle, 503 when credentials are missing.

    Depends on the validated request so an invalid URL is reported before
    missing credentials.
    """
    try:
        return build_default_providers(get_config())
    except ValueError as e:
        raise HTTPException(status_code=503, detail=f"Audit providers not configured: {e}") from e


def get_audit_context() -> AuditContext:
    """Get a fresh per-request audit context."""
    return AuditContext()
