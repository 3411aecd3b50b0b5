"""Audit endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from siteaudit.api.v1.deps import (
    get_audit_context,
    get_audit_providers,
    get_audit_request,
    get_settings,
)
from siteaudit.config.settings import Config
from siteaudit.core.audit import AuditProviders, run_audit_async
from siteaudit.errors.exceptions import ValidationError
from siteaudit.schemas.audit import AggregatedAudit, AuditRequest
from siteaudit.services.events import AuditContext

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/audit", response_model=AggregatedAudit, response_model_exclude_none=True)
async def create_audit(
    request: AuditRequest = Depends(get_audit_request),  # noqa: B008
    settings: Config = Depends(get_settings),  # noqa: B008
    providers: AuditProviders = Depends(get_audit_providers),  # noqa: B008
    context: AuditContext = Depends(get_audit_context),  # noqa: B008
) -> AggregatedAudit:
    """
    Run a composite audit for the given URL and return the aggregated report.

    Provider failures never fail the request: they are listed in ``errors``
    and the corresponding report is omitted. Only an invalid URL is rejected.
    """
    try:
        return await run_audit_async(
            url=request.url,
            providers=providers,
            context=context,
            timeout=request.timeout or settings.provider_timeout,
            report_search_failures=settings.report_search_failures,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Error running audit for {request.url}: {e}")
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}") from e
