"""Health check endpoint with provider configuration status."""

from typing import Any

from fastapi import APIRouter, HTTPException

from siteaudit.config.settings import (
    GOOGLE_API_KEY_ENV,
    PAGESPEED_API_KEY_ENV,
    SERPAPI_KEY_ENV,
    get_config,
)

router = APIRouter()

PROVIDER_CREDENTIALS = {
    "pagespeed": PAGESPEED_API_KEY_ENV,
    "serpapi": SERPAPI_KEY_ENV,
    "gemini": GOOGLE_API_KEY_ENV,
}


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint.

    The service is alive whenever it answers; it is ready once every
    provider credential is configured. Not ready raises 503.
    """
    config = get_config()
    missing = config.missing_credentials()

    providers = {
        name: {"configured": env_key not in missing, "env": env_key}
        for name, env_key in PROVIDER_CREDENTIALS.items()
    }
    is_ready = not missing

    if not is_ready:
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "ready": False,
                "alive": True,
                "providers": providers,
                "reason": f"Missing credentials: {', '.join(missing)}",
            },
        )

    return {
        "status": "healthy",
        "ready": True,
        "alive": True,
        "providers": providers,
        "provider_timeout_seconds": config.provider_timeout,
        "report_search_failures": config.report_search_failures,
    }
