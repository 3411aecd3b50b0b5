"""FastAPI application entrypoint with lifecycle logging."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from siteaudit.api.v1 import router as v1_router
from siteaudit.config.settings import get_config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log startup configuration and shutdown."""
    logger.info("Starting up Site Audit API...")

    config = get_config()
    missing = config.missing_credentials()
    if missing:
        logger.warning(f"Audits will be rejected until these are set: {', '.join(missing)}")
    logger.info(f"Provider timeout: {config.provider_timeout:g}s")

    try:
        yield
    finally:
        logger.info("Site Audit API shutdown complete")


app = FastAPI(
    title="Site Audit API",
    description="API for composite website audits: PageSpeed, search presence, on-page checks and AI recommendations",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_config().cors_allow_origins),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include API v1 routes
app.include_router(v1_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": "Site Audit API",
        "version": "0.1.0",
        "docs": "/docs",
    }
