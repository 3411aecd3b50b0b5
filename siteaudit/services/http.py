"""Shared helpers for outbound HTTP calls."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, NoReturn

import httpx

from siteaudit.errors.exceptions import APIError


@asynccontextmanager
async def http_client(
    timeout: float,
    client: httpx.AsyncClient | None = None,
    headers: dict[str, str] | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """
    Yield the injected client, or a fresh one that is closed on exit.

    Fresh clients follow redirects.
    """
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        timeout=timeout, follow_redirects=True, headers=headers
    ) as owned:
        yield owned


def json_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body, or return an empty dict if it is not one."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def raise_transport_error(service: str, error: httpx.HTTPError) -> NoReturn:
    """Translate an httpx transport error into an APIError."""
    if isinstance(error, httpx.TimeoutException):
        raise APIError(f"{service} request timed out: {error}") from error
    raise APIError(f"Failed to connect to {service}: {error}") from error
