"""PageSpeed Insights fetcher - lab performance score, Core Web Vitals and opportunities."""

from typing import Any, Dict, List, Optional, cast

import httpx

from siteaudit.errors.exceptions import APIError
from siteaudit.schemas.audit import CoreMetrics, Opportunity, PerformanceReport
from siteaudit.services.http import http_client, json_body, raise_transport_error

PSI_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

MAX_OPPORTUNITIES = 10


# === Type-safe helpers ===


def _safe_float(value: Any) -> Optional[float]:
    """Safely convert value to float or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _get_audit_value(audits: Dict[str, Any], audit_id: str) -> float:
    """Numeric value of a Lighthouse audit, 0 when missing."""
    audit = audits.get(audit_id)
    if not isinstance(audit, dict):
        return 0.0
    value = _safe_float(cast(Dict[str, Any], audit).get("numericValue"))
    return value if value is not None else 0.0


# === Parsing Functions ===


def _parse_core_metrics(audits: Dict[str, Any]) -> CoreMetrics:
    """Parse the four Core Web Vitals, converting milliseconds to seconds."""
    return CoreMetrics(
        first_contentful_paint_seconds=round(
            _get_audit_value(audits, "first-contentful-paint") / 1000, 3
        ),
        largest_contentful_paint_seconds=round(
            _get_audit_value(audits, "largest-contentful-paint") / 1000, 3
        ),
        cumulative_layout_shift=round(_get_audit_value(audits, "cumulative-layout-shift"), 3),
        first_input_delay_seconds=round(_get_audit_value(audits, "max-potential-fid") / 1000, 3),
    )


def _parse_opportunities(audits: Dict[str, Any]) -> List[Opportunity]:
    """Collect opportunity audits with positive savings, in report order."""
    opportunities: List[Opportunity] = []
    for audit in audits.values():
        if not isinstance(audit, dict):
            continue
        audit_typed = cast(Dict[str, Any], audit)
        details = audit_typed.get("details")
        if not isinstance(details, dict) or details.get("type") != "opportunity":
            continue
        numeric_value = _safe_float(audit_typed.get("numericValue"))
        if numeric_value is None or numeric_value <= 0:
            continue

        opportunities.append(
            Opportunity(
                title=str(audit_typed.get("title", "")),
                description=str(audit_typed.get("description", "")),
                estimated_savings=str(audit_typed.get("displayValue") or "Potential improvement"),
            )
        )
        if len(opportunities) >= MAX_OPPORTUNITIES:
            break

    return opportunities


def _parse_performance(data: Dict[str, Any]) -> PerformanceReport:
    """Build a PerformanceReport from a PSI response body."""
    lighthouse = data.get("lighthouseResult")
    if not isinstance(lighthouse, dict):
        raise APIError("PageSpeed response did not include a Lighthouse result")

    try:
        raw_score = lighthouse["categories"]["performance"]["score"]
    except (KeyError, TypeError) as e:
        raise APIError("PageSpeed response did not include a performance score") from e

    score = _safe_float(raw_score)
    if score is None:
        raise APIError("PageSpeed performance score was not numeric")

    audits = lighthouse.get("audits")
    audits_typed = cast(Dict[str, Any], audits) if isinstance(audits, dict) else {}

    return PerformanceReport(
        score=max(0, min(100, round(score * 100))),
        core_metrics=_parse_core_metrics(audits_typed),
        opportunities=_parse_opportunities(audits_typed),
    )


def _error_message(data: Dict[str, Any], status_code: int) -> str:
    """Pull the error message out of a PSI error body."""
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return f"PageSpeed API returned error status {status_code}"


async def fetch_pagespeed(
    url: str,
    api_key: str,
    timeout: float = 60.0,
    client: httpx.AsyncClient | None = None,
) -> PerformanceReport:
    """
    Fetch the desktop performance report for a URL from PageSpeed Insights.

    Raises APIError on transport failures, non-2xx responses and malformed bodies.
    """
    params: Dict[str, str] = {
        "url": url,
        "key": api_key,
        "strategy": "desktop",
        "category": "performance",
    }

    try:
        async with http_client(timeout, client) as http:
            response = await http.get(PSI_API_URL, params=params)
    except httpx.HTTPError as e:
        raise_transport_error("PageSpeed API", e)

    data = json_body(response)
    if not response.is_success:
        raise APIError(_error_message(data, response.status_code))

    return _parse_performance(data)
