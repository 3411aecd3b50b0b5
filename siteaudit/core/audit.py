"""Main audit orchestration with concurrent, failure-isolated provider calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from siteaudit.config.settings import (
    GOOGLE_API_KEY_ENV,
    PAGESPEED_API_KEY_ENV,
    SERPAPI_KEY_ENV,
    Config,
    get_config,
)
from siteaudit.core.ai import GeminiTextGenerator
from siteaudit.core.page import (
    FetchedPage,
    analyze_content,
    analyze_meta_tags,
    analyze_mobile_usability,
    analyze_schema_markup,
    analyze_security,
    fetch_page,
)
from siteaudit.core.psi import fetch_pagespeed
from siteaudit.core.recommendations import (
    FALLBACK_RECOMMENDATIONS,
    TextGenerator,
    synthesize_recommendations,
)
from siteaudit.core.serp import fetch_search_presence
from siteaudit.schemas.audit import (
    AggregatedAudit,
    ContentReport,
    MetaTagReport,
    MobileUsabilityReport,
    PerformanceReport,
    SchemaMarkupReport,
    SearchResult,
    SecurityReport,
)
from siteaudit.schemas.common import ProviderResult, Status
from siteaudit.services.events import AuditContext
from siteaudit.services.validators import validate_url

logger = logging.getLogger(__name__)

# Provider display names, in the order errors are reported
PAGESPEED = "PageSpeed"
SERP = "SERP"
META_TAGS = "Meta Tags"
MOBILE = "Mobile Friendliness"
SCHEMA_MARKUP = "Schema Markup"
SECURITY = "Security"
CONTENT = "Content"


@dataclass(frozen=True)
class AuditProviders:
    """
    The provider calls an audit fans out to, each taking the target URL.

    ``schema_markup`` is optional; when it is None the audit runs the six
    core providers only and ``schemaMarkup`` is omitted from the report.
    """

    performance: Callable[[str], Awaitable[PerformanceReport]]
    search: Callable[[str], Awaitable[list[SearchResult]]]
    meta_tags: Callable[[str], Awaitable[MetaTagReport]]
    mobile: Callable[[str], Awaitable[MobileUsabilityReport]]
    security: Callable[[str], Awaitable[SecurityReport]]
    content: Callable[[str], Awaitable[ContentReport]]
    text_generator: TextGenerator
    schema_markup: Callable[[str], Awaitable[SchemaMarkupReport]] | None = None


def _page_provider(
    analyze: Callable[[FetchedPage], Any], timeout: float, user_agent: str
) -> Callable[[str], Awaitable[Any]]:
    """Fetch the page independently, then run one analyzer over it."""

    async def provider(url: str) -> Any:
        page = await fetch_page(url, timeout=timeout, user_agent=user_agent)
        return analyze(page)

    return provider


def build_default_providers(config: Config) -> AuditProviders:
    """
    Wire the real PageSpeed, SerpApi, page-fetch and Gemini providers.

    Raises ValueError if a required credential is not configured.
    """
    pagespeed_key = config.require(PAGESPEED_API_KEY_ENV)
    serpapi_key = config.require(SERPAPI_KEY_ENV)
    google_key = config.require(GOOGLE_API_KEY_ENV)
    timeout = config.provider_timeout

    async def performance(url: str) -> PerformanceReport:
        return await fetch_pagespeed(url, pagespeed_key, timeout)

    async def search(url: str) -> list[SearchResult]:
        return await fetch_search_presence(url, serpapi_key, timeout)

    return AuditProviders(
        performance=performance,
        search=search,
        meta_tags=_page_provider(analyze_meta_tags, timeout, config.user_agent),
        mobile=_page_provider(analyze_mobile_usability, timeout, config.user_agent),
        schema_markup=_page_provider(analyze_schema_markup, timeout, config.user_agent),
        security=_page_provider(analyze_security, timeout, config.user_agent),
        content=_page_provider(analyze_content, timeout, config.user_agent),
        text_generator=GeminiTextGenerator(
            api_key=google_key,
            model=config.ai_model,
            max_tokens=config.ai_max_tokens,
            temperature=config.ai_temperature,
        ),
    )


async def _settle(
    name: str,
    call: Callable[[str], Awaitable[Any]],
    url: str,
    timeout: float,
    context: AuditContext,
) -> ProviderResult[Any]:
    """Run one provider call and capture its outcome instead of raising."""
    try:
        value = await asyncio.wait_for(call(url), timeout)
    except asyncio.TimeoutError:
        message = f"timed out after {timeout:g}s"
    except Exception as e:
        message = str(e) or type(e).__name__
    else:
        if value is not None:
            context.record("provider_succeeded", provider=name)
            return ProviderResult.success(value)
        message = "provider returned no data"

    logger.warning(f"{name} analysis failed for {url}: {message}")
    context.record("provider_failed", provider=name, error=message)
    return ProviderResult.failure(message)


async def run_audit_async(
    url: str,
    providers: AuditProviders | None = None,
    context: AuditContext | None = None,
    timeout: float | None = None,
    report_search_failures: bool | None = None,
) -> AggregatedAudit:
    """
    Run a composite website audit.

    Every provider is called once and concurrently; the audit waits for all
    of them to settle. A failed provider leaves its report empty and adds
    ``"<Provider> analysis failed: <message>"`` to ``errors``, except the
    search provider, whose failure yields an empty result list unless
    ``report_search_failures`` is set.

    Recommendations are synthesized only when the performance report
    succeeded; otherwise the static fallback list is returned.

    Raises InvalidUrlError, before any network call, if the URL is not an
    absolute http(s) URL.

    Args:
        url: The URL to audit
        providers: Provider calls to use (default: real providers from config)
        context: Event recording context (default: log events)
        timeout: Per-provider timeout in seconds (default: from config)
        report_search_failures: Record search failures in ``errors`` (default: from config)
    """
    target = validate_url(url)

    if providers is None or timeout is None or report_search_failures is None:
        config = get_config()
        if providers is None:
            providers = build_default_providers(config)
        if timeout is None:
            timeout = config.provider_timeout
        if report_search_failures is None:
            report_search_failures = config.report_search_failures

    context = context or AuditContext()
    context.record("audit_started", url=target)

    calls: list[tuple[str, Callable[[str], Awaitable[Any]]]] = [
        (PAGESPEED, providers.performance),
        (SERP, providers.search),
        (META_TAGS, providers.meta_tags),
        (MOBILE, providers.mobile),
    ]
    if providers.schema_markup is not None:
        calls.append((SCHEMA_MARKUP, providers.schema_markup))
    calls.extend([(SECURITY, providers.security), (CONTENT, providers.content)])
    settled = await asyncio.gather(
        *(_settle(name, call, target, timeout, context) for name, call in calls)
    )
    results = dict(zip((name for name, _ in calls), settled))

    errors: list[str] = []

    def take(name: str) -> Any:
        result = results[name]
        if result.ok:
            return result.value
        errors.append(f"{name} analysis failed: {result.error_message}")
        return None

    page_speed_data: PerformanceReport | None = take(PAGESPEED)

    serp_data: list[SearchResult] | None
    if results[SERP].ok or report_search_failures:
        serp_data = take(SERP)
    else:
        # Search failures degrade to "no results" without an error entry
        serp_data = []

    meta_tags = take(META_TAGS)
    mobile = take(MOBILE)
    schema_markup = take(SCHEMA_MARKUP) if SCHEMA_MARKUP in results else None
    security = take(SECURITY)
    content = take(CONTENT)

    if page_speed_data is not None:
        ai_recommendations = await synthesize_recommendations(
            target, page_speed_data, serp_data, providers.text_generator, timeout
        )
    else:
        context.record("synthesis_skipped", url=target)
        ai_recommendations = list(FALLBACK_RECOMMENDATIONS)

    failed = sum(1 for result in settled if not result.ok)
    if failed == 0:
        status = Status.SUCCESS
    elif failed == len(settled):
        status = Status.FAILED
    else:
        status = Status.PARTIAL

    context.record("audit_completed", url=target, status=status.value, failed_providers=failed)

    return AggregatedAudit(
        url=target,
        status=status,
        page_speed_data=page_speed_data,
        serp_data=serp_data,
        meta_tags=meta_tags,
        mobile_friendliness=mobile,
        schema_markup=schema_markup,
        security=security,
        content=content,
        ai_recommendations=ai_recommendations,
        errors=errors,
    )
