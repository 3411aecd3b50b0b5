"""Recommendation synthesis from aggregated audit metrics."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence

from siteaudit.errors.exceptions import APIError
from siteaudit.schemas.audit import PerformanceReport, SearchResult

logger = logging.getLogger(__name__)

# (system_prompt, user_prompt) -> reply text
TextGenerator = Callable[[str, str], Awaitable[str]]

MAX_RECOMMENDATIONS = 5
TOP_OPPORTUNITIES = 3

FALLBACK_RECOMMENDATIONS: tuple[str, ...] = (
    "Optimize images by compressing them and using next-gen formats like WebP",
    "Implement lazy loading for images and non-critical resources",
    "Minify and compress CSS, JavaScript, and HTML files",
    "Enable browser caching with appropriate cache headers",
    "Improve server response time by optimizing database queries and using a CDN",
)

SYSTEM_PROMPT = (
    "You are an expert SEO consultant. Provide specific, actionable "
    "recommendations as a numbered list, one recommendation per line."
)

USER_PROMPT_TEMPLATE = """Analyze this website's SEO performance and provide {count} specific, actionable recommendations.

URL: {url}
PageSpeed Score: {score}/100
Core Web Vitals:
- First Contentful Paint: {fcp}s
- Largest Contentful Paint: {lcp}s
- Cumulative Layout Shift: {cls}
- First Input Delay: {fid}s

Top Performance Issues:
{opportunities}

Search Results Found: {indexed} pages indexed

Focus on technical SEO, performance optimization and search visibility.
Each recommendation must be a single sentence describing an immediate action."""

_NUMBERED_LINE = re.compile(r"^\d+\.\s*")


def build_prompt(
    url: str, performance: PerformanceReport, search: Sequence[SearchResult] | None
) -> str:
    """Embed the metrics and the top opportunities into the user prompt."""
    metrics = performance.core_metrics
    top = performance.opportunities[:TOP_OPPORTUNITIES]
    opportunities = "\n".join(f"- {opp.title}: {opp.description}" for opp in top)

    return USER_PROMPT_TEMPLATE.format(
        count=MAX_RECOMMENDATIONS,
        url=url,
        score=performance.score,
        fcp=metrics.first_contentful_paint_seconds,
        lcp=metrics.largest_contentful_paint_seconds,
        cls=metrics.cumulative_layout_shift,
        fid=metrics.first_input_delay_seconds,
        opportunities=opportunities or "- None reported",
        indexed=len(search) if search else 0,
    )


def parse_recommendations(text: str) -> list[str]:
    """
    Keep the ``<number>. <text>`` lines of a reply, ordinals stripped.

    Order is preserved and the result is capped at five items.
    """
    recommendations: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not _NUMBERED_LINE.match(stripped):
            continue
        item = _NUMBERED_LINE.sub("", stripped, count=1).strip()
        if item:
            recommendations.append(item)
    return recommendations[:MAX_RECOMMENDATIONS]


async def synthesize_recommendations(
    url: str,
    performance: PerformanceReport,
    search: Sequence[SearchResult] | None,
    generate: TextGenerator,
    timeout: float | None = None,
) -> list[str]:
    """
    Ask the text generator for recommendations.

    Never raises: any generation failure yields FALLBACK_RECOMMENDATIONS.
    """
    prompt = build_prompt(url, performance, search)
    try:
        reply = await asyncio.wait_for(generate(SYSTEM_PROMPT, prompt), timeout)
        recommendations = parse_recommendations(reply)
        if not recommendations:
            raise APIError("reply contained no numbered recommendations")
        return recommendations
    except Exception as e:
        logger.warning(f"Recommendation synthesis failed for {url}, using fallback: {e}")
        return list(FALLBACK_RECOMMENDATIONS)
