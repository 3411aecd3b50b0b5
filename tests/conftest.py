"""Pytest fixtures for site audit tests."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Generator
from typing import Any

import pytest

from siteaudit.config.settings import reset_config
from siteaudit.core.audit import AuditProviders
from siteaudit.schemas.audit import (
    ContentReport,
    CoreMetrics,
    HeadingCounts,
    ImageStats,
    MetaTagReport,
    MobileUsabilityReport,
    Opportunity,
    PerformanceReport,
    SearchResult,
    SecurityHeaders,
    SecurityReport,
    SocialCards,
    TagFinding,
)
from siteaudit.schemas.common import QualityStatus


@pytest.fixture(autouse=True, scope="function")
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Give every test fresh credentials and a fresh config singleton."""
    monkeypatch.setenv("PAGESPEED_API_KEY", "test-pagespeed-key")
    monkeypatch.setenv("SERPAPI_KEY", "test-serpapi-key")
    monkeypatch.setenv("GOOGLE_API_KEY", "test-google-key")
    monkeypatch.setenv("PROVIDER_TIMEOUT_SECONDS", "5")
    monkeypatch.delenv("REPORT_SEARCH_FAILURES", raising=False)
    reset_config()

    yield

    reset_config()


@pytest.fixture
def sample_performance_report() -> PerformanceReport:
    """Sample PerformanceReport fixture for tests."""
    return PerformanceReport(
        score=85,
        core_metrics=CoreMetrics(
            first_contentful_paint_seconds=1.2,
            largest_contentful_paint_seconds=2.4,
            cumulative_layout_shift=0.05,
            first_input_delay_seconds=0.08,
        ),
        opportunities=[
            Opportunity(
                title="Eliminate render-blocking resources",
                description="Resources are blocking the first paint.",
                estimated_savings="Potential savings of 500 ms",
            ),
            Opportunity(
                title="Properly size images",
                description="Serve images that are appropriately-sized.",
                estimated_savings="Potential savings of 120 KiB",
            ),
        ],
    )


@pytest.fixture
def sample_search_results() -> list[SearchResult]:
    return [
        SearchResult(
            rank=i,
            matched_snippet=f"Snippet {i}",
            result_url=f"https://example.com/page-{i}",
            result_title=f"Page {i}",
        )
        for i in range(1, 4)
    ]


@pytest.fixture
def sample_meta_tags() -> MetaTagReport:
    return MetaTagReport(
        title=TagFinding(
            content="Example Domain", length=14, status=QualityStatus.WARNING,
            recommendations=["Title is too short, aim for 30-60 characters"],
        ),
        description=TagFinding(
            content="", length=0, status=QualityStatus.ERROR,
            recommendations=["Add a meta description"],
        ),
        social_cards=SocialCards(open_graph=False, twitter_card=False),
        robots="index, follow",
    )


@pytest.fixture
def sample_mobile_report() -> MobileUsabilityReport:
    return MobileUsabilityReport(
        score=100,
        status=QualityStatus.GOOD,
        viewport_configured=True,
        touch_targets_adequate=True,
        text_readable=True,
        issues=[],
    )


@pytest.fixture
def sample_security_report() -> SecurityReport:
    return SecurityReport(
        ssl_enabled=True,
        mixed_content_issue_count=0,
        security_headers=SecurityHeaders(
            csp=False, hsts=True, x_frame_options=True, x_content_type_options=True
        ),
    )


@pytest.fixture
def sample_content_report() -> ContentReport:
    return ContentReport(
        word_count=420,
        readability_score=42.0,
        headings=HeadingCounts(h1=1, h2=3, h3=2),
        missing_h1=False,
        multiple_h1=False,
        images=ImageStats(total=4, with_alt=3, missing_alt=1),
        internal_link_count=12,
        external_link_count=3,
    )


def _returning(value: Any) -> Callable[[str], Awaitable[Any]]:
    """Provider stub that always returns ``value``."""

    async def provider(url: str) -> Any:
        return value

    return provider


def _raising(message: str) -> Callable[..., Awaitable[Any]]:
    """Provider stub that always raises ``message``."""

    async def provider(*args: Any) -> Any:
        raise RuntimeError(message)

    return provider


class FakeTextGenerator:
    """Text generator stub that records its calls."""

    def __init__(self, reply: str = "1. Do X\n2. Do Y\n3. Do Z") -> None:
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        return self.reply


@pytest.fixture
def returning() -> Callable[[Any], Callable[[str], Awaitable[Any]]]:
    """Factory for provider stubs that succeed with a fixed value."""
    return _returning


@pytest.fixture
def raising() -> Callable[[str], Callable[..., Awaitable[Any]]]:
    """Factory for provider stubs that fail with a fixed message."""
    return _raising


@pytest.fixture
def make_text_generator() -> type[FakeTextGenerator]:
    return FakeTextGenerator


@pytest.fixture
def text_generator() -> FakeTextGenerator:
    return FakeTextGenerator()


@pytest.fixture
def fake_providers(
    sample_performance_report: PerformanceReport,
    sample_search_results: list[SearchResult],
    sample_meta_tags: MetaTagReport,
    sample_mobile_report: MobileUsabilityReport,
    sample_security_report: SecurityReport,
    sample_content_report: ContentReport,
    text_generator: FakeTextGenerator,
) -> AuditProviders:
    """Providers that all succeed with fixed data."""
    return AuditProviders(
        performance=_returning(sample_performance_report),
        search=_returning(sample_search_results),
        meta_tags=_returning(sample_meta_tags),
        mobile=_returning(sample_mobile_report),
        security=_returning(sample_security_report),
        content=_returning(sample_content_report),
        text_generator=text_generator,
    )
