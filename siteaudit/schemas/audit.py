"""Audit-related Pydantic schemas."""

from pydantic import BaseModel, Field, computed_field

from siteaudit.schemas.common import CamelModel, QualityStatus, Severity, Status

# === Performance Models ===


class CoreMetrics(CamelModel):
    """Core Web Vitals reported by PageSpeed Insights."""

    first_contentful_paint_seconds: float
    largest_contentful_paint_seconds: float
    cumulative_layout_shift: float
    first_input_delay_seconds: float


class Opportunity(CamelModel):
    """PageSpeed optimization opportunity."""

    title: str
    description: str
    estimated_savings: str


class PerformanceReport(CamelModel):
    """Performance score, vitals and ranked opportunities."""

    score: int = Field(ge=0, le=100)
    core_metrics: CoreMetrics
    opportunities: list[Opportunity]


# === Search Presence Models ===


class SearchResult(CamelModel):
    """A single organic search result for the audited domain."""

    rank: int = Field(gt=0)
    matched_snippet: str
    result_url: str
    result_title: str


# === Meta Tag Models ===


class TagFinding(CamelModel):
    """Structured finding for a single meta tag."""

    content: str
    length: int
    status: QualityStatus
    recommendations: list[str]


class SocialCards(CamelModel):
    """Presence of social sharing cards."""

    open_graph: bool
    twitter_card: bool


class MetaTagReport(CamelModel):
    """Title, description, social cards and robots directive."""

    title: TagFinding
    description: TagFinding
    social_cards: SocialCards
    robots: str


# === Mobile Usability Models ===


class MobileIssue(CamelModel):
    """A mobile usability problem."""

    category: str
    description: str
    severity: Severity


class MobileUsabilityReport(CamelModel):
    """Viewport, touch target and text readability checks."""

    score: int = Field(ge=0, le=100)
    status: QualityStatus
    viewport_configured: bool
    touch_targets_adequate: bool
    text_readable: bool
    issues: list[MobileIssue]
    viewport_content: str = ""


# === Schema Markup Models ===


class SchemaMarkupReport(CamelModel):
    """Structured data found on the page (JSON-LD and microdata)."""

    types: list[str]
    json_ld_blocks: int = Field(ge=0)
    microdata_items: int = Field(ge=0)
    coverage: int = Field(ge=0, le=100)
    issues: list[str]
    recommendations: list[str]


# === Security Models ===


class SecurityHeaders(CamelModel):
    """Presence of the security response headers."""

    csp: bool
    hsts: bool
    x_frame_options: bool
    x_content_type_options: bool


class SecurityReport(CamelModel):
    """TLS, mixed content and security header findings."""

    ssl_enabled: bool
    mixed_content_issue_count: int = Field(ge=0)
    security_headers: SecurityHeaders
    mixed_content_details: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> int:
        """25 points per security header present."""
        headers = self.security_headers
        flags = (headers.csp, headers.hsts, headers.x_frame_options, headers.x_content_type_options)
        return 25 * sum(1 for flag in flags if flag)


# === Content Models ===


class HeadingCounts(CamelModel):
    h1: int
    h2: int
    h3: int


class ImageStats(CamelModel):
    total: int
    with_alt: int
    missing_alt: int
    oversized: int = 0


class KeywordDensity(CamelModel):
    """How often a word occurs, as a percentage of all visible words."""

    keyword: str
    count: int
    density: float


class ContentReport(CamelModel):
    """On-page content statistics."""

    word_count: int
    readability_score: float
    headings: HeadingCounts
    missing_h1: bool
    multiple_h1: bool
    images: ImageStats
    internal_link_count: int
    external_link_count: int
    keyword_density: list[KeywordDensity] = Field(default_factory=list)


# === Main Response Models ===


class AggregatedAudit(CamelModel):
    """The combined audit returned once every provider has settled."""

    url: str
    status: Status
    page_speed_data: PerformanceReport | None = None
    serp_data: list[SearchResult] | None = None
    meta_tags: MetaTagReport | None = None
    mobile_friendliness: MobileUsabilityReport | None = None
    schema_markup: SchemaMarkupReport | None = None
    security: SecurityReport | None = None
    content: ContentReport | None = None
    ai_recommendations: list[str]
    errors: list[str]


# === Request Models ===


class AuditRequest(BaseModel):
    """Request model for audit endpoint."""

    url: str
    timeout: float | None = Field(default=None, gt=0, le=120)
