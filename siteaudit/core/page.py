"""Page fetcher and on-page analyzers: meta tags, mobile usability, schema markup, security, content."""

from __future__ import annotations

import json
import re
from collections import Counter
from dataclasses import dataclass, field
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup, Tag

from siteaudit.errors.exceptions import APIError
from siteaudit.schemas.audit import (
    ContentReport,
    HeadingCounts,
    ImageStats,
    KeywordDensity,
    MetaTagReport,
    MobileIssue,
    MobileUsabilityReport,
    SchemaMarkupReport,
    SecurityHeaders,
    SecurityReport,
    SocialCards,
    TagFinding,
)
from siteaudit.schemas.common import QualityStatus, Severity
from siteaudit.services.http import http_client, raise_transport_error

TITLE_LENGTH = (30, 60)
DESCRIPTION_LENGTH = (120, 160)
DEFAULT_ROBOTS = "index, follow"

MIN_FONT_SIZE_PX = 12.0
MIN_TOUCH_TARGET_PX = 24.0

_FONT_SIZE_RE = re.compile(r"font-size\s*:\s*(\d+(?:\.\d+)?)px", re.IGNORECASE)
_DIMENSION_RE = re.compile(r"(?<![-\w])(width|height)\s*:\s*(\d+(?:\.\d+)?)px", re.IGNORECASE)
_SKIPPED_HREF_PREFIXES = ("mailto:", "tel:", "javascript:", "#")

# Subresources that load into the page (plain <a> links are navigation, not mixed content)
SUBRESOURCE_ATTRIBUTES = (
    ("img", "src"),
    ("script", "src"),
    ("iframe", "src"),
    ("source", "src"),
    ("audio", "src"),
    ("video", "src"),
    ("embed", "src"),
    ("link", "href"),
    ("form", "action"),
)
MAX_MIXED_CONTENT_DETAILS = 10

OVERSIZED_IMAGE_PX = 2000
TOP_KEYWORDS = 5
_KEYWORD_RE = re.compile(r"[a-z][a-z'-]{2,}")
STOP_WORDS = frozenset(
    """
    the and for are but not you all any can had her was one our out has him his how its
    may new now old see two who did get let put say she too use this that with from your
    have they will been were what when which their there than then them these those into
    more some such only also just about over after very would could should other each
    """.split()
)

# Schema.org types every site is expected to declare
RECOMMENDED_SCHEMA_TYPES = {
    "Organization": "Add Organization schema with complete business information",
    "WebSite": "Add WebSite schema to describe the site and its search box",
    "WebPage": "Add WebPage schema to describe each page",
    "BreadcrumbList": "Implement BreadcrumbList schema for better navigation",
}


@dataclass(frozen=True)
class FetchedPage:
    """Raw page as served, after redirects."""

    url: str
    html: str
    headers: dict[str, str] = field(default_factory=dict)


async def fetch_page(
    url: str,
    timeout: float = 20.0,
    user_agent: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> FetchedPage:
    """
    GET a page, following redirects.

    Raises APIError on transport failures and non-2xx responses.
    """
    headers = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    if user_agent:
        headers["User-Agent"] = user_agent

    try:
        async with http_client(timeout, client) as http:
            response = await http.get(url, headers=headers, follow_redirects=True)
    except httpx.HTTPError as e:
        raise_transport_error("page", e)

    if not response.is_success:
        raise APIError(f"Page fetch returned status {response.status_code}")

    return FetchedPage(
        url=str(response.url),
        html=response.text,
        headers={key.lower(): value for key, value in response.headers.items()},
    )


# === Helpers ===


def _soup(page: FetchedPage) -> BeautifulSoup:
    return BeautifulSoup(page.html, "html.parser")


def _meta_content(soup: BeautifulSoup, attr: str, value: str) -> str:
    """Content of the first <meta> whose ``attr`` matches ``value`` (case-insensitive)."""
    for meta in soup.find_all("meta"):
        if not isinstance(meta, Tag):
            continue
        key = meta.get(attr)
        if isinstance(key, str) and key.strip().lower() == value:
            content = meta.get("content")
            return content.strip() if isinstance(content, str) else ""
    return ""


def _grade_length(
    content: str, bounds: tuple[int, int], label: str, missing_advice: str
) -> TagFinding:
    low, high = bounds
    length = len(content)
    if length == 0:
        status, recommendations = QualityStatus.ERROR, [missing_advice]
    elif length < low:
        status = QualityStatus.WARNING
        recommendations = [f"{label} is too short, aim for {low}-{high} characters"]
    elif length > high:
        status = QualityStatus.WARNING
        recommendations = [f"{label} is too long, aim for {low}-{high} characters"]
    else:
        status, recommendations = QualityStatus.GOOD, []
    return TagFinding(content=content, length=length, status=status, recommendations=recommendations)


def _host(url: str) -> str:
    host = (urlparse(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


# === Analyzers ===


def analyze_meta_tags(page: FetchedPage) -> MetaTagReport:
    soup = _soup(page)

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""
    description = _meta_content(soup, "name", "description")

    og_title = _meta_content(soup, "property", "og:title")
    og_description = _meta_content(soup, "property", "og:description")
    twitter_card = _meta_content(soup, "name", "twitter:card") or _meta_content(
        soup, "property", "twitter:card"
    )

    return MetaTagReport(
        title=_grade_length(title, TITLE_LENGTH, "Title", "Add a title tag"),
        description=_grade_length(
            description, DESCRIPTION_LENGTH, "Meta description", "Add a meta description"
        ),
        social_cards=SocialCards(
            open_graph=bool(og_title and og_description),
            twitter_card=bool(twitter_card),
        ),
        robots=_meta_content(soup, "name", "robots") or DEFAULT_ROBOTS,
    )


def _small_font_count(soup: BeautifulSoup) -> int:
    styles = [tag.get("style") for tag in soup.find_all(style=True) if isinstance(tag, Tag)]
    styles.extend(block.get_text() for block in soup.find_all("style"))
    count = 0
    for style in styles:
        if not isinstance(style, str):
            continue
        count += sum(1 for size in _FONT_SIZE_RE.findall(style) if float(size) < MIN_FONT_SIZE_PX)
    return count


def _small_touch_target_count(soup: BeautifulSoup) -> int:
    count = 0
    for element in soup.find_all(["a", "button"], style=True):
        if not isinstance(element, Tag):
            continue
        style = element.get("style")
        if not isinstance(style, str):
            continue
        if any(float(size) < MIN_TOUCH_TARGET_PX for _, size in _DIMENSION_RE.findall(style)):
            count += 1
    return count


def _zoom_disabled(viewport: str) -> bool:
    directives = viewport.replace(" ", "").lower()
    if "user-scalable=no" in directives or "user-scalable=0" in directives:
        return True
    match = re.search(r"maximum-scale=(\d+(?:\.\d+)?)", directives)
    return bool(match and float(match.group(1)) <= 1.0)


def analyze_mobile_usability(page: FetchedPage) -> MobileUsabilityReport:
    soup = _soup(page)
    issues: list[MobileIssue] = []

    viewport = _meta_content(soup, "name", "viewport")
    viewport_configured = "width=device-width" in viewport.replace(" ", "").lower()
    if not viewport:
        issues.append(
            MobileIssue(
                category="Missing Viewport",
                description="No viewport meta tag found",
                severity=Severity.HIGH,
            )
        )
    elif not viewport_configured:
        issues.append(
            MobileIssue(
                category="Viewport Width",
                description="Viewport does not set width=device-width",
                severity=Severity.HIGH,
            )
        )

    zoom_disabled = bool(viewport) and _zoom_disabled(viewport)
    if zoom_disabled:
        issues.append(
            MobileIssue(
                category="Zoom Disabled",
                description="Viewport prevents users from zooming",
                severity=Severity.MEDIUM,
            )
        )

    small_fonts = _small_font_count(soup)
    if small_fonts:
        issues.append(
            MobileIssue(
                category="Small Text",
                description=f"{small_fonts} style(s) set a font size below {MIN_FONT_SIZE_PX:g}px",
                severity=Severity.MEDIUM,
            )
        )

    small_targets = _small_touch_target_count(soup)
    if small_targets:
        issues.append(
            MobileIssue(
                category="Touch Targets",
                description=f"{small_targets} link(s) or button(s) smaller than {MIN_TOUCH_TARGET_PX:g}px",
                severity=Severity.LOW,
            )
        )

    score = 80 if viewport_configured else 40
    score += 10 if not small_fonts else 0
    score += 10 if not small_targets else 0
    score -= 10 if zoom_disabled else 0
    score = max(0, min(100, score))

    if score >= 80:
        status = QualityStatus.GOOD
    elif score >= 60:
        status = QualityStatus.WARNING
    else:
        status = QualityStatus.ERROR

    return MobileUsabilityReport(
        score=score,
        status=status,
        viewport_configured=viewport_configured,
        touch_targets_adequate=small_targets == 0,
        text_readable=small_fonts == 0,
        issues=issues,
        viewport_content=viewport,
    )


def _schema_types(node: object) -> list[str]:
    """Collect ``@type`` values from a JSON-LD document, including nested and ``@graph`` nodes."""
    types: list[str] = []
    if isinstance(node, list):
        for item in node:
            types.extend(_schema_types(item))
    elif isinstance(node, dict):
        declared = node.get("@type")
        if isinstance(declared, str):
            types.append(declared)
        elif isinstance(declared, list):
            types.extend(t for t in declared if isinstance(t, str))
        for value in node.values():
            if isinstance(value, (dict, list)):
                types.extend(_schema_types(value))
    return types


def _short_type(value: str) -> str:
    # "https://schema.org/Product" -> "Product"
    return value.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]


def analyze_schema_markup(page: FetchedPage) -> SchemaMarkupReport:
    soup = _soup(page)
    found: list[str] = []
    issues: list[str] = []

    blocks = [
        script
        for script in soup.find_all("script")
        if isinstance(script, Tag)
        and str(script.get("type") or "").strip().lower() == "application/ld+json"
    ]
    for index, script in enumerate(blocks, start=1):
        try:
            data = json.loads(script.string or "")
        except json.JSONDecodeError:
            issues.append(f"JSON-LD block {index} is not valid JSON")
            continue
        block_types = _schema_types(data)
        if not block_types:
            issues.append(f"JSON-LD block {index} declares no @type")
        found.extend(block_types)

    items = [item for item in soup.find_all(itemtype=True) if isinstance(item, Tag)]
    for item in items:
        itemtype = item.get("itemtype")
        if isinstance(itemtype, str):
            found.extend(_short_type(value) for value in itemtype.split())

    types = list(dict.fromkeys(_short_type(t) for t in found if t.strip()))
    missing = [name for name in RECOMMENDED_SCHEMA_TYPES if name not in types]
    present = len(RECOMMENDED_SCHEMA_TYPES) - len(missing)

    return SchemaMarkupReport(
        types=types,
        json_ld_blocks=len(blocks),
        microdata_items=len(items),
        coverage=round(100 * present / len(RECOMMENDED_SCHEMA_TYPES)),
        issues=issues,
        recommendations=[RECOMMENDED_SCHEMA_TYPES[name] for name in missing],
    )


def _insecure_subresources(soup: BeautifulSoup) -> list[str]:
    urls: list[str] = []
    for tag_name, attr in SUBRESOURCE_ATTRIBUTES:
        for element in soup.find_all(tag_name):
            if not isinstance(element, Tag):
                continue
            value = element.get(attr)
            if isinstance(value, str) and value.strip().lower().startswith("http://"):
                urls.append(value.strip())
    return urls


def analyze_security(page: FetchedPage) -> SecurityReport:
    ssl_enabled = urlparse(page.url).scheme == "https"
    # Mixed content only exists on pages served over https
    insecure = _insecure_subresources(_soup(page)) if ssl_enabled else []
    headers = page.headers

    return SecurityReport(
        ssl_enabled=ssl_enabled,
        mixed_content_issue_count=len(insecure),
        mixed_content_details=list(dict.fromkeys(insecure))[:MAX_MIXED_CONTENT_DETAILS],
        security_headers=SecurityHeaders(
            csp=bool(headers.get("content-security-policy")),
            hsts=bool(headers.get("strict-transport-security")),
            x_frame_options=bool(headers.get("x-frame-options")),
            x_content_type_options=bool(headers.get("x-content-type-options")),
        ),
    )


def _declared_px(value: object) -> float:
    """Numeric value of a width/height attribute such as ``"2400"`` or ``"2400px"``; 0 if not numeric."""
    if not isinstance(value, str):
        return 0.0
    match = re.fullmatch(r"\s*(\d+(?:\.\d+)?)\s*(?:px)?\s*", value)
    return float(match.group(1)) if match else 0.0


def _keyword_density(text: str, word_count: int) -> list[KeywordDensity]:
    if not word_count:
        return []
    counts = Counter(
        word for word in _KEYWORD_RE.findall(text.lower()) if word not in STOP_WORDS
    )
    # Ties keep first-seen order
    return [
        KeywordDensity(keyword=word, count=count, density=round(count / word_count * 100, 2))
        for word, count in counts.most_common(TOP_KEYWORDS)
    ]


def analyze_content(page: FetchedPage) -> ContentReport:
    soup = _soup(page)

    h1 = len(soup.find_all("h1"))
    h2 = len(soup.find_all("h2"))
    h3 = len(soup.find_all("h3"))

    images = [img for img in soup.find_all("img") if isinstance(img, Tag)]
    with_alt = oversized = 0
    for img in images:
        alt = img.get("alt")
        if isinstance(alt, str) and alt.strip():
            with_alt += 1
        if max(_declared_px(img.get("width")), _declared_px(img.get("height"))) > OVERSIZED_IMAGE_PX:
            oversized += 1

    page_host = _host(page.url)
    internal = external = 0
    for anchor in soup.find_all("a", href=True):
        if not isinstance(anchor, Tag):
            continue
        href = anchor.get("href")
        if not isinstance(href, str):
            continue
        href = href.strip()
        if not href or href.startswith(_SKIPPED_HREF_PREFIXES):
            continue
        full_url = urljoin(page.url, href)
        if urlparse(full_url).scheme not in ("http", "https"):
            continue
        if _host(full_url) == page_host:
            internal += 1
        else:
            external += 1

    # Visible text only
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    text = soup.get_text(separator=" ", strip=True)
    word_count = len(text.split())

    return ContentReport(
        word_count=word_count,
        readability_score=round(min(word_count / 10, 100.0), 1),
        headings=HeadingCounts(h1=h1, h2=h2, h3=h3),
        missing_h1=h1 == 0,
        multiple_h1=h1 > 1,
        images=ImageStats(
            total=len(images),
            with_alt=with_alt,
            missing_alt=len(images) - with_alt,
            oversized=oversized,
        ),
        internal_link_count=internal,
        external_link_count=external,
        keyword_density=_keyword_density(text, word_count),
    )
