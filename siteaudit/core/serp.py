"""Search presence fetcher - organic results for a domain from SerpApi."""

import re
from typing import Any, Dict, List, cast

import httpx

from siteaudit.errors.exceptions import APIError
from siteaudit.schemas.audit import SearchResult
from siteaudit.services.http import http_client, json_body, raise_transport_error

SERPAPI_URL = "https://serpapi.com/search.json"

RESULTS_PER_QUERY = 10


def bare_domain(url: str) -> str:
    """Strip the scheme and a single trailing slash: ``https://a.com/`` -> ``a.com``."""
    domain = re.sub(r"^https?://", "", url.strip())
    return domain[:-1] if domain.endswith("/") else domain


def _parse_results(data: Dict[str, Any]) -> List[SearchResult]:
    """Map SerpApi organic results to SearchResults, keeping their order."""
    raw_results = data.get("organic_results") or []
    if not isinstance(raw_results, list):
        raise APIError("SerpApi organic_results was not a list")

    results: List[SearchResult] = []
    for index, raw in enumerate(cast(List[Any], raw_results)):
        if not isinstance(raw, dict):
            continue
        item = cast(Dict[str, Any], raw)
        position = item.get("position")
        rank = position if isinstance(position, int) and position > 0 else index + 1
        results.append(
            SearchResult(
                rank=rank,
                matched_snippet=str(item.get("snippet") or "N/A"),
                result_url=str(item.get("link") or ""),
                result_title=str(item.get("title") or ""),
            )
        )
    return results


async def fetch_search_presence(
    url: str,
    api_key: str,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> List[SearchResult]:
    """
    Fetch the indexed pages of the URL's domain with a ``site:`` query.

    Raises APIError on transport failures, non-2xx responses and malformed bodies.
    """
    params: Dict[str, str] = {
        "engine": "google",
        "q": f"site:{bare_domain(url)}",
        "api_key": api_key,
        "num": str(RESULTS_PER_QUERY),
    }

    try:
        async with http_client(timeout, client) as http:
            response = await http.get(SERPAPI_URL, params=params)
    except httpx.HTTPError as e:
        raise_transport_error("SerpApi", e)

    data = json_body(response)
    if not response.is_success:
        raise APIError(str(data.get("error") or f"SerpApi returned error status {response.status_code}"))

    return _parse_results(data)
