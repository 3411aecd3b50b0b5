"""URL validation utilities."""

import re
from urllib.parse import urlparse

from siteaudit.errors.exceptions import InvalidUrlError


def validate_url(url: str) -> str:
    """
    Validate an audit target.

    The URL must be absolute: an http or https scheme plus a host.
    Returns the stripped URL or raises InvalidUrlError.
    """
    if not url or not url.strip():
        raise InvalidUrlError("URL is required and must be a non-empty string")

    # Remove leading/trailing whitespace
    url = url.strip()

    if "://" not in url:
        raise InvalidUrlError("Please enter a valid URL (e.g., https://example.com)")

    # Parse URL
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL format: {str(e)}") from e

    # Validate scheme
    if parsed.scheme not in ("http", "https"):
        raise InvalidUrlError("URL must use http or https protocol")

    # Validate host
    hostname = parsed.hostname
    if not hostname:
        raise InvalidUrlError("URL must include a valid domain")

    if " " in parsed.netloc:
        raise InvalidUrlError("URL domain appears to be invalid")

    if port is not None and not (1 <= port <= 65535):
        raise InvalidUrlError(f"Port {port} is out of valid range (1-65535)")

    if hostname == "localhost":
        # Allow localhost for development
        pass
    elif re.match(r"^\d+\.\d+\.\d+\.\d+$", hostname):
        # It's an IP address, basic validation
        pass
    elif not re.match(r"^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$", hostname):
        raise InvalidUrlError("URL domain format appears invalid")

    return url
