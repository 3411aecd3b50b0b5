"""Tests for URL validation."""

import pytest

from siteaudit.errors.exceptions import InvalidUrlError, ValidationError
from siteaudit.services.validators import validate_url


class TestValidUrls:
    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com",
            "http://example.com/path?q=1",
            "https://sub.example.co.uk/",
            "http://localhost:8000",
            "http://192.168.1.10/status",
        ],
    )
    def test_accepts(self, url: str):
        assert validate_url(url) == url

    def test_strips_whitespace(self):
        assert validate_url("  https://example.com  ") == "https://example.com"


class TestInvalidUrls:
    @pytest.mark.parametrize(
        ("url", "message"),
        [
            ("", "non-empty"),
            ("   ", "non-empty"),
            ("example.com", "valid URL"),
            ("ftp://example.com", "http or https"),
            ("https://", "valid domain"),
            ("https://exa mple.com", "invalid"),
            ("https://example.com:99999", "Invalid URL format"),
            ("https://example", "format appears invalid"),
        ],
    )
    def test_rejects(self, url: str, message: str):
        with pytest.raises(InvalidUrlError, match=message):
            validate_url(url)

    def test_invalid_url_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            validate_url("not a url")
