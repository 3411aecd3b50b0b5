"""Centralized configuration loading."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_USER_AGENT = "SiteAudit/0.1 (+https://github.com/siteaudit)"

# Environment variable names for provider credentials
PAGESPEED_API_KEY_ENV = "PAGESPEED_API_KEY"
SERPAPI_KEY_ENV = "SERPAPI_KEY"
GOOGLE_API_KEY_ENV = "GOOGLE_API_KEY"


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    # API Keys (validated when the providers that need them are built)
    pagespeed_api_key: str | None
    serpapi_key: str | None
    google_api_key: str | None

    # Timeouts
    provider_timeout: float

    # Text generation
    ai_model: str
    ai_max_tokens: int
    ai_temperature: float

    # Failure policy for the search-presence provider
    report_search_failures: bool

    # Outbound page fetches
    user_agent: str

    # Browser origins allowed to call the API
    cors_allow_origins: tuple[str, ...]

    def require(self, env_key: str) -> str:
        """Return the credential for an environment key or raise if it is unset."""
        values = {
            PAGESPEED_API_KEY_ENV: self.pagespeed_api_key,
            SERPAPI_KEY_ENV: self.serpapi_key,
            GOOGLE_API_KEY_ENV: self.google_api_key,
        }
        value = values.get(env_key)
        if not value:
            raise ValueError(f"{env_key} environment variable is required")
        return value

    def missing_credentials(self) -> list[str]:
        """List the credential environment variables that are not set."""
        missing: list[str] = []
        for key, value in (
            (PAGESPEED_API_KEY_ENV, self.pagespeed_api_key),
            (SERPAPI_KEY_ENV, self.serpapi_key),
            (GOOGLE_API_KEY_ENV, self.google_api_key),
        ):
            if not value:
                missing.append(key)
        return missing


def _get_secret_env(key: str) -> str | None:
    """Get a credential environment variable, treating blank values as unset."""
    value = os.getenv(key)
    if not value or not value.strip():
        return None
    return value.strip()


def _get_optional_env(key: str, default: str) -> str:
    """Get optional environment variable with default."""
    value = os.getenv(key)
    return value.strip() if value else default


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(value: str) -> tuple[str, ...]:
    """Split a comma-separated value, dropping blanks."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


def load_config() -> Config:
    """Load and validate configuration from environment."""
    load_dotenv()

    provider_timeout = float(_get_optional_env("PROVIDER_TIMEOUT_SECONDS", "20"))
    if provider_timeout <= 0:
        raise ValueError("PROVIDER_TIMEOUT_SECONDS must be positive")

    return Config(
        pagespeed_api_key=_get_secret_env(PAGESPEED_API_KEY_ENV),
        serpapi_key=_get_secret_env(SERPAPI_KEY_ENV),
        google_api_key=_get_secret_env(GOOGLE_API_KEY_ENV),
        provider_timeout=provider_timeout,
        # Text generation
        ai_model=_get_optional_env("AI_MODEL", "gemini-2.5-flash"),
        ai_max_tokens=int(_get_optional_env("AI_MAX_TOKENS", "500")),
        ai_temperature=float(_get_optional_env("AI_TEMPERATURE", "0.7")),
        report_search_failures=_parse_bool(_get_optional_env("REPORT_SEARCH_FAILURES", "false")),
        user_agent=_get_optional_env("AUDIT_USER_AGENT", DEFAULT_USER_AGENT),
        cors_allow_origins=_parse_list(_get_optional_env("CORS_ALLOW_ORIGINS", "*")),
    )


# Singleton config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the configuration singleton."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset config singleton (useful for testing)."""
    global _config
    _config = None
