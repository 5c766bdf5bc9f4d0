"""Configuration objects and constants for metadata extraction."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("sitemeta")

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_BROWSER_TIMEOUT = 20.0
DEFAULT_SETTLE_DELAY = 1.0

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ExtractionConfig:
    """Settings shared by every request a client issues. Durations are seconds."""

    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    browser_timeout: float = DEFAULT_BROWSER_TIMEOUT
    settle_delay: float = DEFAULT_SETTLE_DELAY
    user_agent: str = DEFAULT_USER_AGENT
    strict_meta_match: bool = False

    @classmethod
    def from_env(cls) -> "ExtractionConfig":
        """Build a config from ``SITEMETA_*`` environment variables."""
        user_agent = os.getenv("SITEMETA_USER_AGENT") or DEFAULT_USER_AGENT
        strict = os.getenv("SITEMETA_STRICT_META", "").strip().lower() in _TRUTHY
        return cls(
            http_timeout=_env_seconds("SITEMETA_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            browser_timeout=_env_seconds("SITEMETA_BROWSER_TIMEOUT", DEFAULT_BROWSER_TIMEOUT),
            settle_delay=_env_seconds("SITEMETA_SETTLE_DELAY", DEFAULT_SETTLE_DELAY),
            user_agent=user_agent,
            strict_meta_match=strict,
        )


def _env_seconds(name: str, default: float) -> float:
    raw: Optional[str] = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("%s is set to %r which is not a number; using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("%s must not be negative (got %s); using %s", name, value, default)
        return default
    return value
