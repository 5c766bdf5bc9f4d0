"""High-level orchestration: static fetch first, browser render as fallback."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import requests

from .config import ExtractionConfig
from .errors import FetchError, InvalidURLError
from .fetcher import fetch_rendered, fetch_static
from .models import SiteMetadata
from .resolver import resolve

logger = logging.getLogger("sitemeta")

SUPPORTED_SCHEMES = ("http", "https")


def validate_url(url: Optional[str]) -> str:
    """Return the normalized form of ``url`` or raise :class:`InvalidURLError`."""
    if not url or not isinstance(url, str) or not url.strip():
        raise InvalidURLError("website URL cannot be empty")
    try:
        parts = urlsplit(url.strip())
        # Touching .port validates it.
        parts.port
    except ValueError as exc:
        raise InvalidURLError(f"invalid URL: {exc}") from exc
    if parts.scheme not in SUPPORTED_SCHEMES or not parts.hostname:
        raise InvalidURLError(f"invalid URL: {url!r} is not an absolute http(s) URL")
    return urlunsplit(parts)


class SiteMetaClient:
    """Fetches link-preview metadata. Safe to share between threads."""

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self._owns_session = session is None
        self.session = session or requests.Session()

    def __enter__(self) -> "SiteMetaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def extract_static(self, url: str) -> SiteMetadata:
        document = fetch_static(url, self.config, session=self.session)
        return resolve(document, url, strict=self.config.strict_meta_match)

    def extract_rendered(self, url: str) -> SiteMetadata:
        document = fetch_rendered(url, self.config)
        return resolve(document, url, strict=self.config.strict_meta_match)

    def get_site_meta(self, url: str) -> SiteMetadata:
        """Return metadata for ``url``.

        Static-fetch errors propagate. When the static pass finds no
        description the page is rendered in a browser; a successful render
        replaces the static result entirely, a failed one is logged and the
        static result is returned.
        """
        normalized = validate_url(url)
        meta = self.extract_static(normalized)
        if meta.description:
            return meta

        logger.info("No description found for %s; falling back to browser rendering", normalized)
        try:
            return self.extract_rendered(normalized)
        except FetchError as exc:
            logger.warning("Browser extraction failed for %s: %s; returning HTTP result", normalized, exc)
            return meta


def get_site_meta(url: str, config: Optional[ExtractionConfig] = None) -> SiteMetadata:
    """Fetch metadata for ``url`` with a one-off client."""
    with SiteMetaClient(config) as client:
        return client.get_site_meta(url)
