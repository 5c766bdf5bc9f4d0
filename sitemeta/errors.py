"""Exceptions raised by the metadata extraction pipeline."""

from __future__ import annotations

from typing import Optional


class SiteMetaError(Exception):
    """Base class for every error this package raises."""


class InvalidURLError(SiteMetaError, ValueError):
    """The input URL is empty or not an absolute http(s) URL."""


class FetchError(SiteMetaError):
    """Retrieving or parsing a page failed."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class NetworkError(FetchError):
    """Connection failure, timeout or other transport error."""


class HTTPStatusError(FetchError):
    """The server answered with a status other than 200."""

    def __init__(self, status_code: int, url: Optional[str] = None) -> None:
        super().__init__(f"unexpected status code: {status_code}", url=url)
        self.status_code = status_code


class ParseError(FetchError):
    """Markup could not be parsed as HTML."""


class RenderError(FetchError):
    """The headless browser failed to navigate, wait or capture the page."""
