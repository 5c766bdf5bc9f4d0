"""Page retrieval: plain HTTP fetch and headless-browser render."""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Type, Union

import requests
import urllib3
from bs4 import BeautifulSoup, ParserRejectedMarkup
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .config import ExtractionConfig
from .errors import FetchError, HTTPStatusError, NetworkError, ParseError, RenderError

logger = logging.getLogger("sitemeta")

READY_SELECTOR = "body"
CAPTURE_SELECTOR = "html"
CHUNK_SIZE = 64 * 1024


def parse_html(markup: Union[bytes, str]) -> BeautifulSoup:
    """Parse raw bytes or a rendered markup string into a navigable tree.

    html5lib applies the HTML5 tree-construction rules: a ``head`` element
    always exists, and leading ``<title>``/``<meta>`` tags land inside it even
    when the markup omits ``<html>`` and ``<head>``.
    """
    try:
        return BeautifulSoup(markup, "html5lib", multi_valued_attributes=None)
    except ParserRejectedMarkup as exc:
        raise ParseError(f"failed to parse HTML: {exc}") from exc


class _Deadline:
    """Time budget shared by the steps of one fetch stage."""

    def __init__(self, seconds: float, error: Type[FetchError], url: str) -> None:
        self._expires = time.monotonic() + seconds
        self._error = error
        self._url = url

    def remaining(self) -> float:
        remaining = self._expires - time.monotonic()
        if remaining <= 0:
            raise self._error("timeout exceeded", url=self._url)
        return remaining

    def remaining_ms(self) -> float:
        return self.remaining() * 1000


def read_body(resp: requests.Response, deadline: _Deadline) -> bytes:
    """Read the decoded body, checking ``deadline`` after every network read."""
    chunks: List[bytes] = []
    while True:
        # read1 returns as soon as any bytes arrive.
        chunk = resp.raw.read1(CHUNK_SIZE, decode_content=True)
        if not chunk:
            break
        chunks.append(chunk)
        deadline.remaining()
    return b"".join(chunks)


def fetch_static(
    url: str,
    config: ExtractionConfig,
    session: Optional[requests.Session] = None,
) -> BeautifulSoup:
    """GET ``url`` once and parse the response body.

    ``config.http_timeout`` bounds the whole exchange, body included.
    """
    deadline = _Deadline(config.http_timeout, NetworkError, url)
    http = session or requests.Session()
    try:
        logger.info("Fetching %s", url)
        resp = http.get(
            url,
            headers={"User-Agent": config.user_agent},
            timeout=config.http_timeout,
            stream=True,
        )
        try:
            if resp.status_code != 200:
                raise HTTPStatusError(resp.status_code, url=url)
            body = read_body(resp, deadline)
        finally:
            resp.close()
    except (requests.RequestException, urllib3.exceptions.HTTPError) as exc:
        raise NetworkError(f"failed to fetch URL: {exc}", url=url) from exc
    finally:
        if session is None:
            http.close()

    logger.debug("Fetched %s (%d bytes)", url, len(body))
    try:
        return parse_html(body)
    except ParseError as exc:
        exc.url = url
        raise


def render_page(url: str, config: ExtractionConfig) -> str:
    """Render ``url`` in headless Chromium and return the outer HTML of the document."""
    deadline = _Deadline(config.browser_timeout, RenderError, url)
    settle_ms = config.settle_delay * 1000
    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=True, timeout=deadline.remaining_ms())
        try:
            page = browser.new_page()
            logger.info("Rendering %s", url)
            page.goto(url, wait_until="load", timeout=deadline.remaining_ms())
            page.wait_for_selector(READY_SELECTOR, state="attached", timeout=deadline.remaining_ms())
            if settle_ms:
                if settle_ms > deadline.remaining_ms():
                    raise RenderError("browser timeout exceeded during settle delay", url=url)
                page.wait_for_timeout(settle_ms)
            return page.locator(CAPTURE_SELECTOR).evaluate(
                "element => element.outerHTML",
                timeout=deadline.remaining_ms(),
            )
        finally:
            browser.close()


def fetch_rendered(url: str, config: ExtractionConfig) -> BeautifulSoup:
    """Render ``url`` in a fresh browser session and parse the captured markup."""
    try:
        markup = render_page(url, config)
    except PlaywrightError as exc:
        raise RenderError(f"chrome rendering failed: {exc}", url=url) from exc

    logger.debug("Rendered %s (%d chars)", url, len(markup))
    try:
        return parse_html(markup)
    except ParseError as exc:
        exc.url = url
        raise
