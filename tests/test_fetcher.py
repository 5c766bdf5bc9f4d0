import time
from unittest import mock

import pytest
import requests
import urllib3
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from sitemeta import fetcher
from sitemeta.config import ExtractionConfig
from sitemeta.errors import HTTPStatusError, NetworkError, RenderError

URL = "https://example.com/page"
PAGE = b"<html><head><title>Hi</title></head><body></body></html>"


def _session(status_code=200, chunks=(PAGE,)):
    resp = mock.Mock(status_code=status_code)
    resp.raw.read1.side_effect = list(chunks) + [b""]
    session = mock.Mock(spec=requests.Session)
    session.get.return_value = resp
    return session


@pytest.fixture
def fake_browser(monkeypatch):
    page = mock.MagicMock()
    page.locator.return_value.evaluate.return_value = (
        "<html><head><title>Rendered</title></head><body></body></html>"
    )
    browser = mock.MagicMock()
    browser.new_page.return_value = page
    playwright = mock.MagicMock()
    playwright.chromium.launch.return_value = browser
    manager = mock.MagicMock()
    manager.__enter__.return_value = playwright
    monkeypatch.setattr(fetcher, "sync_playwright", lambda: manager)
    return browser, page


def test_fetch_static_sends_user_agent_and_timeout():
    session = _session()
    config = ExtractionConfig(http_timeout=3.5, user_agent="TestBot/1.0")

    document = fetcher.fetch_static(URL, config, session=session)

    session.get.assert_called_once_with(
        URL, headers={"User-Agent": "TestBot/1.0"}, timeout=3.5, stream=True
    )
    assert document.title.string == "Hi"


def test_fetch_static_rejects_non_200_status():
    session = _session(status_code=404)

    with pytest.raises(HTTPStatusError) as excinfo:
        fetcher.fetch_static(URL, ExtractionConfig(), session=session)

    assert excinfo.value.status_code == 404
    assert excinfo.value.url == URL


def test_fetch_static_treats_other_success_codes_as_errors():
    session = _session(status_code=204, chunks=())

    with pytest.raises(HTTPStatusError):
        fetcher.fetch_static(URL, ExtractionConfig(), session=session)


def test_fetch_static_wraps_transport_errors():
    session = _session()
    session.get.side_effect = requests.Timeout("read timed out")

    with pytest.raises(NetworkError) as excinfo:
        fetcher.fetch_static(URL, ExtractionConfig(), session=session)

    assert isinstance(excinfo.value.__cause__, requests.Timeout)


def test_fetch_static_without_session_closes_its_own(monkeypatch):
    session = _session()
    monkeypatch.setattr(fetcher.requests, "Session", lambda: session)

    fetcher.fetch_static(URL, ExtractionConfig())

    session.close.assert_called_once()


def test_fetch_static_joins_body_chunks_and_closes_response():
    session = _session(chunks=(b"<title>Sp", b"lit</title>"))

    document = fetcher.fetch_static(URL, ExtractionConfig(), session=session)

    assert document.title.string == "Split"
    session.get.return_value.close.assert_called_once()


def test_fetch_static_stops_slow_body_at_the_deadline():
    session = _session()
    reads = []

    def drip(amount, decode_content=True):
        reads.append(amount)
        time.sleep(0.05)
        return b"x"

    session.get.return_value.raw.read1.side_effect = drip

    started = time.monotonic()
    with pytest.raises(NetworkError) as excinfo:
        fetcher.fetch_static(URL, ExtractionConfig(http_timeout=0.3), session=session)

    assert time.monotonic() - started < 1.0
    assert excinfo.value.url == URL
    assert len(reads) < 20
    session.get.return_value.close.assert_called_once()


def test_fetch_static_wraps_errors_raised_while_reading_body():
    session = _session()
    session.get.return_value.raw.read1.side_effect = urllib3.exceptions.ProtocolError("reset")

    with pytest.raises(NetworkError):
        fetcher.fetch_static(URL, ExtractionConfig(), session=session)


def test_fetch_rendered_runs_steps_in_order(fake_browser):
    browser, page = fake_browser
    config = ExtractionConfig(settle_delay=0.25)

    document = fetcher.fetch_rendered(URL, config)

    assert document.title.string == "Rendered"
    assert page.goto.call_args.args == (URL,)
    assert page.wait_for_selector.call_args.args == ("body",)
    page.wait_for_timeout.assert_called_once_with(250.0)
    page.locator.assert_called_once_with("html")
    browser.close.assert_called_once()


def test_fetch_rendered_skips_sleep_when_settle_delay_is_zero(fake_browser):
    _, page = fake_browser

    fetcher.fetch_rendered(URL, ExtractionConfig(settle_delay=0))

    page.wait_for_timeout.assert_not_called()


def test_fetch_rendered_wraps_playwright_errors(fake_browser):
    browser, page = fake_browser
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 20000ms exceeded")

    with pytest.raises(RenderError) as excinfo:
        fetcher.fetch_rendered(URL, ExtractionConfig())

    assert excinfo.value.url == URL
    browser.close.assert_called_once()


def test_fetch_rendered_fails_when_settle_delay_exceeds_budget(fake_browser):
    browser, page = fake_browser
    config = ExtractionConfig(browser_timeout=0.5, settle_delay=5.0)

    with pytest.raises(RenderError):
        fetcher.fetch_rendered(URL, config)

    page.wait_for_timeout.assert_not_called()
    browser.close.assert_called_once()


def test_fetch_rendered_with_no_budget_never_launches(fake_browser):
    browser, _ = fake_browser

    with pytest.raises(RenderError):
        fetcher.fetch_rendered(URL, ExtractionConfig(browser_timeout=0))

    browser.new_page.assert_not_called()


def test_parse_html_accepts_text_and_bytes():
    assert fetcher.parse_html("<title>a</title>").title.string == "a"
    assert fetcher.parse_html(b"<title>b</title>").title.string == "b"


def test_parse_html_builds_head_when_markup_omits_it():
    document = fetcher.parse_html(b'<!doctype html><title>X</title><meta name="description" content="Y"><p>hi')

    assert document.head is not None
    assert document.head.title.string == "X"
    assert document.head.meta["content"] == "Y"
    assert document.body.p.string == "hi"
