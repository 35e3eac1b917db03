"""Tests for page fetching and assembly.

``requests.Session.send`` is replaced per test with a function returning canned
``requests.Response`` objects, so no network access happens.
"""

from __future__ import annotations

from hashlib import sha1

import pytest
import requests

from conftest import make_response
from linkcrawl.crawler import CrawlConfig, FetchError, Fetcher, content_mime


def _fetcher(monkeypatch, handler, **config_kwargs) -> tuple[Fetcher, list[dict]]:
    sent: list[dict] = []
    session = requests.Session()

    def fake_send(request, **kwargs):
        sent.append({"request": request, **kwargs})
        return handler(request)

    monkeypatch.setattr(session, "send", fake_send)
    config = CrawlConfig(delay_ms=0, storage_folder="", **config_kwargs)
    return Fetcher(config, session=session), sent


# ---------------------------------------------------------------------------
# Successful fetches
# ---------------------------------------------------------------------------

def test_fetch_assembles_page(monkeypatch):
    body = b'<html><body><a href="/next">n</a><form action="/s"></form></body></html>'
    fetcher, sent = _fetcher(
        monkeypatch,
        lambda request: make_response(
            request.url,
            body=body,
            headers={"Content-Type": "text/html; charset=utf-8", "Server": "test"},
        ),
    )

    page = fetcher.fetch("http://ex.com/start")

    assert page.error == ""
    assert page.url == "http://ex.com/start"
    assert page.uid == sha1(b"http://ex.com/start").hexdigest()
    assert len(page.uid) == 40
    assert page.crawl_time > 0
    assert page.resp_duration >= 0
    assert page.response.status_code == 200
    assert page.response.content_mime == "text/html"
    assert page.response.content_length == len(body)
    assert page.response.headers["Server"] == "test"
    assert page.response.proto == "HTTP/1.1"
    assert page.response_body == body
    assert page.request_body == b""
    assert page.resp_info.hrefs == ["http://ex.com/next"]
    assert page.resp_info.forms[0].url == "http://ex.com/s"

    assert sent[0]["allow_redirects"] is False
    assert sent[0]["timeout"] == fetcher.config.timeout_seconds
    assert sent[0]["request"].method == "GET"


def test_fetch_sends_configured_headers(monkeypatch):
    fetcher, sent = _fetcher(
        monkeypatch,
        lambda request: make_response(request.url),
        headers={"X-Trace": ["first", "second"], "Cookie": "a=1; b=2"},
    )

    page = fetcher.fetch("http://ex.com/")

    assert sent[0]["request"].headers["X-Trace"] == "first"
    assert page.request.headers["X-Trace"] == "first"
    assert [(c.name, c.value) for c in page.request.cookies] == [("a", "1"), ("b", "2")]
    assert page.request.proto == "HTTP/1.1"
    assert page.request.content_length == 0


def test_redirect_location_becomes_link(monkeypatch):
    fetcher, _ = _fetcher(
        monkeypatch,
        lambda request: make_response(request.url, status=302, headers={"Location": "/new"}),
    )

    page = fetcher.fetch("http://ex.com/old")

    assert page.error == ""
    assert page.response.status_code == 302
    assert page.resp_info.hrefs == ["http://ex.com/new"]


def test_redirect_location_not_duplicated(monkeypatch):
    fetcher, _ = _fetcher(
        monkeypatch,
        lambda request: make_response(
            request.url,
            status=301,
            body=b'<a href="/new">moved</a>',
            headers={"Location": "http://ex.com/new"},
        ),
    )

    assert fetcher.fetch("http://ex.com/old").resp_info.hrefs == ["http://ex.com/new"]


def test_status_308_location_is_ignored(monkeypatch):
    fetcher, _ = _fetcher(
        monkeypatch,
        lambda request: make_response(request.url, status=308, headers={"Location": "/new"}),
    )

    assert fetcher.fetch("http://ex.com/old").resp_info.hrefs == []


def test_missing_content_type_defaults_to_html(monkeypatch):
    fetcher, _ = _fetcher(monkeypatch, lambda request: make_response(request.url, body=b"{}"))
    assert fetcher.fetch("http://ex.com/").response.content_mime == "text/html"


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("application/json; charset=utf-8", "application/json"),
        ("image/png", "image/png"),
        ("", "text/html"),
    ],
)
def test_content_mime(header, expected):
    assert content_mime({"Content-Type": header}) == expected


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"Content-Length": "999"}, 999),
        ({}, 3),
        ({"Content-Length": "n/a"}, 3),
    ],
)
def test_response_content_length_follows_header(monkeypatch, headers, expected):
    fetcher, _ = _fetcher(
        monkeypatch,
        lambda request: make_response(request.url, body=b"abc", headers=headers),
    )

    assert fetcher.fetch("http://ex.com/").response.content_length == expected


# ---------------------------------------------------------------------------
# Transport failures
# ---------------------------------------------------------------------------

def test_transport_error_raises_with_partial_page(monkeypatch):
    def handler(request):
        raise requests.ConnectionError("connection refused")

    fetcher, _ = _fetcher(monkeypatch, handler, crawler_id=7)

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("http://ex.com/down")

    page = excinfo.value.page
    assert page.error == "connection refused"
    assert str(excinfo.value) == "connection refused"
    assert page.url == "http://ex.com/down"
    assert page.uid == sha1(b"http://ex.com/down").hexdigest()
    assert page.crawler_id == 7
    assert "User-Agent" in page.request.headers
    assert page.response.status_code == 0
    assert page.resp_info.hrefs == []
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_unpreparable_url_raises_fetch_error(monkeypatch):
    fetcher, sent = _fetcher(monkeypatch, lambda request: make_response(request.url))

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("not a url")

    assert sent == []
    assert excinfo.value.page.error
    assert excinfo.value.page.request.proto == "HTTP/1.1"
