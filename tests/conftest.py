"""Shared fixtures: canned HTTP responses and an in-memory fetcher."""

from __future__ import annotations

import time
from typing import Iterable

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from linkcrawl.crawler import (
    CrawlConfig,
    FetchError,
    Page,
    PageResponse,
    ResponseInfo,
    url_uid,
)


def make_response(
    url: str,
    *,
    status: int = 200,
    body: bytes = b"",
    headers: dict[str, str] | None = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.headers = CaseInsensitiveDict(headers or {})
    response.url = url
    response.encoding = "utf-8"
    return response


class FakeFetcher:
    """Serves pages from a url -> links mapping; listed urls fail in transport.

    More than `max_calls` fetches raise `RuntimeError`, so a crawl that keeps
    refetching fails fast instead of hanging.
    """

    def __init__(
        self,
        site: dict[str, list[str]],
        *,
        failing: Iterable[str] = (),
        max_calls: int = 50,
    ) -> None:
        self.site = site
        self.failing = set(failing)
        self.max_calls = max_calls
        self.calls: list[str] = []

    def fetch(self, url: str, method: str = "GET") -> Page:
        self.calls.append(url)
        if len(self.calls) > self.max_calls:
            raise RuntimeError(f"fetched too often: {self.calls[:10]}")
        if url in self.failing:
            page = Page(url=url, uid=url_uid(url), crawl_time=int(time.time()), error="boom")
            raise FetchError("boom", page)
        return Page(
            url=url,
            uid=url_uid(url),
            crawl_time=int(time.time()),
            response=PageResponse(status_code=200, content_mime="text/html"),
            resp_info=ResponseInfo(hrefs=list(self.site.get(url, []))),
            response_body=b"<html></html>",
        )

    def close(self) -> None:
        pass


@pytest.fixture()
def storage_dir(tmp_path):
    return tmp_path / "pages"


@pytest.fixture()
def config(storage_dir) -> CrawlConfig:
    return CrawlConfig(delay_ms=0, storage_folder=str(storage_dir))
