"""Core record types for fetched pages and crawl statistics.

This module is intentionally dependency-light so other crawler modules can import
shared records without introducing cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONDict = dict[str, JSONValue]


def utc_now_iso() -> str:
    """Return an RFC3339-like UTC timestamp string for summaries."""

    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _str_dict(value: Any) -> dict[str, str]:
    return {str(k): str(v) for k, v in dict(value or {}).items()}


@dataclass(frozen=True, slots=True)
class Cookie:
    name: str = ""
    value: str = ""
    domain: str = ""
    httponly: bool = False

    def to_json(self) -> JSONDict:
        return {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "httponly": self.httponly,
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "Cookie":
        return cls(
            name=str(payload.get("name", "")),
            value=str(payload.get("value", "")),
            domain=str(payload.get("domain", "")),
            httponly=bool(payload.get("httponly", False)),
        )


@dataclass(frozen=True, slots=True)
class FormInput:
    name: str = ""
    type: str = ""
    value: str = ""

    def to_json(self) -> JSONDict:
        return {"name": self.name, "type": self.type, "value": self.value}

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "FormInput":
        return cls(
            name=str(payload.get("name", "")),
            type=str(payload.get("type", "")),
            value=str(payload.get("value", "")),
        )


@dataclass(frozen=True, slots=True)
class Form:
    """One `<form>` found on a page, with its action resolved to an absolute URL."""

    url: str = ""
    method: str = ""
    inputs: list[FormInput] = field(default_factory=list)

    def to_json(self) -> JSONDict:
        return {
            "url": self.url,
            "method": self.method,
            "inputs": [item.to_json() for item in self.inputs],
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "Form":
        return cls(
            url=str(payload.get("url", "")),
            method=str(payload.get("method", "")),
            inputs=[FormInput.from_json(item) for item in payload.get("inputs") or []],
        )


@dataclass(frozen=True, slots=True)
class Resource:
    """A non-hyperlink reference (stylesheet, image, script) discovered in markup.

    `tag` is one of `link`, `img`, `script`, `style`.
    """

    url: str = ""
    type: str = ""
    rel: str = ""
    tag: str = ""

    def to_json(self) -> JSONDict:
        return {"url": self.url, "type": self.type, "rel": self.rel, "tag": self.tag}

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "Resource":
        return cls(
            url=str(payload.get("url", "")),
            type=str(payload.get("type", "")),
            rel=str(payload.get("rel", "")),
            tag=str(payload.get("tag", "")),
        )


@dataclass(frozen=True, slots=True)
class JSInfo:
    source: str = ""
    value: str = ""

    def to_json(self) -> JSONDict:
        return {"source": self.source, "value": self.value}

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "JSInfo":
        return cls(source=str(payload.get("source", "")), value=str(payload.get("value", "")))


@dataclass(slots=True)
class ResponseInfo:
    """Everything mined from a response body.

    `js_info` and `requests` are reserved; the extractor leaves them empty.
    """

    hrefs: list[str] = field(default_factory=list)
    forms: list[Form] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)
    js_info: list[JSInfo] = field(default_factory=list)
    requests: list[Resource] = field(default_factory=list)

    def to_json(self) -> JSONDict:
        return {
            "hrefs": list(self.hrefs),
            "forms": [item.to_json() for item in self.forms],
            "resources": [item.to_json() for item in self.resources],
            "js_info": [item.to_json() for item in self.js_info],
            "requests": [item.to_json() for item in self.requests],
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ResponseInfo":
        return cls(
            hrefs=[str(item) for item in payload.get("hrefs") or []],
            forms=[Form.from_json(item) for item in payload.get("forms") or []],
            resources=[Resource.from_json(item) for item in payload.get("resources") or []],
            js_info=[JSInfo.from_json(item) for item in payload.get("js_info") or []],
            requests=[Resource.from_json(item) for item in payload.get("requests") or []],
        )


@dataclass(slots=True)
class PageRequest:
    headers: dict[str, str] = field(default_factory=dict)
    proto: str = ""
    content_length: int = 0
    cookies: list[Cookie] = field(default_factory=list)

    def to_json(self) -> JSONDict:
        return {
            "headers": dict(self.headers),
            "proto": self.proto,
            "content_length": self.content_length,
            "cookies": [item.to_json() for item in self.cookies],
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "PageRequest":
        return cls(
            headers=_str_dict(payload.get("headers")),
            proto=str(payload.get("proto", "")),
            content_length=int(payload.get("content_length", 0)),
            cookies=[Cookie.from_json(item) for item in payload.get("cookies") or []],
        )


@dataclass(slots=True)
class PageResponse:
    headers: dict[str, str] = field(default_factory=dict)
    proto: str = ""
    status_code: int = 0
    content_length: int = 0
    content_mime: str = ""
    cookies: list[Cookie] = field(default_factory=list)

    def to_json(self) -> JSONDict:
        return {
            "headers": dict(self.headers),
            "proto": self.proto,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "content_mime": self.content_mime,
            "cookies": [item.to_json() for item in self.cookies],
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "PageResponse":
        return cls(
            headers=_str_dict(payload.get("headers")),
            proto=str(payload.get("proto", "")),
            status_code=int(payload.get("status_code", 0)),
            content_length=int(payload.get("content_length", 0)),
            content_mime=str(payload.get("content_mime", "")),
            cookies=[Cookie.from_json(item) for item in payload.get("cookies") or []],
        )


@dataclass(slots=True)
class Page:
    """Result of one fetch attempt.

    Raw bodies are kept in memory only; `to_json` leaves them out so the structured
    record and the response bytes can be stored separately.
    """

    url: str = ""
    crawl_time: int = 0
    resp_duration: int = 0
    crawler_id: int = 0
    uid: str = ""
    error: str = ""
    request: PageRequest = field(default_factory=PageRequest)
    response: PageResponse = field(default_factory=PageResponse)
    resp_info: ResponseInfo = field(default_factory=ResponseInfo)
    response_body: bytes = b""
    request_body: bytes = b""

    def to_json(self) -> JSONDict:
        return {
            "url": self.url,
            "crawl_time": self.crawl_time,
            "resp_duration": self.resp_duration,
            "crawler_id": self.crawler_id,
            "uid": self.uid,
            "error": self.error,
            "request": self.request.to_json(),
            "response": self.response.to_json(),
            "resp_info": self.resp_info.to_json(),
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "Page":
        if not isinstance(payload, Mapping):
            raise TypeError(f"Page record must be a mapping, got {type(payload).__name__}")
        return cls(
            url=str(payload.get("url", "")),
            crawl_time=int(payload.get("crawl_time", 0)),
            resp_duration=int(payload.get("resp_duration", 0)),
            crawler_id=int(payload.get("crawler_id", 0)),
            uid=str(payload.get("uid", "")),
            error=str(payload.get("error", "")),
            request=PageRequest.from_json(payload.get("request") or {}),
            response=PageResponse.from_json(payload.get("response") or {}),
            resp_info=ResponseInfo.from_json(payload.get("resp_info") or {}),
        )


@dataclass(slots=True)
class CrawlStats:
    """Simple mutable counters used for crawl summary reporting."""

    pages_crawled: int = 0
    fetch_errors: int = 0
    skipped_scheme: int = 0
    skipped_invalid_url: int = 0
    hook_errors: int = 0
    links_offered: int = 0
    pages_resumed: int = 0

    started_at: str = field(default_factory=utc_now_iso)
    finished_at: str | None = None

    def finish(self) -> None:
        self.finished_at = utc_now_iso()

    def to_json(self) -> JSONDict:
        return {
            "pages_crawled": self.pages_crawled,
            "fetch_errors": self.fetch_errors,
            "skipped_scheme": self.skipped_scheme,
            "skipped_invalid_url": self.skipped_invalid_url,
            "hook_errors": self.hook_errors,
            "links_offered": self.links_offered,
            "pages_resumed": self.pages_resumed,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }


__all__ = [
    "Cookie",
    "CrawlStats",
    "Form",
    "FormInput",
    "JSInfo",
    "JSONDict",
    "JSONPrimitive",
    "JSONValue",
    "Page",
    "PageRequest",
    "PageResponse",
    "Resource",
    "ResponseInfo",
    "utc_now_iso",
]
