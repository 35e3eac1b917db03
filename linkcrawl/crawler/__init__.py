"""Crawler package: config, page records, and crawl pipeline components."""

from .config import CrawlConfig, load_config, save_config
from .errors import CrawlAbortedError, CrawlError, FetchError, ResumeError, StorageError
from .fetcher import Fetcher, content_mime, redirect_location, url_uid
from .frontier import Frontier
from .parsers import (
    HTMLExtractor,
    HTMLExtractorConfig,
    is_visible_css,
    page_from_data,
    parse_css_style,
)
from .pipeline import AfterCrawlHook, BeforeCrawlHook, Crawler
from .storage import Storage
from .types import (
    Cookie,
    CrawlStats,
    Form,
    FormInput,
    JSInfo,
    Page,
    PageRequest,
    PageResponse,
    Resource,
    ResponseInfo,
    utc_now_iso,
)
from .url import (
    filter_same_domain,
    has_valid_scheme,
    host_of,
    is_same_domain,
    registrable_domain,
    resolve_url,
)

__all__ = [
    "AfterCrawlHook",
    "BeforeCrawlHook",
    "Cookie",
    "CrawlAbortedError",
    "CrawlConfig",
    "CrawlError",
    "CrawlStats",
    "Crawler",
    "FetchError",
    "Fetcher",
    "Form",
    "FormInput",
    "Frontier",
    "HTMLExtractor",
    "HTMLExtractorConfig",
    "JSInfo",
    "Page",
    "PageRequest",
    "PageResponse",
    "Resource",
    "ResponseInfo",
    "ResumeError",
    "Storage",
    "StorageError",
    "content_mime",
    "filter_same_domain",
    "has_valid_scheme",
    "host_of",
    "is_same_domain",
    "is_visible_css",
    "load_config",
    "page_from_data",
    "parse_css_style",
    "redirect_location",
    "registrable_domain",
    "resolve_url",
    "save_config",
    "url_uid",
    "utc_now_iso",
]
