"""Default values shared by config, fetcher, and storage."""

from __future__ import annotations


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 6.3; WOW64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/47.0.2526.106 Safari/537.36"
)
DEFAULT_HTTP_HEADERS: dict[str, str] = {"User-Agent": DEFAULT_USER_AGENT}

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_DELAY_MS = 1000
DEFAULT_INCLUDE_HIDDEN_LINKS = False
DEFAULT_VALID_SCHEMES: tuple[str, ...] = ("http", "https")
DEFAULT_SCOPE_TO_DOMAIN = False
DEFAULT_STORAGE_FOLDER = "./storage"
DEFAULT_VERIFY_TLS = True
DEFAULT_CRAWLER_ID = 0

DEFAULT_CONTENT_MIME = "text/html"
DEFAULT_HTTP_PROTO = "HTTP/1.1"

# Statuses in [300, 308) get their Location header added to the page links.
REDIRECT_STATUS_MIN = 300
REDIRECT_STATUS_MAX = 308

PAGE_INFO_SUFFIX = ".httpi"
RESPONSE_BODY_SUFFIX = ".respbin"

JSON_INDENT = 2
SUPPORTED_CONFIG_SUFFIXES = (".json", ".yaml", ".yml")
