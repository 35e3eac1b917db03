"""HTML mining: hyperlinks, forms, and embedded resources."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from bs4 import BeautifulSoup, Tag

from ..constants import DEFAULT_INCLUDE_HIDDEN_LINKS
from ..types import Form, FormInput, Page, PageRequest, PageResponse, Resource, ResponseInfo
from ..url import resolve_url


LOGGER = logging.getLogger(__name__)

SOURCED_RESOURCE_TAGS = ("img", "script", "style")


@dataclass(slots=True)
class HTMLExtractorConfig:
    """Config for HTML extraction."""

    remove_invisibles: bool = not DEFAULT_INCLUDE_HIDDEN_LINKS
    parser_features: str = "lxml"


def parse_css_style(style: str) -> dict[str, str]:
    """Parse an inline `style` attribute into a declaration mapping.

    Declarations without a colon are dropped; later keys win.
    """

    declarations: dict[str, str] = {}
    for chunk in style.split(";"):
        key, sep, value = chunk.partition(":")
        if not sep:
            continue
        declarations[key.strip()] = value.strip()
    return declarations


def is_visible_css(style: str) -> bool:
    """Return False for `display:none` or `visibility:hidden`."""

    declarations = parse_css_style(style)
    if declarations.get("display") == "none":
        return False
    if declarations.get("visibility") == "hidden":
        return False
    return True


class HTMLExtractor:
    """Run the link, form, and resource passes over one document."""

    def __init__(self, config: HTMLExtractorConfig | None = None) -> None:
        self.config = config or HTMLExtractorConfig()

    def parse(self, html: str | bytes) -> BeautifulSoup:
        # Flat string attributes keep `rel`/`class` verbatim instead of token lists.
        return BeautifulSoup(html, self.config.parser_features, multi_valued_attributes=None)

    def extract(self, html: str | bytes | BeautifulSoup, base_url: str) -> ResponseInfo:
        soup = html if isinstance(html, BeautifulSoup) else self.parse(html)
        return ResponseInfo(
            hrefs=self.extract_hrefs(soup, base_url),
            forms=self.extract_forms(soup, base_url),
            resources=self.extract_resources(soup, base_url),
        )

    def extract_hrefs(self, soup: BeautifulSoup, base_url: str) -> list[str]:
        """Return resolved anchor targets in document order, duplicates removed."""

        out: list[str] = []
        seen: set[str] = set()

        for element in soup.find_all("a"):
            href = element.get("href")
            if href is None:
                continue

            style = element.get("style")
            if self.config.remove_invisibles and style is not None and not is_visible_css(style):
                continue

            resolved = resolve_url(base_url, href)
            if resolved is None:
                LOGGER.debug("Skipping unresolvable href %r on %s", href, base_url)
                continue

            if resolved in seen:
                continue
            seen.add(resolved)
            out.append(resolved)

        return out

    @staticmethod
    def extract_forms(soup: BeautifulSoup, base_url: str) -> list[Form]:
        forms: list[Form] = []
        for element in soup.find_all("form"):
            action = element.get("action")
            url = "" if action is None else (resolve_url(base_url, action) or "")
            inputs = [
                FormInput(
                    name=field.get("name") or "",
                    type=field.get("type") or "",
                    value=field.get("value") or "",
                )
                for field in element.find_all("input")
            ]
            forms.append(Form(url=url, method=element.get("method") or "", inputs=inputs))
        return forms

    @staticmethod
    def extract_resources(soup: BeautifulSoup, base_url: str) -> list[Resource]:
        """Collect `<link>` tags unconditionally and sourced img/script/style tags."""

        resources: list[Resource] = []

        for element in soup.find_all("link"):
            href = element.get("href")
            url = "" if href is None else (resolve_url(base_url, href) or "")
            resources.append(_resource("link", element, url))

        for tag in SOURCED_RESOURCE_TAGS:
            for element in soup.find_all(tag):
                src = element.get("src")
                if src is None:
                    continue
                resources.append(_resource(tag, element, resolve_url(base_url, src) or ""))

        return resources


def _resource(tag: str, element: Tag, url: str) -> Resource:
    return Resource(
        url=url,
        type=element.get("type") or "",
        rel=element.get("rel") or "",
        tag=tag,
    )


def page_from_data(
    data: bytes,
    url: str,
    *,
    include_hidden_links: bool = DEFAULT_INCLUDE_HIDDEN_LINKS,
    extractor: HTMLExtractor | None = None,
) -> Page:
    """Build a page record from raw body bytes without touching the network.

    A markup parse failure is logged and leaves `resp_info` empty.
    """

    if extractor is None:
        extractor = HTMLExtractor(HTMLExtractorConfig(remove_invisibles=not include_hidden_links))

    page = Page(
        url=url,
        request=PageRequest(),
        response=PageResponse(),
        response_body=data,
    )
    try:
        page.resp_info = extractor.extract(data, url)
    except Exception as exc:
        LOGGER.warning("Failed to parse markup for %s: %s: %s", url, exc.__class__.__name__, exc)
    return page


__all__ = [
    "HTMLExtractor",
    "HTMLExtractorConfig",
    "is_visible_css",
    "page_from_data",
    "parse_css_style",
]
