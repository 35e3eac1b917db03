"""Parsers for fetched documents."""

from .html_parser import (
    HTMLExtractor,
    HTMLExtractorConfig,
    is_visible_css,
    page_from_data,
    parse_css_style,
)

__all__ = [
    "HTMLExtractor",
    "HTMLExtractorConfig",
    "is_visible_css",
    "page_from_data",
    "parse_css_style",
]
