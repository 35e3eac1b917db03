"""Tests for URL resolution and registrable-domain scoping."""

from __future__ import annotations

import pytest

from linkcrawl.crawler.url import (
    filter_same_domain,
    has_valid_scheme,
    host_of,
    is_same_domain,
    registrable_domain,
    resolve_url,
)


# ---------------------------------------------------------------------------
# resolve_url
# ---------------------------------------------------------------------------

def test_resolve_relative_path():
    assert resolve_url("http://ex.com/dir/page", "other") == "http://ex.com/dir/other"
    assert resolve_url("http://ex.com/dir/page", "/new") == "http://ex.com/new"


def test_resolve_keeps_absolute_and_fragment():
    assert resolve_url("http://ex.com/", "https://other.org/a#top") == "https://other.org/a#top"


def test_resolve_strips_surrounding_whitespace():
    assert resolve_url("http://ex.com/a/", "  b.html\n") == "http://ex.com/a/b.html"


def test_resolve_does_not_normalize():
    assert resolve_url("http://ex.com/", "/x/") == "http://ex.com/x/"
    assert resolve_url("http://ex.com/", "/x?b=2&a=1") == "http://ex.com/x?b=2&a=1"


def test_resolve_unparsable_reference_returns_none():
    assert resolve_url("http://ex.com/", "http://[::1/broken") is None
    assert resolve_url("http://ex.com/", None) is None


# ---------------------------------------------------------------------------
# Domains
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    ("host", "expected"),
    [
        ("a.example.com", "example.com"),
        ("example.com", "example.com"),
        ("deep.sub.example.co.uk", "co.uk"),
        ("localhost", "localhost"),
        ("", ""),
    ],
)
def test_registrable_domain(host, expected):
    assert registrable_domain(host) == expected


def test_host_of_strips_userinfo_and_port_keeps_case():
    assert host_of("http://user:pw@Sub.Example.com:8080/x") == "Sub.Example.com"


def test_same_domain_is_case_sensitive():
    assert is_same_domain("http://a.example.com/", "https://b.example.com/z")
    assert not is_same_domain("http://a.example.com/", "http://a.EXAMPLE.com/")


def test_filter_same_domain_matches_seed_domain():
    links = [
        "http://a.example.com/y",
        "http://b.other.com/z",
        "http://sub.example.com/w",
        "http://[::1/broken",
    ]
    assert filter_same_domain(links, "http://a.example.com/x") == [
        "http://a.example.com/y",
        "http://sub.example.com/w",
    ]


def test_has_valid_scheme():
    assert has_valid_scheme("https://ex.com/")
    assert has_valid_scheme("HTTP://ex.com/")
    assert not has_valid_scheme("mailto:me@ex.com")
    assert not has_valid_scheme("ftp://ex.com/file", ["http", "https"])
    assert has_valid_scheme("ftp://ex.com/file", ["ftp"])
