"""Tests for URL validation ahead of fetching."""

from __future__ import annotations

import pytest

from webmarkdown.errors import InvalidUrlError, MissingUrlError
from webmarkdown.validation import validate_url


@pytest.mark.parametrize("value", [None, ""])
def test_missing_url(value):
    with pytest.raises(MissingUrlError):
        validate_url(value)


@pytest.mark.parametrize(
    "value",
    [
        "not a url",
        "   ",
        "example.com/page",
        "/relative/path",
        "http://",
        "https://exa mple.com/",
        "https://example.com:99999/",
        "http://[::1/",
    ],
)
def test_invalid_url(value):
    with pytest.raises(InvalidUrlError):
        validate_url(value)


def test_https_url_origin_omits_default_port():
    url = validate_url("https://Example.com/articles/1?ref=home#top")

    assert url.href == "https://Example.com/articles/1?ref=home#top"
    assert url.origin == "https://example.com"


def test_origin_keeps_explicit_port():
    assert validate_url("http://localhost:8080/a").origin == "http://localhost:8080"
    assert validate_url("http://localhost:80/a").origin == "http://localhost"


def test_ipv6_origin_is_bracketed():
    assert validate_url("http://[::1]:3000/").origin == "http://[::1]:3000"


def test_surrounding_whitespace_is_trimmed():
    assert validate_url("  https://example.com/x \n").href == "https://example.com/x"


@pytest.mark.parametrize("value", ["file:///etc/hosts", "mailto:someone@example.com", "data:text/html,hi"])
def test_non_http_schemes_are_accepted(value):
    url = validate_url(value)

    assert url.href == value
    assert url.origin == "null"


@pytest.mark.parametrize(
    "value, href",
    [
        ("http:example.com", "http://example.com"),
        ("https:/example.com/a?b=1", "https://example.com/a?b=1"),
        ("HTTPS:///example.com:8443/", "https://example.com:8443/"),
    ],
)
def test_special_scheme_without_slashes_gains_authority(value, href):
    url = validate_url(value)

    assert url.href == href
    assert url.host == "example.com"
    assert url.origin.startswith(url.scheme + "://example.com")


@pytest.mark.parametrize("value", ["http:", "https:/", "ws:///"])
def test_special_scheme_without_host_stays_invalid(value):
    with pytest.raises(InvalidUrlError):
        validate_url(value)
