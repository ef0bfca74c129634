# -*- coding: utf-8 -*-

import pytest

from py_gql_starlette._utils import (
    accepted_media_types,
    parse_bytes,
    prefers_html,
)


@pytest.mark.parametrize(
    "header, expected",
    [
        ("", []),
        ("text/html", ["text/html"]),
        (
            "application/json, text/html",
            ["application/json", "text/html"],
        ),
        (
            "application/json;q=0.9, text/html",
            ["text/html", "application/json"],
        ),
        ("text/html;q=0, application/json", ["application/json"]),
        ("TEXT/HTML; charset=utf-8", ["text/html"]),
        ("text/html;q=foo, */*", ["*/*"]),
    ],
)
def test_accepted_media_types(header, expected):
    assert accepted_media_types(header) == expected


@pytest.mark.parametrize(
    "header, expected",
    [
        ("text/html", True),
        (
            "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            True,
        ),
        ("application/json", False),
        ("application/json, text/html", False),
        ("text/html, application/json", True),
        ("application/json;q=0.5, text/html", True),
        ("text/html;q=0.5, application/json", False),
        # Wildcards never count as a preference for HTML.
        ("*/*", False),
        ("text/*", False),
        ("", False),
        ("image/png", False),
    ],
)
def test_prefers_html(header, expected):
    assert prefers_html(header) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (10, 10),
        ("10", 10),
        ("10b", 10),
        ("56kb", 56 * 1024),
        ("1mb", 1024 * 1024),
        ("1.5 MB", int(1.5 * 1024 * 1024)),
        ("2gb", 2 * 1024 ** 3),
    ],
)
def test_parse_bytes(value, expected):
    assert parse_bytes(value) == expected


def test_parse_bytes_rejects_garbage():
    with pytest.raises(ValueError):
        parse_bytes("lots")
