from __future__ import annotations

import pytest

from pubrecon.domain.reconciliation import normalize_domain, normalize_email

DOMAIN_CASES = [
    ("https://www.Example.com/", "example.com"),
    ("http://blog.example.com", "blog.example.com"),
    ("  WWW.example.com  ", "example.com"),
    ("example.com/", "example.com"),
    ("example.com/path", "example.com/path"),
    ("", ""),
]


@pytest.mark.parametrize(("raw", "expected"), DOMAIN_CASES)
def test_normalize_domain(raw: str, expected: str) -> None:
    assert normalize_domain(raw) == expected


@pytest.mark.parametrize("raw", [None, 42, ["example.com"]])
def test_normalize_domain_degrades_non_strings(raw: object) -> None:
    assert normalize_domain(raw) == ""


@pytest.mark.parametrize("raw", [raw for raw, _ in DOMAIN_CASES])
def test_normalize_domain_is_idempotent(raw: str) -> None:
    once = normalize_domain(raw)
    assert normalize_domain(once) == once


def test_normalize_email_trims_and_lowercases() -> None:
    assert normalize_email("  Jane@Foo.COM ") == "jane@foo.com"
    assert normalize_email(None) == ""
