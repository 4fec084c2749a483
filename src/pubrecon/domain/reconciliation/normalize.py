"""Identity normalization for registry lookups.

Every lookup and insert goes through these helpers so that preview and approval
compare the same keys.
"""

from __future__ import annotations

import re

_SCHEME = re.compile(r"^https?://")
_WWW = re.compile(r"^www\.")


def normalize_domain(value: object) -> str:
    """Reduce a URL-ish website reference to its bare lowercase host form.

    ``"https://www.Example.com/"`` becomes ``"example.com"``. Never raises; input
    that is not a string degrades to ``""``.
    """

    if not isinstance(value, str):
        return ""
    domain = value.strip().lower()
    domain = _SCHEME.sub("", domain)
    domain = _WWW.sub("", domain)
    domain = domain.removesuffix("/")
    return domain.strip()


def normalize_email(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def email_local_part(email: str) -> str:
    return email.split("@", 1)[0]
