"""Pricing evidence: the excerpt of the source message a price was read from."""

from __future__ import annotations

import logging
import re
from typing import Final

log = logging.getLogger(__name__)

CONTEXT_CHARS: Final[int] = 100
MAX_SNIPPET_CHARS: Final[int] = 500


def render_price(price: float) -> str:
    """Render a display price the way it was written (``150``, ``150.5``)."""

    value = float(price)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _patterns(price: float) -> tuple[re.Pattern[str], ...]:
    literal = re.escape(render_price(price))
    return (
        re.compile(rf"[\s\S]{{0,{CONTEXT_CHARS}}}\${literal}", re.IGNORECASE),
        re.compile(rf"\${literal}[\s\S]{{0,{CONTEXT_CHARS}}}", re.IGNORECASE),
        re.compile(rf"{literal}[\s\S]{{0,{CONTEXT_CHARS}}}", re.IGNORECASE),
    )


def extract_pricing_snippet(
    content: str | None,
    price: float | None,
    *,
    pricing_source: str | None = None,
) -> str | None:
    """Return the text a price was most likely quoted from.

    An explicit ``pricing_source`` quote from the extraction wins. Otherwise the
    message ``content`` is searched for the price with some surrounding context;
    the first hit is truncated to 500 characters. ``None`` when nothing matches.
    """

    if pricing_source:
        return pricing_source
    if not content or not price:
        return None

    for pattern in _patterns(price):
        match = pattern.search(content)
        if match is not None:
            return match.group(0)[:MAX_SNIPPET_CHARS]

    log.debug("No pricing evidence found for price %s", render_price(price))
    return None
