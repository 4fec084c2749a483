"""Classify an incoming offering against the one already on record."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Final, Protocol

PRICE_CONFLICT_PERCENT_THRESHOLD: Final[int] = 10
PRICE_CONFLICT_ABSOLUTE_THRESHOLD: Final[int] = 5000


class PricedOffering(Protocol):
    @property
    def base_price(self) -> int | None: ...


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""

    return math.floor(value + 0.5)


def to_minor_units(price: float) -> int:
    """Convert a display-currency price (dollars) into minor units (cents)."""

    return round_half_up(price * 100)


class OfferingDecisionKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"
    PRICE_CONFLICT = "price_conflict"


@dataclass(frozen=True, slots=True)
class PriceDelta:
    existing_price: int
    new_price: int
    price_difference: int
    percentage_change: int

    @property
    def is_significant(self) -> bool:
        return (
            abs(self.percentage_change) > PRICE_CONFLICT_PERCENT_THRESHOLD
            or abs(self.price_difference) > PRICE_CONFLICT_ABSOLUTE_THRESHOLD
        )

    def describe(self) -> str:
        sign = "+" if self.percentage_change > 0 else ""
        return (
            f"${self.existing_price / 100:.2f} → ${self.new_price / 100:.2f} "
            f"({sign}{self.percentage_change}%)"
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "existingPrice": self.existing_price,
            "newPrice": self.new_price,
            "priceDifference": self.price_difference,
            "percentageChange": self.percentage_change,
        }


def price_delta(existing_price: int, new_price: int) -> PriceDelta:
    difference = new_price - existing_price
    return PriceDelta(
        existing_price=existing_price,
        new_price=new_price,
        price_difference=difference,
        percentage_change=round_half_up(difference / existing_price * 100),
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class OfferingDecision:
    kind: OfferingDecisionKind
    new_price: int | None = None
    existing_price: int | None = None
    delta: PriceDelta | None = None


def classify_offering(
    incoming_price: float | None, existing: PricedOffering | None
) -> OfferingDecision:
    """Decide what approving an offering would do.

    ``incoming_price`` is in display units. A zero or missing price against a
    matched offering never changes it.
    """

    new_price = to_minor_units(incoming_price) if incoming_price else None
    if existing is None:
        return OfferingDecision(kind=OfferingDecisionKind.CREATE, new_price=new_price)

    existing_price = existing.base_price
    if not new_price or new_price == existing_price:
        return OfferingDecision(
            kind=OfferingDecisionKind.SKIP, new_price=new_price, existing_price=existing_price
        )
    if existing_price:
        delta = price_delta(existing_price, new_price)
        kind = (
            OfferingDecisionKind.PRICE_CONFLICT
            if delta.is_significant
            else OfferingDecisionKind.UPDATE
        )
        return OfferingDecision(
            kind=kind, new_price=new_price, existing_price=existing_price, delta=delta
        )
    return OfferingDecision(
        kind=OfferingDecisionKind.UPDATE, new_price=new_price, existing_price=existing_price
    )
