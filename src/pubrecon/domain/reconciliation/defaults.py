"""Values filled in when an extraction leaves a field unspecified."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RegistryDefaults:
    currency: str = "USD"
    payment_method: str = "paypal"
    publisher_source: str = "manyreach"
    confidence_score: float = 0.8
