"""Defaults applied when reconciling extracted drafts into the registry."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, optional_float_env_var

DEFAULT_CURRENCY = "USD"
DEFAULT_PAYMENT_METHOD = "paypal"
DEFAULT_PUBLISHER_SOURCE = "manyreach"
DEFAULT_CONFIDENCE_SCORE = 0.8


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    default_currency: str = DEFAULT_CURRENCY
    default_payment_method: str = DEFAULT_PAYMENT_METHOD
    publisher_source: str = DEFAULT_PUBLISHER_SOURCE
    default_confidence: float = DEFAULT_CONFIDENCE_SCORE


def get_reconciliation_config() -> ReconciliationConfig:
    return ReconciliationConfig(
        default_currency=optional_env_var("PUBRECON_DEFAULT_CURRENCY", DEFAULT_CURRENCY).upper(),
        default_payment_method=optional_env_var(
            "PUBRECON_DEFAULT_PAYMENT_METHOD", DEFAULT_PAYMENT_METHOD
        ),
        publisher_source=optional_env_var("PUBRECON_PUBLISHER_SOURCE", DEFAULT_PUBLISHER_SOURCE),
        default_confidence=optional_float_env_var(
            "PUBRECON_DEFAULT_CONFIDENCE", DEFAULT_CONFIDENCE_SCORE
        ),
    )
