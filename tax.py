"""Estimated tax capability used by the dashboard cards.

The dashboard only shows a rough projection. The authoritative bracket
calculation belongs to a separate tax service; when no rate is configured the
null estimator is wired in at startup and the card reads zero.
"""

from typing import Protocol

from config import Settings


class TaxEstimator(Protocol):
    def estimate(self, income_cents: int) -> float: ...


class FlatRateTaxEstimator:
    def __init__(self, rate: float) -> None:
        if rate < 0:
            raise ValueError("Tax rate must not be negative")
        self.rate = rate

    def estimate(self, income_cents: int) -> float:
        return income_cents * self.rate


class NullTaxEstimator:
    def estimate(self, income_cents: int) -> float:
        return 0.0


def build_tax_estimator(settings: Settings) -> TaxEstimator:
    if settings.estimated_tax_rate > 0:
        return FlatRateTaxEstimator(settings.estimated_tax_rate)
    return NullTaxEstimator()
