"""
Deterministic valuation from the curated PSF tables.

The unit's purchase PPSF is compared with the market average for its
purchase year. That premium/discount ratio is held constant and applied to
the market average of every other year, so the estimate follows the market's
trajectory rather than a generic growth rate.
"""
from __future__ import annotations

import math

from ..core.utils import round_half_up
from ..data import psf_table
from ..data.resolver import PsfResolver, default_resolver
from ..exceptions import InsufficientDataError
from ..schemas import (
    ComparableStats,
    InterestRates,
    PropertyDetails,
    TrendPoint,
    ValuationData,
)
from .base import ModelOutput

BUYERS_LEVEL = "High (Favors Buyers)"
SELLERS_LEVEL = "Low (Favors Sellers)"
NEUTRAL_LEVEL = "Moderate"

_OUT_OF_RANGE = (
    "The price and size given are outside the range the PSF data can value. "
    "Please check the purchase price and square footage."
)

# Checked in this order; buyer terms win when both appear.
# Bare "correction" is not a buyer term: "post-correction stabilization" is neutral.
_BUYER_TERMS = (
    "buyers market", "significant correction", "correction begins", "downward pressure", "slower sales",
)
_SELLER_TERMS = ("steady growth", "resilience", "acceleration", "peak")

def classify_inventory(market_context: str) -> str:
    context = market_context.lower()
    if any(term in context for term in _BUYER_TERMS):
        return BUYERS_LEVEL
    if any(term in context for term in _SELLER_TERMS):
        return SELLERS_LEVEL
    return NEUTRAL_LEVEL

def compute_valuation(
    details: PropertyDetails,
    current_year: int,
    resolver: PsfResolver = default_resolver,
) -> ValuationData:
    purchase = resolver.resolve(details.year_purchased, details.city)
    current = resolver.resolve(current_year, details.city)
    if not purchase.avg_psf or not current.avg_psf:
        raise InsufficientDataError(
            "Unable to retrieve sufficient historical PSF data for valuation for the "
            "specified city and year. Please try different details."
        )

    original_ppsf = details.original_price / details.square_footage
    price_to_psf_ratio = original_ppsf / purchase.avg_psf
    current_ppsf = current.avg_psf * price_to_psf_ratio
    if not (math.isfinite(price_to_psf_ratio) and math.isfinite(current_ppsf)):
        raise InsufficientDataError(_OUT_OF_RANGE)

    def project(avg_psf: float) -> int:
        value = details.square_footage * (avg_psf * price_to_psf_ratio)
        if not math.isfinite(value):
            raise InsufficientDataError(_OUT_OF_RANGE)
        return round_half_up(value)

    estimated_value = project(current.avg_psf)
    appreciation = round_half_up(
        (estimated_value - details.original_price) / details.original_price * 100
    )

    # Always low -> high, even for a purchase year in the future
    start = min(details.year_purchased, current_year)
    end = max(details.year_purchased, current_year)
    trend = [
        TrendPoint(
            year=year,
            avg_price=project(resolver.resolve(year, details.city).avg_psf),
        )
        for year in range(start, end + 1)
    ]

    market_analysis = (
        f"{current.market_context} This analysis is based on general market trends "
        f"for {details.city}, not specific project data."
    )

    return ValuationData(
        estimated_value=estimated_value,
        original_ppsf=round_half_up(original_ppsf),
        current_ppsf=round_half_up(current_ppsf),
        appreciation_percentage=appreciation,
        market_analysis=market_analysis,
        year_by_year_trend=trend,
        comparable_stats=ComparableStats(
            avg_assignment_price=estimated_value,
            inventory_level=classify_inventory(current.market_context),
        ),
        interest_rates=InterestRates(
            historical_rate=psf_table.HISTORICAL_RATE,
            current_rate=psf_table.CURRENT_RATE,
        ),
    )

class LocalModel:
    """Valuation model backed by the PSF tables; cites no sources."""
    name = "local"

    def __init__(self, resolver: PsfResolver = default_resolver):
        self.resolver = resolver

    async def value(self, details: PropertyDetails, current_year: int) -> ModelOutput:
        return ModelOutput(data=compute_valuation(details, current_year, self.resolver))
