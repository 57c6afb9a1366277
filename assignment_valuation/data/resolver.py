"""
PSF lookup with fallbacks.

Tiers are tried in order and the first record wins (no blending):
  exact (year, city) -> GTA-wide year -> extrapolate backwards
  -> extrapolate forwards -> anchor city fallback
"""
import logging
import math
from typing import Optional, Sequence

from ..core.utils import round_half_up
from .base import EMPTY_RECORD, PsfRecord, PsfStrategy
from .cities import normalize_city
from . import psf_table

logger = logging.getLogger(__name__)

EARLY_CONTEXT = "Extrapolated: Early market growth with steady appreciation across GTA."
LATE_CONTEXT = "Extrapolated: Post-correction stabilization with very modest projected growth across GTA."
FALLBACK_CONTEXT = (
    f"Data for specified city/year unavailable. Using general {psf_table.ANCHOR_CITY} "
    f"({psf_table.ANCHOR_YEAR}) data as a fallback."
)

def _banded(avg: float, context: str) -> PsfRecord:
    return PsfRecord(
        min_psf=round_half_up(avg * (1 - psf_table.BAND_WIDTH)),
        max_psf=round_half_up(avg * (1 + psf_table.BAND_WIDTH)),
        avg_psf=round_half_up(avg),
        market_context=context,
    )

class ExactMatch:
    def lookup(self, year: int, city: str) -> Optional[PsfRecord]:
        return psf_table.CITY_PSF_TABLE.get(year, {}).get(normalize_city(city))

class GeneralYear:
    def lookup(self, year: int, city: str) -> Optional[PsfRecord]:
        return psf_table.GENERAL_PSF_TABLE.get(year)

class ExtrapolateBelow:
    """Years before the first tabulated year decline from its GTA-wide average."""
    def lookup(self, year: int, city: str) -> Optional[PsfRecord]:
        base_year = psf_table.min_table_year()
        base = psf_table.GENERAL_PSF_TABLE.get(base_year)
        if year >= base_year or base is None:
            return None
        # Very distant years underflow to 0.0; the engine reports that as insufficient data
        avg = base.avg_psf * psf_table.EARLY_DECLINE_RATE ** (base_year - year)
        return _banded(avg, EARLY_CONTEXT)

class ExtrapolateAbove:
    """Years after the last tabulated year grow slowly from its GTA-wide average."""
    def lookup(self, year: int, city: str) -> Optional[PsfRecord]:
        base_year = psf_table.max_table_year()
        base = psf_table.GENERAL_PSF_TABLE.get(base_year)
        if year <= base_year or base is None:
            return None
        try:
            avg = base.avg_psf * psf_table.LATE_GROWTH_RATE ** (year - base_year)
        except OverflowError:
            return None
        if not math.isfinite(avg * (1 + psf_table.BAND_WIDTH)):
            return None
        return _banded(avg, LATE_CONTEXT)

class UniversalFallback:
    def lookup(self, year: int, city: str) -> Optional[PsfRecord]:
        anchor = psf_table.CITY_PSF_TABLE.get(psf_table.ANCHOR_YEAR, {}).get(psf_table.ANCHOR_CITY)
        if anchor is None:
            return None
        logger.warning(
            "No PSF data for %s in %s; using %s %s",
            city, year, psf_table.ANCHOR_CITY, psf_table.ANCHOR_YEAR,
            extra={"city": city, "year": year},
        )
        return PsfRecord(
            min_psf=anchor.min_psf,
            max_psf=anchor.max_psf,
            avg_psf=anchor.avg_psf,
            market_context=FALLBACK_CONTEXT,
        )

DEFAULT_STRATEGIES: tuple[PsfStrategy, ...] = (
    ExactMatch(),
    GeneralYear(),
    ExtrapolateBelow(),
    ExtrapolateAbove(),
    UniversalFallback(),
)

class PsfResolver:
    """
    Total lookup: always returns a record, EMPTY_RECORD when every tier skips.
    """
    def __init__(self, strategies: Sequence[PsfStrategy] = DEFAULT_STRATEGIES):
        self.strategies = tuple(strategies)

    def resolve(self, year: int, city: str) -> PsfRecord:
        for strategy in self.strategies:
            record = strategy.lookup(year, city)
            if record is not None:
                return record
        return EMPTY_RECORD

default_resolver = PsfResolver()

def resolve(year: int, city: str) -> PsfRecord:
    return default_resolver.resolve(year, city)
