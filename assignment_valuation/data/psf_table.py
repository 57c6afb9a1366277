"""
Curated pre-construction / assignment price-per-square-foot reference data
for the Greater Toronto Area.

Two tables:
  CITY_PSF_TABLE     year -> city -> PsfRecord, 2021-2024, nine markets
  GENERAL_PSF_TABLE  year -> PsfRecord, GTA-wide, for the years either side

Both are read-only views built at import time.
"""
from types import MappingProxyType
from typing import Mapping

from .base import PsfRecord

# 5-year fixed mortgage rates (%). Not derived from the PSF tables.
HISTORICAL_RATE = 2.8   # average for 2019-2022 purchases
CURRENT_RATE = 4.9

# Extrapolation outside the tables
EARLY_DECLINE_RATE = 0.98   # each year before the first tabulated year is 2% cheaper
LATE_GROWTH_RATE = 1.005    # each year after the last tabulated year is 0.5% dearer
BAND_WIDTH = 0.05           # min/max = avg -/+ 5% on extrapolated records

# Last-resort record when nothing else matches
ANCHOR_CITY = "Toronto"
ANCHOR_YEAR = 2024

# Per-year headline and the "averaged" phrase for each market
_YEAR_HEADLINES = {
    2021: "Rapid Acceleration. Low interest rates fueled demand.",
    2022: "The Peak. Prices hit record highs in Q3 2022.",
    2023: "Correction Begins. Sales slowed significantly.",
    2024: "Significant Correction. New project launches are priced aggressively lower.",
}
_MARKET_LABELS = {"Toronto": "Downtown Toronto"}

# (min, avg, max) PSF per city per year
_CITY_BANDS = {
    2021: {
        "Toronto": (1350, 1400, 1450),
        "Markham": (1300, 1360, 1420),
        "Richmond Hill": (1300, 1360, 1420),
        "Vaughan": (1280, 1330, 1380),
        "Scarborough": (1240, 1295, 1350),
        "Mississauga": (1200, 1260, 1320),
        "Brampton": (1150, 1215, 1280),
        "Pickering": (1150, 1215, 1280),
        "Ajax": (1120, 1185, 1250),
    },
    2022: {
        "Toronto": (1400, 1440, 1480),
        "Markham": (1350, 1400, 1450),
        "Richmond Hill": (1350, 1400, 1450),
        "Vaughan": (1320, 1385, 1450),
        "Scarborough": (1280, 1350, 1420),
        "Mississauga": (1240, 1310, 1380),
        "Brampton": (1190, 1270, 1350),
        "Pickering": (1180, 1260, 1340),
        "Ajax": (1150, 1240, 1330),
    },
    2023: {
        "Toronto": (1300, 1360, 1420),
        "Markham": (1250, 1315, 1380),
        "Richmond Hill": (1250, 1315, 1380),
        "Vaughan": (1230, 1290, 1350),
        "Scarborough": (1180, 1250, 1320),
        "Mississauga": (1150, 1230, 1310),
        "Brampton": (1100, 1190, 1280),
        "Pickering": (1100, 1180, 1260),
        "Ajax": (1080, 1165, 1250),
    },
    2024: {
        "Toronto": (1250, 1325, 1400),
        "Markham": (1220, 1285, 1350),
        "Richmond Hill": (1220, 1285, 1350),
        "Vaughan": (1200, 1265, 1330),
        "Scarborough": (1150, 1225, 1300),
        "Mississauga": (1120, 1200, 1280),
        "Brampton": (1080, 1165, 1250),
        "Pickering": (1080, 1160, 1240),
        "Ajax": (1060, 1145, 1230),
    },
}

def _city_record(year: int, city: str, band: tuple[int, int, int]) -> PsfRecord:
    low, avg, high = band
    label = _MARKET_LABELS.get(city, city)
    context = f"{_YEAR_HEADLINES[year]} {label} averaged ~${low:,}–${high:,} PSF."
    return PsfRecord(min_psf=low, max_psf=high, avg_psf=avg, market_context=context)

CITY_PSF_TABLE: Mapping[int, Mapping[str, PsfRecord]] = MappingProxyType({
    year: MappingProxyType({city: _city_record(year, city, band) for city, band in cities.items()})
    for year, cities in _CITY_BANDS.items()
})

GENERAL_PSF_TABLE: Mapping[int, PsfRecord] = MappingProxyType({
    2019: PsfRecord(
        min_psf=1070, max_psf=1150, avg_psf=1110,
        market_context="Steady Growth. Prices rose steadily across Greater Toronto Area.",
    ),
    2020: PsfRecord(
        min_psf=1150, max_psf=1377, avg_psf=1264,
        market_context=(
            "Pandemic Resilience. Despite COVID-19 pauses, unsold inventory prices "
            "in Greater Toronto Area held strong."
        ),
    ),
    2025: PsfRecord(
        min_psf=1030, max_psf=1325, avg_psf=1178,
        market_context=(
            "Buyers Market. Greater Toronto Area unsold inventory hovered ~$1,325, but new "
            "launches dropped further. Many projects were delayed or cancelled."
        ),
    ),
    2026: PsfRecord(
        min_psf=1000, max_psf=1100, avg_psf=1050,
        market_context=(
            "Forecast: Continued Downward Pressure. Prices are projected to face further "
            "declines or remain significantly suppressed across the Greater Toronto Area, "
            "favoring buyers."
        ),
    ),
})

def table_years() -> list[int]:
    """Every year present in either table, ascending."""
    return sorted(set(CITY_PSF_TABLE) | set(GENERAL_PSF_TABLE))

def min_table_year() -> int:
    return table_years()[0]

def max_table_year() -> int:
    return table_years()[-1]
