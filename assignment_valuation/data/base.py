from typing import Protocol, Optional
from dataclasses import dataclass

# ----- Data shapes (thin & explicit) -----

@dataclass(frozen=True)
class PsfRecord:
    # Price per square foot band for one (year, market)
    min_psf: float
    max_psf: float
    avg_psf: float
    market_context: str   # e.g., "The Peak. Prices hit record highs in Q3 2022. ..."

EMPTY_RECORD = PsfRecord(min_psf=0, max_psf=0, avg_psf=0, market_context="Data unavailable.")

# ----- Protocols (interfaces) -----

class PsfStrategy(Protocol):
    """One tier of the resolver chain. Returns None to let the next tier try."""
    def lookup(self, year: int, city: str) -> Optional[PsfRecord]: ...
