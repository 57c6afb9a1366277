from dataclasses import dataclass, field
from typing import Protocol

from ..schemas import GroundingSource, PropertyDetails, ValuationData

@dataclass
class ModelOutput:
    data: ValuationData
    sources: list[GroundingSource] = field(default_factory=list)

class ValuationModel(Protocol):
    name: str

    async def value(self, details: PropertyDetails, current_year: int) -> ModelOutput:
        """
        Returns the valuation plus any web sources cited for it.
        """
        ...
