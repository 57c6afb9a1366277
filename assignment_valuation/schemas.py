from typing import Union
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .core.utils import share_number

# Remote providers may answer with floats; local values stay ints
Amount = Union[int, float]

# Accepted purchase years. Wide of the 1990-2100 range the PSF data is tuned for,
# but finite so the year-by-year trend stays small.
MIN_YEAR = 1900
MAX_YEAR = 2200

class CamelModel(BaseModel):
    # JSON uses camelCase (estimatedValue, yearByYearTrend, ...); Python uses snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class PropertyDetails(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, str_strip_whitespace=True,
        allow_inf_nan=False,
    )

    year_purchased: int = Field(ge=MIN_YEAR, le=MAX_YEAR)
    original_price: float = Field(gt=0)
    square_footage: float = Field(gt=0)
    city: str = Field(min_length=1)
    project_name: str | None = None
    bedrooms: str | None = None   # free-form label, e.g. "1+Den"

    def share_params(self) -> dict[str, str]:
        """Query parameters for a share link; optional fields are omitted when blank."""
        params = {
            "year": str(self.year_purchased),
            "price": share_number(self.original_price),
            "size": share_number(self.square_footage),
            "city": self.city,
        }
        if self.project_name:
            params["project"] = self.project_name
        if self.bedrooms:
            params["bedrooms"] = self.bedrooms
        return params

    def share_query(self) -> str:
        return urlencode(self.share_params())

    @classmethod
    def from_share_params(cls, params: dict) -> "PropertyDetails":
        return cls(
            year_purchased=params["year"],
            original_price=params["price"],
            square_footage=params["size"],
            city=params["city"],
            project_name=params.get("project") or None,
            bedrooms=params.get("bedrooms") or None,
        )

class TrendPoint(CamelModel):
    year: int
    avg_price: Amount

class ComparableStats(CamelModel):
    avg_assignment_price: Amount
    inventory_level: str

class InterestRates(CamelModel):
    historical_rate: float
    current_rate: float

class ValuationData(CamelModel):
    estimated_value: Amount
    original_ppsf: Amount = Field(alias="originalPPSF")
    current_ppsf: Amount = Field(alias="currentPPSF")
    appreciation_percentage: Amount
    market_analysis: str
    year_by_year_trend: list[TrendPoint]
    comparable_stats: ComparableStats | None = None
    interest_rates: InterestRates | None = None

class GroundingSource(CamelModel):
    title: str
    uri: str

class ValuationResponse(CamelModel):
    data: ValuationData
    sources: list[GroundingSource] = []
    provider: str                       # openai | local | local-fallback
    currency: str = "CAD"
    share_query: str
    disclaimer: str = "This valuation is an estimate and not a financial appraisal."

class MarketsResponse(CamelModel):
    cities: list[str]
    years: list[int]
