from fastapi import APIRouter, Depends, Header, Query, Response
from ..schemas import MAX_YEAR, MIN_YEAR, MarketsResponse, PropertyDetails, ValuationResponse
from ..services.valuation_service import ValuationService
from ..core.security import require_api_key, rate_limit
from ..data.cities import SUPPORTED_CITIES, SUPPORTED_YEARS

router = APIRouter()

def service_dep() -> ValuationService:
    # Cheap factory; models hold no per-request state.
    return ValuationService()

async def _respond(svc: ValuationService, details: PropertyDetails, response: Response, if_none_match: str | None):
    payload, etag = await svc.value_property(details)
    response.headers["ETag"] = etag
    if if_none_match and if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})
    return payload

@router.post("/valuation", response_model=ValuationResponse)
async def post_valuation(
    body: PropertyDetails,
    response: Response,
    if_none_match: str | None = Header(default=None, alias="if-none-match"),
    _auth = Depends(require_api_key),     # API key guard
    _lim  = Depends(rate_limit),          # Rate limiting
    svc: ValuationService = Depends(service_dep),
):
    return await _respond(svc, body, response, if_none_match)

@router.get("/valuation", response_model=ValuationResponse)
async def get_valuation(
    response: Response,
    year: int = Query(..., ge=MIN_YEAR, le=MAX_YEAR),
    price: float = Query(..., gt=0, allow_inf_nan=False),
    size: float = Query(..., gt=0, allow_inf_nan=False),
    city: str = Query(..., min_length=1),
    project: str | None = Query(default=None),
    bedrooms: str | None = Query(default=None),
    if_none_match: str | None = Header(default=None, alias="if-none-match"),
    _auth = Depends(require_api_key),
    _lim  = Depends(rate_limit),
    svc: ValuationService = Depends(service_dep),
):
    """Share-link form: the same inputs as POST, carried in the query string."""
    details = PropertyDetails.from_share_params({
        "year": year, "price": price, "size": size, "city": city,
        "project": project, "bedrooms": bedrooms,
    })
    return await _respond(svc, details, response, if_none_match)

@router.get("/markets", response_model=MarketsResponse)
def get_markets():
    return {"cities": list(SUPPORTED_CITIES), "years": list(SUPPORTED_YEARS)}
