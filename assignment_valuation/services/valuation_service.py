import logging
from datetime import date

from ..core.config import settings
from ..core.metrics import REMOTE_FAILURES, VALUATIONS
from ..core.utils import canonical_json, round_half_up, weak_etag
from ..exceptions import UpstreamParseError, UpstreamTransportError
from ..models.base import ValuationModel
from ..models.local_model import LocalModel
from ..models.openai_model import OpenAIModel
from ..schemas import PropertyDetails, ValuationData, ValuationResponse

logger = logging.getLogger(__name__)

FALLBACK_PROVIDER = "local-fallback"

class ValuationService:
    """
    Orchestrates:
      details → remote model (optional) → local engine fallback → response + ETag
    Configuration and insufficient-data errors propagate; every other
    remote failure degrades to the deterministic local engine.
    """
    def __init__(
        self,
        provider: str | None = None,
        remote: ValuationModel | None = None,
        local: ValuationModel | None = None,
        current_year: int | None = None,
    ):
        provider = provider or settings.VALUATION_PROVIDER
        self.local = local or LocalModel()
        if provider == "openai":
            self.remote = remote or OpenAIModel()
        else:
            self.remote = remote
        self._current_year = current_year

    @property
    def current_year(self) -> int:
        return self._current_year or settings.CURRENT_YEAR or date.today().year

    async def value_property(self, details: PropertyDetails) -> tuple[dict, str]:
        year = self.current_year
        if self.remote is None:
            output = await self.local.value(details, year)
            provider = self.local.name
        else:
            try:
                output = await self.remote.value(details, year)
                provider = self.remote.name
                self._check_appreciation(details, output.data)
            except (UpstreamParseError, UpstreamTransportError) as exc:
                reason = "parse" if isinstance(exc, UpstreamParseError) else "transport"
                REMOTE_FAILURES.labels(reason=reason).inc()
                logger.warning(
                    "Remote valuation failed, using local engine: %s", exc,
                    extra={"provider": self.remote.name, "reason": reason},
                )
                # Local sources are always empty
                output = await self.local.value(details, year)
                provider = FALLBACK_PROVIDER

        VALUATIONS.labels(provider=provider).inc()
        response = ValuationResponse(
            data=output.data,
            sources=output.sources,
            provider=provider,
            currency=settings.DEFAULT_CURRENCY,
            share_query=details.share_query(),
        )
        payload = response.model_dump(mode="json", by_alias=True)
        return payload, weak_etag(canonical_json(payload))

    def _check_appreciation(self, details: PropertyDetails, data: ValuationData) -> None:
        """
        The remote appreciation figure is kept as given; flag it when it
        disagrees with what its own estimated value implies.
        """
        implied = round_half_up(
            (data.estimated_value - details.original_price) / details.original_price * 100
        )
        if abs(implied - data.appreciation_percentage) > 1:
            logger.warning(
                "Remote appreciation %s%% differs from implied %s%%",
                data.appreciation_percentage, implied,
                extra={"provider": self.remote.name},
            )
