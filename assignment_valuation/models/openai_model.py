"""OpenAI-backed valuation model (Responses API with web search)."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx
import openai
from pydantic import ValidationError

from .base import ModelOutput
from ..core.config import settings
from ..exceptions import ConfigurationError, UpstreamParseError, UpstreamTransportError
from ..schemas import GroundingSource, PropertyDetails, ValuationData

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_BARE_JSON = re.compile(r"\{[\s\S]*\}")

JSON_SCHEMA = """{
  "estimatedValue": number,
  "originalPPSF": number,
  "currentPPSF": number,
  "appreciationPercentage": number,
  "marketAnalysis": "string (max 150 words)",
  "yearByYearTrend": [
    { "year": number, "avgPrice": number }
  ],
  "comparableStats": {
    "avgAssignmentPrice": number,
    "inventoryLevel": "string (e.g., High, Moderate, Low)"
  },
  "interestRates": {
    "historicalRate": number,
    "currentRate": number
  }
}"""


def build_prompt(details: PropertyDetails, current_year: int) -> str:
    lines = [
        "Act as a professional Real Estate Analyst for the Greater Toronto Area (GTA).",
        "I need a valuation for a pre-construction condo purchased on assignment.",
        "",
        "Property Details:",
        f"- Purchase Year: {details.year_purchased}",
        f"- Original Purchase Price: ${details.original_price:,.0f}",
        f"- Size: {details.square_footage:g} sqft",
        f"- City/Location: {details.city}",
    ]
    if details.project_name:
        lines.append(f"- Project Name: {details.project_name}")
    if details.bedrooms:
        lines.append(f"- Bedrooms: {details.bedrooms}")
    lines += [
        "",
        "Task:",
        '1. Search the web for historical and current "Price Per Square Foot" (PPSF) data for '
        f"pre-construction and assignment condos in {details.city} and the specific project if known.",
        '2. Determine the "Original PPSF" based on the details above.',
        '3. Estimate the "Current Market PPSF" for a similar assignment sale today.',
        '4. Calculate the "Estimated Value" today.',
        f"5. Generate a year-by-year estimated value trend from {details.year_purchased} to {current_year}.",
        "6. Briefly analyse market conditions for assignment sales in this area "
        "(cooling, heating, stagnating).",
        "7. Estimate the typical 5-year fixed mortgage rate for the purchase year "
        f"({details.year_purchased}) and the current year.",
        "",
        "Return the response as a strictly valid JSON block wrapped in ```json``` fences, "
        "matching this schema:",
        JSON_SCHEMA,
    ]
    return "\n".join(lines)


def parse_valuation(text: str | None) -> ValuationData:
    """Pull the JSON payload out of the model's text and validate it.

    Raises
    ------
    UpstreamParseError
        If there is no JSON, it does not decode, or it does not match
        the ValuationData schema.
    """
    if not text:
        raise UpstreamParseError("Empty response from remote valuation model")

    match = _FENCED_JSON.search(text) or _BARE_JSON.search(text)
    if not match:
        raise UpstreamParseError("No JSON object in remote valuation response")
    raw = match.group(1) if match.re is _FENCED_JSON else match.group(0)

    try:
        payload = json.loads(raw)
        return ValuationData.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise UpstreamParseError(f"Malformed remote valuation payload: {exc}") from exc


def extract_sources(response: Any) -> list[GroundingSource]:
    """Collect url_citation annotations from the response's output messages."""
    sources: list[GroundingSource] = []
    seen: set[str] = set()
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for part in getattr(item, "content", None) or []:
            for note in getattr(part, "annotations", None) or []:
                if getattr(note, "type", None) != "url_citation":
                    continue
                uri = getattr(note, "url", None)
                if not uri or uri in seen:
                    continue
                seen.add(uri)
                sources.append(GroundingSource(title=getattr(note, "title", None) or "Source", uri=uri))
    return sources


class OpenAIModel:
    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        client: Any = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout or settings.OPENAI_TIMEOUT_SECONDS
        self._client = client

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY is missing. Set it in the service environment to enable "
                "remote valuations, or set VALUATION_PROVIDER=local."
            )
        self._client = openai.AsyncOpenAI(
            api_key=self.api_key,
            http_client=httpx.AsyncClient(timeout=self.timeout),
        )
        return self._client

    async def value(self, details: PropertyDetails, current_year: int) -> ModelOutput:
        """Ask the remote model for a web-grounded valuation.

        Raises
        ------
        ConfigurationError
            Missing or rejected API key. Not recoverable by retry.
        UpstreamTransportError
            Network, HTTP status or SDK failure.
        UpstreamParseError
            The answer could not be turned into a ValuationData.
        """
        client = self._get_client()
        try:
            response = await client.responses.create(
                model=self.model,
                tools=[{"type": "web_search"}],
                input=build_prompt(details, current_year),
            )
        except openai.AuthenticationError as exc:
            raise ConfigurationError("OpenAI rejected the configured API key") from exc
        except (openai.OpenAIError, httpx.HTTPError) as exc:
            raise UpstreamTransportError(f"Error invoking OpenAI API: {exc}") from exc

        data = parse_valuation(getattr(response, "output_text", None))
        sources = extract_sources(response)
        logger.info("Remote valuation parsed with %d source(s)", len(sources), extra={"provider": self.name})
        return ModelOutput(data=data, sources=sources)
