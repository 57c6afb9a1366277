"""Tests for the FastAPI application; remote model calls are mocked."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from assignment_valuation.core.config import settings
from assignment_valuation.core.security import reset_rate_limits
from assignment_valuation.data.cities import SUPPORTED_CITIES
from assignment_valuation.data.resolver import ExactMatch, PsfResolver
from assignment_valuation.exceptions import ConfigurationError
from assignment_valuation.main import create_app
from assignment_valuation.models.local_model import LocalModel
from assignment_valuation.routers.valuation import service_dep
from assignment_valuation.services.valuation_service import ValuationService

BODY = {"yearPurchased": 2021, "originalPrice": 600000, "squareFootage": 650, "city": "Toronto"}

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fresh_limits() -> Iterator[None]:
    reset_rate_limits()
    yield
    reset_rate_limits()


def _client(service: ValuationService | None = None) -> TestClient:
    app = create_app()
    svc = service or ValuationService(provider="local", current_year=2024)
    app.dependency_overrides[service_dep] = lambda: svc
    return TestClient(app)


# ---------------------------------------------------------------------------
# Meta
# ---------------------------------------------------------------------------


class TestMeta:
    def test_health(self) -> None:
        resp = _client().get("/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_request_id_echoed(self) -> None:
        resp = _client().get("/v1/ping", headers={"x-request-id": "abc-123"})
        assert resp.headers["x-request-id"] == "abc-123"

    def test_markets(self) -> None:
        resp = _client().get("/v1/markets")
        assert resp.status_code == 200
        body = resp.json()
        assert body["cities"] == list(SUPPORTED_CITIES)
        assert body["years"] == [2019, 2020, 2021, 2022, 2023, 2024]


# ---------------------------------------------------------------------------
# Valuation
# ---------------------------------------------------------------------------


class TestPostValuation:
    def test_local_valuation(self) -> None:
        resp = _client().post("/v1/valuation", json=BODY)
        assert resp.status_code == 200
        body = resp.json()
        assert body["provider"] == "local"
        assert body["data"]["estimatedValue"] == 567857
        assert body["data"]["appreciationPercentage"] == -5
        assert len(body["data"]["yearByYearTrend"]) == 4
        assert body["data"]["interestRates"] == {"historicalRate": 2.8, "currentRate": 4.9}
        assert resp.headers["etag"].startswith('W/"')

    def test_snake_case_body_accepted(self) -> None:
        resp = _client().post(
            "/v1/valuation",
            json={"year_purchased": 2021, "original_price": 600000, "square_footage": 650, "city": "Toronto"},
        )
        assert resp.status_code == 200

    def test_if_none_match_returns_304(self) -> None:
        client = _client()
        etag = client.post("/v1/valuation", json=BODY).headers["etag"]
        resp = client.post("/v1/valuation", json=BODY, headers={"If-None-Match": etag})
        assert resp.status_code == 304

    @pytest.mark.parametrize(
        "override",
        [{"originalPrice": 0}, {"squareFootage": -10}, {"city": ""}, {"yearPurchased": "soon"}],
    )
    def test_invalid_body(self, override: dict) -> None:
        resp = _client().post("/v1/valuation", json={**BODY, **override})
        assert resp.status_code == 422

    def test_insufficient_data(self) -> None:
        # Exact-match-only tables have no 2019 row for Toronto
        svc = ValuationService(provider="local", local=LocalModel(PsfResolver([ExactMatch()])), current_year=2024)
        resp = _client(svc).post("/v1/valuation", json={**BODY, "yearPurchased": 2019})
        assert resp.status_code == 422
        assert "sufficient historical PSF data" in resp.json()["detail"]

    @pytest.mark.parametrize("year", [10**9, -10**9, 1899, 2201])
    def test_year_out_of_bounds(self, year: int) -> None:
        resp = _client().post("/v1/valuation", json={**BODY, "yearPurchased": year})
        assert resp.status_code == 422

    @pytest.mark.parametrize("year", [1900, 2200])
    def test_year_bounds_inclusive(self, year: int) -> None:
        resp = _client().post("/v1/valuation", json={**BODY, "yearPurchased": year})
        assert resp.status_code == 200
        assert len(resp.json()["data"]["yearByYearTrend"]) == abs(2024 - year) + 1

    def test_non_finite_ppsf_is_422(self) -> None:
        resp = _client().post("/v1/valuation", json={**BODY, "originalPrice": 1e308, "squareFootage": 1e-05})
        assert resp.status_code == 422
        assert "outside the range" in resp.json()["detail"]

    @pytest.mark.parametrize("raw", ["1e400", "Infinity", "NaN"])
    def test_infinite_price_rejected(self, raw: str) -> None:
        # The JSON decoder reads 1e400 as inf
        content = f'{{"yearPurchased": 2021, "originalPrice": {raw}, "squareFootage": 650, "city": "Toronto"}}'
        resp = _client().post("/v1/valuation", content=content, headers={"content-type": "application/json"})
        assert resp.status_code == 422

    def test_configuration_error_is_503(self) -> None:
        remote = MagicMock()
        remote.name = "openai"
        remote.value = AsyncMock(side_effect=ConfigurationError("OPENAI_API_KEY is missing"))
        svc = ValuationService(provider="openai", remote=remote, current_year=2024)
        resp = _client(svc).post("/v1/valuation", json=BODY)
        assert resp.status_code == 503
        assert "OPENAI_API_KEY" in resp.json()["detail"]


class TestShareLink:
    def test_get_matches_post(self) -> None:
        client = _client()
        posted = client.post("/v1/valuation", json=BODY).json()
        shared = client.get(f"/v1/valuation?{posted['shareQuery']}")
        assert shared.status_code == 200
        assert shared.json() == posted

    def test_optional_fields_round_trip(self) -> None:
        client = _client()
        resp = client.get(
            "/v1/valuation",
            params={"year": 2022, "price": 712500.5, "size": 540, "city": "North York",
                    "project": "Line 5 Condos", "bedrooms": "1+Den"},
        )
        assert resp.status_code == 200
        query = resp.json()["shareQuery"]
        assert "price=712500.5" in query
        assert "project=Line+5+Condos" in query
        assert "bedrooms=1%2BDen" in query

    def test_missing_params(self) -> None:
        resp = _client().get("/v1/valuation", params={"year": 2022, "city": "Toronto"})
        assert resp.status_code == 422

    @pytest.mark.parametrize(
        "override",
        [{"price": "inf"}, {"size": "Infinity"}, {"price": "nan"}, {"year": 1000000000}, {"year": 1899}],
    )
    def test_invalid_params(self, override: dict) -> None:
        params = {"year": 2021, "price": 600000, "size": 650, "city": "Toronto", **override}
        resp = _client().get("/v1/valuation", params=params)
        assert resp.status_code == 422

    def test_non_finite_ppsf_is_422(self) -> None:
        resp = _client().get(
            "/v1/valuation", params={"year": 2021, "price": 1e308, "size": 1e-05, "city": "Toronto"},
        )
        assert resp.status_code == 422
        assert "outside the range" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


class TestGuards:
    def test_api_key_required_when_configured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "API_KEY", "secret")
        client = _client()
        assert client.post("/v1/valuation", json=BODY).status_code == 401
        ok = client.post("/v1/valuation", json=BODY, headers={"x-api-key": "secret"})
        assert ok.status_code == 200

    def test_rate_limit(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "RATE_LIMIT_RPM", 2)
        client = _client()
        codes = [client.post("/v1/valuation", json=BODY).status_code for _ in range(3)]
        assert codes == [200, 200, 429]
