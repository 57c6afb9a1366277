"""Shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from assignment_valuation.schemas import PropertyDetails


def make_details(**overrides: Any) -> PropertyDetails:
    fields: dict[str, Any] = {
        "year_purchased": 2021,
        "original_price": 600_000,
        "square_footage": 650,
        "city": "Toronto",
    }
    fields.update(overrides)
    return PropertyDetails(**fields)


@pytest.fixture()
def details() -> PropertyDetails:
    return make_details()
