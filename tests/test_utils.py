"""Tests for the rounding and share-link helpers."""

from __future__ import annotations

import pytest

from assignment_valuation.core.utils import round_half_up, share_number

# ---------------------------------------------------------------------------
# round_half_up
# ---------------------------------------------------------------------------


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2.5, 3), (-2.5, -3), (3.5, 4), (2.4, 2), (0.0, 0), (567857.14, 567857)],
    )
    def test_halves_away_from_zero(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("value", [1e30, -1e30, 1.7e308])
    def test_values_beyond_decimal_precision(self, value: float) -> None:
        assert round_half_up(value) == int(value)


# ---------------------------------------------------------------------------
# share_number
# ---------------------------------------------------------------------------


class TestShareNumber:
    def test_whole_numbers_drop_the_fraction(self) -> None:
        assert share_number(600000.0) == "600000"

    def test_fractions_kept(self) -> None:
        assert share_number(712.5) == "712.5"
