"""Tests for the forecast calculator."""

from dataclasses import replace

import pytest

from dometrics_scoring.domain.forecast import (
    annual_growth_rate,
    calculate_forecast,
    horizon_growth,
)
from dometrics_scoring.domain.weights import DEFAULT_WEIGHTS


def test_annual_growth_rate_combines_primary_scores() -> None:
    assert annual_growth_rate(61, 43, 38, DEFAULT_WEIGHTS) == pytest.approx(0.158)


def test_negative_annual_rate_does_not_compound() -> None:
    assert horizon_growth(-0.25, DEFAULT_WEIGHTS) == 0.0


def test_forecast_for_short_com_with_near_expiry() -> None:
    result = calculate_forecast(61, 43, 38, DEFAULT_WEIGHTS)

    assert result.value == pytest.approx(40 + (1.158**0.5 - 1) * 120)
    assert result.low == pytest.approx(result.value - 8)
    assert result.high == pytest.approx(result.value + 8)
    assert [factor.name for factor in result.factors] == ["Rarity Impact", "Risk Impact"]
    assert result.factors[0].contribution == pytest.approx(12.9)
    assert result.factors[1].contribution == pytest.approx(-10.98)


def test_declining_outlook_sits_at_base_score() -> None:
    result = calculate_forecast(100, 0, 0, DEFAULT_WEIGHTS)

    assert result.value == 40
    assert (result.low, result.high) == (32, 48)


def test_growth_points_and_band_are_capped() -> None:
    forecast = replace(DEFAULT_WEIGHTS.forecast, growth_scale=1000)
    weights = replace(DEFAULT_WEIGHTS, forecast=forecast)

    result = calculate_forecast(0, 100, 100, weights)

    assert result.value == 100
    assert result.high == 100
    assert result.low == 92


def test_factor_contributions_are_forecast_points() -> None:
    forecast = replace(DEFAULT_WEIGHTS.forecast, top_factors=4)

    result = calculate_forecast(61, 43, 38, replace(DEFAULT_WEIGHTS, forecast=forecast))
    by_name = {factor.name: factor for factor in result.factors}

    assert by_name["Growth Potential"].contribution == pytest.approx(result.value - 40)
    assert by_name["Momentum Impact"].contribution == pytest.approx(-1.44)
    assert by_name["Rarity Impact"].description == "43/100 rarity score, +12.9 forecast points"
    assert by_name["Risk Impact"].description == "61/100 risk score, -11.0 forecast points"
    assert [factor.name for factor in result.factors] == [
        "Rarity Impact",
        "Risk Impact",
        "Growth Potential",
        "Momentum Impact",
    ]


def _non_decreasing(values: list[float]) -> bool:
    return all(later >= earlier for earlier, later in zip(values, values[1:], strict=False))


GRID = range(0, 101, 5)


@pytest.mark.parametrize("risk", [0, 50, 100])
def test_higher_rarity_never_lowers_forecast(risk: int) -> None:
    for momentum in GRID:
        values = [
            calculate_forecast(risk, rarity, momentum, DEFAULT_WEIGHTS).value for rarity in GRID
        ]

        assert _non_decreasing(values), (risk, momentum)


@pytest.mark.parametrize("risk", [0, 50, 100])
def test_higher_momentum_never_lowers_forecast(risk: int) -> None:
    for rarity in GRID:
        values = [
            calculate_forecast(risk, rarity, momentum, DEFAULT_WEIGHTS).value for momentum in GRID
        ]

        assert _non_decreasing(values), (risk, rarity)
