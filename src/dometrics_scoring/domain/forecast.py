"""Forecast calculator: six-month growth outlook derived from risk, rarity and momentum.

The forecast never looks at raw domain attributes; it only consumes the three
primary scores so it stays consistent with what the caller already displays.
"""

from __future__ import annotations

from .factors import clamp, rank_factors
from .models import ForecastResult, ScoreFactor
from .weights import ScoringWeights


def annual_growth_rate(
    risk: float, rarity: float, momentum: float, weights: ScoringWeights
) -> float:
    forecast = weights.forecast
    return (
        forecast.base_annual_growth
        + rarity / 100 * forecast.rarity_boost
        + (momentum - 50) / forecast.momentum_divisor
        - risk / 100 * forecast.risk_penalty
    )


def horizon_growth(annual_rate: float, weights: ScoringWeights) -> float:
    """Compound a non-negative annual rate over the forecast horizon."""
    return (1 + max(0.0, annual_rate)) ** weights.forecast.horizon_years - 1


def calculate_forecast(
    risk: float,
    rarity: float,
    momentum: float,
    weights: ScoringWeights,
) -> ForecastResult:
    """Calculate the forecast score (0-100) with its confidence band and top factors."""
    forecast = weights.forecast
    annual_rate = annual_growth_rate(risk, rarity, momentum, weights)
    growth = horizon_growth(annual_rate, weights)
    growth_points = min(growth * forecast.growth_scale, forecast.max_growth_points)
    value = clamp(forecast.base_score + growth_points)

    # Driver terms are annual rates, scaled to forecast points by the
    # first-order slope of the horizon compounding.
    points_per_rate = forecast.growth_scale * forecast.horizon_years
    momentum_points = (momentum - 50) / forecast.momentum_divisor * points_per_rate
    rarity_points = rarity / 100 * forecast.rarity_boost * points_per_rate
    risk_points = -risk / 100 * forecast.risk_penalty * points_per_rate

    factors = [
        ScoreFactor(
            name="Growth Potential",
            description=(
                f"{annual_rate * 100:.1f}% projected annual growth, "
                f"{growth_points:+.1f} forecast points"
            ),
            value=annual_rate * 100,
            weight=forecast.growth_scale / 100,
            contribution=growth_points,
        ),
        ScoreFactor(
            name="Momentum Impact",
            description=(
                f"{momentum:.0f}/100 momentum score, {momentum_points:+.1f} forecast points"
            ),
            value=momentum,
            weight=points_per_rate / forecast.momentum_divisor,
            contribution=momentum_points,
        ),
        ScoreFactor(
            name="Rarity Impact",
            description=f"{rarity:.0f}/100 rarity score, {rarity_points:+.1f} forecast points",
            value=rarity,
            weight=forecast.rarity_boost * points_per_rate / 100,
            contribution=rarity_points,
        ),
        ScoreFactor(
            name="Risk Impact",
            description=f"{risk:.0f}/100 risk score, {risk_points:+.1f} forecast points",
            value=risk,
            weight=forecast.risk_penalty * points_per_rate / 100,
            contribution=risk_points,
        ),
    ]

    return ForecastResult(
        value=value,
        low=clamp(value - forecast.confidence_band),
        high=clamp(value + forecast.confidence_band),
        factors=rank_factors(factors, forecast.top_factors),
    )
