"""Momentum calculator: short-term activity and interest (higher = more momentum).

Also turns a raw search-interest series into the ``TrendSignal`` the
calculator consumes, so callers fetching interest data elsewhere only need
to hand over the numbers.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from .factors import clamp, ensure_aware, rank_factors, round_half_up
from .models import CategoryScore, DomainDescription, RecentEvent, ScoreFactor, TrendSignal
from .weights import ScoringWeights

TREND_WINDOW = 4
RISING_RATIO = 1.2
DECLINING_RATIO = 0.8
HIGH_CURRENT_INTEREST = 75
HIGH_CURRENT_BONUS = 5


def activity_delta(activity_7d: int, activity_30d: int, weights: ScoringWeights) -> float:
    """Percent change of the weekly rate against the monthly baseline.

    A zero baseline yields 0 rather than dividing by zero, even when there was
    activity in the last week.
    """
    if activity_30d <= 0:
        return 0.0
    projected = activity_7d * weights.momentum.activity_trend.weekly_to_monthly
    return (projected - activity_30d) / activity_30d * 100


def count_recent_events(
    events: Sequence[RecentEvent], now: datetime, weights: ScoringWeights
) -> int:
    """Count events strictly newer than the momentum window cutoff."""
    cutoff = now - timedelta(hours=weights.momentum.recent_events.window_hours)
    return sum(
        1 for event in events if ensure_aware(event.timestamp, "recent_events.timestamp") > cutoff
    )


def search_popularity(trend: TrendSignal | None, weights: ScoringWeights) -> float:
    """Trend popularity adjusted up or down for a rising or declining direction."""
    settings = weights.momentum.search_popularity
    if trend is None or trend.popularity is None:
        popularity = settings.default_popularity
    else:
        popularity = trend.popularity
    direction = trend.direction if trend is not None else "stable"
    if direction == "rising":
        popularity *= 1 + settings.trend_adjustment
    elif direction == "declining":
        popularity *= 1 - settings.trend_adjustment
    return clamp(popularity)


def summarise_interest(series: Sequence[float]) -> TrendSignal | None:
    """Build a trend signal from a 0-100 interest time series (oldest first).

    Returns None for an empty series.
    """
    if not series:
        return None
    values = [float(point) for point in series]
    popularity = float(round_half_up(sum(values) / len(values)))
    if values[-1] > HIGH_CURRENT_INTEREST:
        popularity += HIGH_CURRENT_BONUS

    older = values[:TREND_WINDOW]
    recent = values[-TREND_WINDOW:]
    older_mean = sum(older) / len(older)
    recent_mean = sum(recent) / len(recent)
    if recent_mean > older_mean * RISING_RATIO:
        direction = "rising"
    elif recent_mean < older_mean * DECLINING_RATIO:
        direction = "declining"
    else:
        direction = "stable"
    return TrendSignal(popularity=clamp(popularity), direction=direction)


def calculate_momentum(
    domain: DomainDescription,
    weights: ScoringWeights,
    *,
    now: datetime,
) -> CategoryScore:
    """Calculate the momentum score (0-100) and its top factors."""
    momentum = weights.momentum
    factors: list[ScoreFactor] = []

    delta = activity_delta(domain.activity_7d, domain.activity_30d, weights)
    trend_score = clamp(50 + delta / 2)
    sign = "+" if delta > 0 else ""
    factors.append(
        ScoreFactor(
            name="Activity Trend",
            description=f"{sign}{round_half_up(delta)}% vs 30d average",
            value=delta,
            weight=momentum.activity_trend.weight,
            contribution=trend_score * momentum.activity_trend.weight,
        )
    )

    events = count_recent_events(domain.recent_events, now, weights)
    events_score = min(100.0, events * momentum.recent_events.points_per_event)
    factors.append(
        ScoreFactor(
            name="Recent Activity",
            description=f"{events} events in {momentum.recent_events.window_hours}h",
            value=events,
            weight=momentum.recent_events.weight,
            contribution=events_score * momentum.recent_events.weight,
        )
    )

    popularity = search_popularity(domain.trend, weights)
    direction = domain.trend.direction if domain.trend is not None else "stable"
    factors.append(
        ScoreFactor(
            name="Search Popularity",
            description=f"Search interest {round_half_up(popularity)}/100 ({direction})",
            value=popularity,
            weight=momentum.search_popularity.weight,
            contribution=popularity * momentum.search_popularity.weight,
        )
    )

    score = sum(factor.contribution for factor in factors)
    return CategoryScore(score=clamp(score), factors=rank_factors(factors, momentum.top_factors))
