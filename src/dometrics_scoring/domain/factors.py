"""Shared helpers for the calculators: clamping, tiers and factor ranking."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from ..exceptions import InvalidTimestamp
from .models import ScoreFactor
from .weights import Tier

SECONDS_PER_DAY = 86_400


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (``round`` uses banker's rounding)."""
    return math.floor(value + 0.5)


def interpolate(value: float, full_at: float, zero_at: float, full: float = 100.0) -> float:
    """Linear ramp from ``full`` at ``full_at`` down to 0 at ``zero_at``.

    Values on or beyond either threshold take the threshold's value.
    """
    if value <= full_at:
        return full
    if value >= zero_at:
        return 0.0
    return (zero_at - value) / (zero_at - full_at) * full


def tier_for(value: float, tiers: Sequence[Tier]) -> Tier:
    """Return the first tier whose inclusive upper bound covers ``value``."""
    for tier in tiers:
        if tier.upper_bound is None or value <= tier.upper_bound:
            return tier
    return tiers[-1]


def rank_factors(factors: Iterable[ScoreFactor], limit: int) -> tuple[ScoreFactor, ...]:
    """Sort by descending absolute contribution and keep the top ``limit``."""
    ordered = sorted(factors, key=lambda factor: abs(factor.contribution), reverse=True)
    return tuple(ordered[:limit])


def ensure_aware(value: datetime, field_name: str) -> datetime:
    """Treat naive datetimes as UTC; reject anything that is not a datetime."""
    if not isinstance(value, datetime):
        raise InvalidTimestamp(field_name, value)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from ``start`` to ``end``, floored (negative when ``end`` is earlier)."""
    delta = end - start
    return math.floor(delta.total_seconds() / SECONDS_PER_DAY)
