"""Domain records passed into and returned from the scoring engine.

Usage example:
    from datetime import UTC, datetime, timedelta

    from dometrics_scoring.domain.models import DomainDescription

    domain = DomainDescription(
        name="defi",
        tld="defi",
        expires_at=datetime.now(UTC) + timedelta(days=730),
        lock_status=True,
        offer_count=10,
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from ..types import DomainScoresDocument, ExplainersDocument, ScoreFactorDocument

TrendDirection = Literal["rising", "stable", "declining"]
ValueSource = Literal["deterministic", "valuation_service"]

UNKNOWN_REGISTRAR = "Unknown"


@dataclass(frozen=True)
class RecentEvent:
    """A single on-chain or marketplace event for a domain."""

    type: str
    timestamp: datetime


@dataclass(frozen=True)
class TrendSignal:
    """External search-interest signal (0-100) and its direction."""

    popularity: float | None = None
    direction: TrendDirection = "stable"


@dataclass(frozen=True)
class DomainDescription:
    """Descriptive attributes of one tokenized domain name."""

    name: str  # label only, no TLD
    tld: str
    expires_at: datetime
    lock_status: bool = False
    registrar_id: int = 0
    registrar_name: str = UNKNOWN_REGISTRAR
    renewal_count: int = 0
    offer_count: int = 0
    activity_7d: int = 0
    activity_30d: int = 0
    recent_events: tuple[RecentEvent, ...] = ()
    tokenized_at: datetime | None = None
    trend: TrendSignal | None = None

    @property
    def full_name(self) -> str:
        return f"{self.name}.{self.tld}"


@dataclass(frozen=True)
class ScoreFactor:
    """One ranked signal behind a score."""

    name: str
    description: str
    value: float
    weight: float
    contribution: float

    def to_dict(self) -> ScoreFactorDocument:
        return {
            "name": self.name,
            "description": self.description,
            "value": round(self.value, 4),
            "weight": round(self.weight, 4),
            "contribution": round(self.contribution, 4),
        }


@dataclass(frozen=True)
class CategoryScore:
    """Unrounded score for one dimension plus its top factors."""

    score: float
    factors: tuple[ScoreFactor, ...]


@dataclass(frozen=True)
class ForecastResult:
    """Six-month outlook score with its confidence band."""

    value: float
    low: float
    high: float
    factors: tuple[ScoreFactor, ...]


@dataclass(frozen=True)
class ValueEstimate:
    """Currency estimate for a domain, now and six months out."""

    current_value: float
    projected_value: float
    confidence: int
    factors: tuple[ScoreFactor, ...]
    source: ValueSource = "deterministic"


@dataclass(frozen=True)
class MarketData:
    """Market context handed to an external valuation service."""

    days_until_expiry: int
    offer_count: int
    activity_30d: int
    registrar: str
    transfer_lock: bool


@dataclass(frozen=True)
class Explainers:
    """Ranked factors for every scored dimension."""

    risk: tuple[ScoreFactor, ...]
    rarity: tuple[ScoreFactor, ...]
    momentum: tuple[ScoreFactor, ...]
    forecast: tuple[ScoreFactor, ...]
    value: tuple[ScoreFactor, ...]

    def to_dict(self) -> ExplainersDocument:
        return {
            "risk": [factor.to_dict() for factor in self.risk],
            "rarity": [factor.to_dict() for factor in self.rarity],
            "momentum": [factor.to_dict() for factor in self.momentum],
            "forecast": [factor.to_dict() for factor in self.forecast],
            "value": [factor.to_dict() for factor in self.value],
        }


@dataclass(frozen=True)
class DomainScores:
    """Full engine output for one domain."""

    risk: int
    rarity: int
    momentum: int
    forecast: int
    forecast_low: float
    forecast_high: float
    current_value: float
    projected_value: float
    value_confidence: int
    explainers: Explainers
    weights_version: str
    value_source: ValueSource = "deterministic"

    def to_dict(self) -> DomainScoresDocument:
        """Return a plain document safe to serialise across process boundaries."""
        return {
            "risk": self.risk,
            "rarity": self.rarity,
            "momentum": self.momentum,
            "forecast": self.forecast,
            "forecast_low": self.forecast_low,
            "forecast_high": self.forecast_high,
            "current_value": self.current_value,
            "projected_value": self.projected_value,
            "value_confidence": self.value_confidence,
            "value_source": self.value_source,
            "weights_version": self.weights_version,
            "explainers": self.explainers.to_dict(),
        }
