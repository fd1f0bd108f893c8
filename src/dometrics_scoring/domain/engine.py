"""Scoring engine: one entry point combining every calculator.

The engine holds a validated, immutable ``ScoringWeights`` document and no
other state, so one instance can be shared across threads and tasks.

Usage example:
    from datetime import UTC, datetime, timedelta

    from dometrics_scoring.domain.engine import ScoringEngine
    from dometrics_scoring.domain.models import DomainDescription

    engine = ScoringEngine()
    now = datetime(2025, 1, 1, tzinfo=UTC)
    scores = engine.score(
        DomainDescription(name="ab", tld="com", expires_at=now + timedelta(days=10)),
        now=now,
    )
    print(scores.to_dict())
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from ..exceptions import ValuationServiceError
from ..observability.logging import get_logger
from ..protocols import ValuationService
from .factors import clamp, ensure_aware, rank_factors, round_half_up
from .forecast import calculate_forecast
from .models import (
    CategoryScore,
    DomainDescription,
    DomainScores,
    Explainers,
    MarketData,
    ValueEstimate,
)
from .momentum import calculate_momentum
from .rarity import calculate_rarity
from .risk import calculate_risk, days_until_expiry
from .valuation import estimate_value
from .weights import DEFAULT_WEIGHTS, ScoringWeights, dimension_weight_totals, validate_weights

logger = get_logger("dometrics_scoring.engine")

DEFAULT_VALUATION_TIMEOUT_SECONDS = 8.0
_WEIGHT_TOTAL_TOLERANCE = 1e-6


@dataclass(frozen=True)
class _PrimaryScores:
    risk: CategoryScore
    rarity: CategoryScore
    momentum: CategoryScore

    @property
    def rounded(self) -> tuple[int, int, int]:
        return (
            round_half_up(self.risk.score),
            round_half_up(self.rarity.score),
            round_half_up(self.momentum.score),
        )


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    return ensure_aware(now, "now")


def _money(value: float) -> float:
    return round(value, 2)


class ScoringEngine:
    """Stateless scorer bound to one weights document.

    Raises:
        InvalidConfiguration: At construction when the weights are unusable.
    """

    def __init__(self, weights: ScoringWeights = DEFAULT_WEIGHTS) -> None:
        validate_weights(weights)
        for dimension, total in dimension_weight_totals(weights).items():
            if abs(total - 1.0) > _WEIGHT_TOTAL_TOLERANCE:
                logger.warning(
                    "Weights %s: %s sub-weights sum to %.4f, scores rely on clamping",
                    weights.version,
                    dimension,
                    total,
                )
        self._weights = weights

    @property
    def weights(self) -> ScoringWeights:
        return self._weights

    def market_data(self, domain: DomainDescription, *, now: datetime | None = None) -> MarketData:
        """Market context handed to an external valuation service."""
        current = _resolve_now(now)
        return MarketData(
            days_until_expiry=days_until_expiry(domain, current),
            offer_count=domain.offer_count,
            activity_30d=domain.activity_30d,
            registrar=domain.registrar_name,
            transfer_lock=domain.lock_status,
        )

    def score(self, domain: DomainDescription, *, now: datetime | None = None) -> DomainScores:
        """Score a domain with the deterministic value estimator.

        Raises:
            InvalidTimestamp: If a timestamp on the domain is not a datetime.
        """
        current = _resolve_now(now)
        primary = self._primary_scores(domain, current)
        logger.debug("Scoring %s with weights %s", domain.full_name, self._weights.version)
        return self._assemble(primary, self._deterministic_estimate(domain, primary))

    async def score_async(
        self,
        domain: DomainDescription,
        valuation_service: ValuationService | None,
        *,
        now: datetime | None = None,
        timeout_seconds: float = DEFAULT_VALUATION_TIMEOUT_SECONDS,
    ) -> DomainScores:
        """Score a domain, asking ``valuation_service`` for the value estimate.

        Any failure or timeout of the service falls back to the deterministic
        estimator. Only caller errors such as ``InvalidTimestamp`` propagate.
        """
        current = _resolve_now(now)
        primary = self._primary_scores(domain, current)
        logger.debug("Scoring %s with weights %s (async)", domain.full_name, self._weights.version)
        if valuation_service is None:
            return self._assemble(primary, self._deterministic_estimate(domain, primary))

        market = self.market_data(domain, now=current)
        try:
            response = await asyncio.wait_for(
                valuation_service.evaluate(domain.name, domain.tld, market),
                timeout=timeout_seconds,
            )
            estimate = self._normalise_service_estimate(response)
        except Exception as exc:  # collaborator failures never reach the caller
            logger.warning(
                "Valuation service failed for %s (%s), using deterministic estimate",
                domain.full_name,
                type(exc).__name__,
            )
            estimate = self._deterministic_estimate(domain, primary)
        return self._assemble(primary, estimate)

    def _primary_scores(self, domain: DomainDescription, now: datetime) -> _PrimaryScores:
        return _PrimaryScores(
            risk=calculate_risk(domain, self._weights, now=now),
            rarity=calculate_rarity(domain, self._weights),
            momentum=calculate_momentum(domain, self._weights, now=now),
        )

    def _deterministic_estimate(
        self, domain: DomainDescription, primary: _PrimaryScores
    ) -> ValueEstimate:
        risk, rarity, momentum = primary.rounded
        return estimate_value(domain, risk, rarity, momentum, self._weights)

    def _normalise_service_estimate(self, estimate: ValueEstimate) -> ValueEstimate:
        value = self._weights.value
        numbers = (estimate.current_value, estimate.projected_value, float(estimate.confidence))
        if not all(math.isfinite(number) for number in numbers):
            raise ValuationServiceError("non-finite number in response")
        return replace(
            estimate,
            current_value=max(value.value_floor, estimate.current_value),
            projected_value=max(value.value_floor, estimate.projected_value),
            confidence=max(0, min(value.max_confidence, int(estimate.confidence))),
            factors=rank_factors(estimate.factors, value.top_factors),
            source="valuation_service",
        )

    def _assemble(self, primary: _PrimaryScores, estimate: ValueEstimate) -> DomainScores:
        risk, rarity, momentum = primary.rounded
        forecast = calculate_forecast(risk, rarity, momentum, self._weights)
        return DomainScores(
            risk=risk,
            rarity=rarity,
            momentum=momentum,
            forecast=round_half_up(clamp(forecast.value)),
            forecast_low=_money(forecast.low),
            forecast_high=_money(forecast.high),
            current_value=_money(estimate.current_value),
            projected_value=_money(estimate.projected_value),
            value_confidence=estimate.confidence,
            explainers=Explainers(
                risk=primary.risk.factors,
                rarity=primary.rarity.factors,
                momentum=primary.momentum.factors,
                forecast=forecast.factors,
                value=estimate.factors,
            ),
            weights_version=self._weights.version,
            value_source=estimate.source,
        )
