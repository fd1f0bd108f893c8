"""Risk calculator: how likely a domain is to lapse or change hands badly.

Higher is riskier. Five weighted signals (expiry, lock, ownership stability,
market activity, registrar trust) are summed with an unweighted name-quality
adjustment and the total is clamped to 0-100.

Usage example:
    from datetime import UTC, datetime, timedelta

    from dometrics_scoring.domain.models import DomainDescription
    from dometrics_scoring.domain.risk import calculate_risk
    from dometrics_scoring.domain.weights import DEFAULT_WEIGHTS

    now = datetime.now(UTC)
    domain = DomainDescription(name="ab", tld="com", expires_at=now + timedelta(days=10))
    result = calculate_risk(domain, DEFAULT_WEIGHTS, now=now)
    assert result.score >= 60
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .factors import clamp, days_between, ensure_aware, rank_factors, tier_for
from .models import CategoryScore, DomainDescription, ScoreFactor
from .weights import ScoringWeights, Tier


@dataclass(frozen=True)
class RegistrarTrust:
    label: str  # verified | known | unknown
    risk: float


def days_until_expiry(domain: DomainDescription, now: datetime) -> int:
    expires_at = ensure_aware(domain.expires_at, "expires_at")
    return days_between(now, expires_at)


def domain_age_days(domain: DomainDescription, now: datetime, weights: ScoringWeights) -> int:
    """Days since tokenization; a missing date counts as an already stable domain."""
    if domain.tokenized_at is None:
        return weights.risk.ownership.default_age_days
    tokenized_at = ensure_aware(domain.tokenized_at, "tokenized_at")
    return max(0, days_between(tokenized_at, now))


def expiry_tier(days: int, weights: ScoringWeights) -> Tier:
    return tier_for(days, weights.risk.expiry.tiers)


def activity_recency_days(activity_7d: int, activity_30d: int, weights: ScoringWeights) -> int:
    """Approximate days since the last activity from the windowed counts."""
    market = weights.risk.market_activity
    if activity_7d > 0:
        return market.active_days
    if activity_30d > 0:
        return market.monthly_days
    return market.dormant_days


def ownership_stability(
    age_days: int, renewal_count: int, weights: ScoringWeights
) -> tuple[float, Tier, Tier]:
    """Blend the age and renewal tiers into one raw 0-100 risk value."""
    ownership = weights.risk.ownership
    age = tier_for(age_days, ownership.age_tiers)
    renewals = tier_for(renewal_count, ownership.renewal_tiers)
    blended = age.value * ownership.age_weight + renewals.value * ownership.renewal_weight
    return blended, age, renewals


def market_activity(
    offer_count: int, recency_days: int, weights: ScoringWeights
) -> tuple[float, Tier, Tier]:
    """Blend the offer-count and recency tiers into one raw 0-100 risk value."""
    market = weights.risk.market_activity
    offers = tier_for(offer_count, market.offer_tiers)
    recency = tier_for(recency_days, market.recency_tiers)
    blended = offers.value * market.offer_weight + recency.value * market.recency_weight
    return blended, offers, recency


def registrar_trust(registrar_id: int, weights: ScoringWeights) -> RegistrarTrust:
    registrar = weights.risk.registrar
    if registrar_id in registrar.trusted_ids:
        return RegistrarTrust(label="verified", risk=registrar.verified)
    if registrar_id > 0:
        return RegistrarTrust(label="known", risk=registrar.known)
    return RegistrarTrust(label="unknown", risk=registrar.unknown)


def name_quality_adjustment(name: str, tld: str, weights: ScoringWeights) -> float:
    """Unweighted risk adjustment from label length and TLD reputation."""
    quality = weights.risk.name_quality
    adjustment = tier_for(len(name), quality.length_bands).value
    tld_key = tld.lower()
    if tld_key in quality.obscure_tlds:
        adjustment += quality.obscure_adjustment
    elif tld_key in quality.premium_tlds:
        adjustment += quality.premium_adjustment
    return adjustment


def calculate_risk(
    domain: DomainDescription,
    weights: ScoringWeights,
    *,
    now: datetime,
) -> CategoryScore:
    """Calculate the risk score (0-100, higher = riskier) and its top factors."""
    risk = weights.risk
    factors: list[ScoreFactor] = []
    score = 0.0

    days = days_until_expiry(domain, now)
    tier = expiry_tier(days, weights)
    expiry_contribution = tier.value * risk.expiry.weight
    score += expiry_contribution
    factors.append(
        ScoreFactor(
            name="Expiry Buffer",
            description=f"{days} days until expiration ({tier.name})",
            value=days,
            weight=risk.expiry.weight,
            contribution=expiry_contribution,
        )
    )

    lock_adjustment = risk.lock.locked if domain.lock_status else risk.lock.unlocked
    lock_contribution = lock_adjustment * risk.lock.weight
    score += lock_contribution
    factors.append(
        ScoreFactor(
            name="Lock Status",
            description="Transfer lock enabled" if domain.lock_status else "Domain is unlocked",
            value=1 if domain.lock_status else 0,
            weight=risk.lock.weight,
            contribution=lock_contribution,
        )
    )

    age_days = domain_age_days(domain, now, weights)
    stability, age_tier, renewal_tier = ownership_stability(
        age_days, domain.renewal_count, weights
    )
    stability_contribution = stability * risk.ownership.weight
    score += stability_contribution
    factors.append(
        ScoreFactor(
            name="Ownership Stability",
            description=(
                f"{age_days} days since tokenization ({age_tier.name}), "
                f"{domain.renewal_count} renewals ({renewal_tier.name})"
            ),
            value=stability,
            weight=risk.ownership.weight,
            contribution=stability_contribution,
        )
    )

    recency_days = activity_recency_days(domain.activity_7d, domain.activity_30d, weights)
    activity, offer_tier, recency_tier = market_activity(
        domain.offer_count, recency_days, weights
    )
    activity_contribution = activity * risk.market_activity.weight
    score += activity_contribution
    factors.append(
        ScoreFactor(
            name="Market Activity",
            description=(
                f"{domain.offer_count} offers ({offer_tier.name}), "
                f"last activity ~{recency_days}d ago ({recency_tier.name})"
            ),
            value=activity,
            weight=risk.market_activity.weight,
            contribution=activity_contribution,
        )
    )

    trust = registrar_trust(domain.registrar_id, weights)
    registrar_contribution = trust.risk * risk.registrar.weight
    score += registrar_contribution
    factors.append(
        ScoreFactor(
            name="Registrar Trust",
            description=f"{trust.label.capitalize()} registrar ({domain.registrar_name})",
            value=domain.registrar_id,
            weight=risk.registrar.weight,
            contribution=registrar_contribution,
        )
    )

    quality = name_quality_adjustment(domain.name, domain.tld, weights)
    score += quality
    if abs(quality) > risk.name_quality.display_threshold:
        factors.append(
            ScoreFactor(
                name="Name Quality",
                description=f"{len(domain.name)}-character label on .{domain.tld}",
                value=quality,
                weight=1.0,
                contribution=quality,
            )
        )

    return CategoryScore(score=clamp(score), factors=rank_factors(factors, risk.top_factors))
