"""Deterministic value estimator: a layered multiplier model in currency units.

Each layer multiplies the running value; its explainer contribution is the
change in value that layer caused, so the factors read as a price breakdown.
"""

from __future__ import annotations

from dataclasses import dataclass

from .factors import rank_factors, tier_for
from .models import DomainDescription, ScoreFactor, ValueEstimate
from .weights import ScoringWeights


@dataclass(frozen=True)
class KeywordMatch:
    keyword: str
    tier: str  # high | medium
    exact: bool
    multiplier: float


def _longest_match(name: str, keywords: frozenset[str]) -> str | None:
    matches = [keyword for keyword in keywords if keyword and keyword in name]
    if not matches:
        return None
    return sorted(matches, key=lambda keyword: (-len(keyword), keyword))[0]


def match_keyword(name: str, weights: ScoringWeights) -> KeywordMatch | None:
    """Find the strongest keyword in ``name``; high-value keywords win over medium ones."""
    label = name.lower()
    value = weights.value
    keyword = _longest_match(label, weights.reference.high_value_keywords)
    if keyword is not None:
        exact = keyword == label
        multiplier = value.high_value_multiplier * (value.high_value_exact_bonus if exact else 1)
        return KeywordMatch(keyword=keyword, tier="high", exact=exact, multiplier=multiplier)
    keyword = _longest_match(label, weights.reference.medium_value_keywords)
    if keyword is not None:
        exact = keyword == label
        multiplier = value.medium_value_multiplier * (
            value.medium_value_exact_bonus if exact else 1
        )
        return KeywordMatch(keyword=keyword, tier="medium", exact=exact, multiplier=multiplier)
    return None


def market_multiplier(offer_count: int, activity_30d: int, weights: ScoringWeights) -> float:
    value = weights.value
    raw = 1 + offer_count * value.offer_multiplier + activity_30d * value.activity_multiplier
    return min(raw, value.max_market_multiplier)


def risk_multiplier(risk: float, weights: ScoringWeights) -> float:
    value = weights.value
    return max(value.min_risk_multiplier, 1 - risk / 100 * value.risk_impact)


def growth_rate(risk: float, rarity: float, momentum: float, weights: ScoringWeights) -> float:
    """Six-month value growth rate from the three primary scores."""
    value = weights.value
    return (
        value.base_growth
        + (momentum - 50) / 100 * value.momentum_growth
        + rarity / 100 * value.rarity_growth
        - risk / 100 * value.risk_growth_penalty
    )


def value_confidence(
    domain: DomainDescription, keyword: KeywordMatch | None, weights: ScoringWeights
) -> int:
    value = weights.value
    confidence = value.base_confidence
    if domain.activity_30d > value.activity_confidence_threshold:
        confidence += value.confidence_step
    if domain.offer_count > value.offer_confidence_threshold:
        confidence += value.confidence_step
    if keyword is not None:
        confidence += value.confidence_step
    return max(0, min(value.max_confidence, confidence))


def estimate_value(
    domain: DomainDescription,
    risk: float,
    rarity: float,
    momentum: float,
    weights: ScoringWeights,
) -> ValueEstimate:
    """Estimate the current and six-month projected value of a domain."""
    value = weights.value

    length = len(domain.name)
    length_tier = tier_for(length, value.length_multipliers)
    length_value = value.base_value * length_tier.value

    keyword = match_keyword(domain.name, weights)
    keyword_multiplier = keyword.multiplier if keyword is not None else 1.0
    keyword_value = length_value * keyword_multiplier

    bucket = weights.bucket_for(domain.tld)
    tld_multiplier = value.tld_multipliers.get(bucket, 1.0)
    tld_value = keyword_value * tld_multiplier

    activity_multiplier = market_multiplier(domain.offer_count, domain.activity_30d, weights)
    market_value = tld_value * activity_multiplier

    risk_adjustment = risk_multiplier(risk, weights)
    risked_value = market_value * risk_adjustment
    current_value = max(value.value_floor, risked_value)

    rate = growth_rate(risk, rarity, momentum, weights)
    projected_value = max(value.value_floor, current_value * (1 + rate))

    if keyword is None:
        keyword_description = "No premium keyword"
    else:
        kind = "exact" if keyword.exact else "contains"
        tier = keyword.tier.capitalize()
        keyword_description = f"{tier}-value keyword '{keyword.keyword}' ({kind})"

    factors = [
        ScoreFactor(
            name="Name Length",
            description=f"{length} characters ({length_tier.name}, x{length_tier.value:g})",
            value=length,
            weight=length_tier.value,
            contribution=length_value - value.base_value,
        ),
        ScoreFactor(
            name="Keyword Premium",
            description=keyword_description,
            value=keyword_multiplier,
            weight=keyword_multiplier,
            contribution=keyword_value - length_value,
        ),
        ScoreFactor(
            name="TLD Premium",
            description=f".{domain.tld} is {bucket} (x{tld_multiplier:g})",
            value=tld_multiplier,
            weight=tld_multiplier,
            contribution=tld_value - keyword_value,
        ),
        ScoreFactor(
            name="Market Activity",
            description=f"{domain.offer_count} offers, {domain.activity_30d} events in 30d",
            value=activity_multiplier,
            weight=activity_multiplier,
            contribution=market_value - tld_value,
        ),
        ScoreFactor(
            name="Risk Discount",
            description=f"Risk {risk:.0f}/100 keeps {risk_adjustment:.0%} of value",
            value=risk,
            weight=risk_adjustment,
            contribution=risked_value - market_value,
        ),
    ]

    return ValueEstimate(
        current_value=current_value,
        projected_value=projected_value,
        confidence=value_confidence(domain, keyword, weights),
        factors=rank_factors(factors, value.top_factors),
    )
