"""Domain model for the versioned scoring weights document.

Every table the calculators read lives here, including the reference data
(TLD buckets, dictionary words, keyword sets) so it can be swapped by loading a
different document instead of editing code. ``DEFAULT_WEIGHTS`` is the
documented built-in configuration used when no document is supplied.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, fields, is_dataclass
from types import MappingProxyType

from ..exceptions import InvalidConfiguration


@dataclass(frozen=True)
class Tier:
    """An ordered bucket: applies when the input is at most ``upper_bound``.

    The last tier of a table has ``upper_bound=None`` and catches everything else.
    """

    name: str
    upper_bound: float | None
    value: float


@dataclass(frozen=True)
class ExpiryRisk:
    weight: float
    tiers: tuple[Tier, ...]


@dataclass(frozen=True)
class LockRisk:
    weight: float
    locked: float
    unlocked: float


@dataclass(frozen=True)
class OwnershipRisk:
    weight: float
    age_weight: float
    renewal_weight: float
    default_age_days: int
    age_tiers: tuple[Tier, ...]
    renewal_tiers: tuple[Tier, ...]


@dataclass(frozen=True)
class MarketActivityRisk:
    weight: float
    offer_weight: float
    recency_weight: float
    offer_tiers: tuple[Tier, ...]
    recency_tiers: tuple[Tier, ...]
    active_days: int  # proxy when there was activity in the last 7 days
    monthly_days: int  # proxy when there was activity in the last 30 days only
    dormant_days: int


@dataclass(frozen=True)
class RegistrarRisk:
    weight: float
    verified: float
    known: float
    unknown: float
    trusted_ids: frozenset[int]


@dataclass(frozen=True)
class NameQualityRisk:
    length_bands: tuple[Tier, ...]
    obscure_tlds: frozenset[str]
    obscure_adjustment: float
    premium_tlds: frozenset[str]
    premium_adjustment: float
    display_threshold: float


@dataclass(frozen=True)
class RiskWeights:
    expiry: ExpiryRisk
    lock: LockRisk
    ownership: OwnershipRisk
    market_activity: MarketActivityRisk
    registrar: RegistrarRisk
    name_quality: NameQualityRisk
    top_factors: int


@dataclass(frozen=True)
class NameLengthRarity:
    weight: float
    max_rarity_length: int
    min_rarity_length: int


@dataclass(frozen=True)
class DictionaryRarity:
    weight: float
    dictionary: float
    brandable: float
    random: float
    brandable_min_length: int
    brandable_max_length: int


@dataclass(frozen=True)
class TldScarcityRarity:
    weight: float
    buckets: MappingProxyType[str, float]


@dataclass(frozen=True)
class HistoricDemandRarity:
    weight: float
    base_value: float
    per_offer: float


@dataclass(frozen=True)
class RarityWeights:
    name_length: NameLengthRarity
    dictionary: DictionaryRarity
    tld_scarcity: TldScarcityRarity
    historic_demand: HistoricDemandRarity
    top_factors: int


@dataclass(frozen=True)
class ActivityTrendMomentum:
    weight: float
    weekly_to_monthly: float  # scales a 7-day count to a 30-day rate


@dataclass(frozen=True)
class RecentEventsMomentum:
    weight: float
    window_hours: int
    points_per_event: float


@dataclass(frozen=True)
class SearchPopularityMomentum:
    weight: float
    default_popularity: float
    trend_adjustment: float


@dataclass(frozen=True)
class MomentumWeights:
    activity_trend: ActivityTrendMomentum
    recent_events: RecentEventsMomentum
    search_popularity: SearchPopularityMomentum
    top_factors: int


@dataclass(frozen=True)
class ForecastWeights:
    base_annual_growth: float
    rarity_boost: float
    momentum_divisor: float
    risk_penalty: float
    horizon_years: float
    base_score: float
    growth_scale: float
    max_growth_points: float
    confidence_band: float
    top_factors: int


@dataclass(frozen=True)
class ValueWeights:
    base_value: float
    value_floor: float
    length_multipliers: tuple[Tier, ...]
    high_value_multiplier: float
    high_value_exact_bonus: float
    medium_value_multiplier: float
    medium_value_exact_bonus: float
    tld_multipliers: MappingProxyType[str, float]
    offer_multiplier: float
    activity_multiplier: float
    max_market_multiplier: float
    risk_impact: float
    min_risk_multiplier: float
    base_growth: float
    momentum_growth: float
    rarity_growth: float
    risk_growth_penalty: float
    base_confidence: int
    confidence_step: int
    activity_confidence_threshold: int
    offer_confidence_threshold: int
    max_confidence: int
    top_factors: int


@dataclass(frozen=True)
class ReferenceTables:
    tld_buckets: MappingProxyType[str, str]
    default_bucket: str
    dictionary_words: frozenset[str]
    high_value_keywords: frozenset[str]
    medium_value_keywords: frozenset[str]


@dataclass(frozen=True)
class ScoringWeights:
    """The complete, versioned weights document."""

    version: str
    risk: RiskWeights
    rarity: RarityWeights
    momentum: MomentumWeights
    forecast: ForecastWeights
    value: ValueWeights
    reference: ReferenceTables

    def bucket_for(self, tld: str) -> str:
        return self.reference.tld_buckets.get(tld.lower(), self.reference.default_bucket)


def _tiers(*rows: tuple[str, float | None, float]) -> tuple[Tier, ...]:
    return tuple(Tier(name=name, upper_bound=bound, value=value) for name, bound, value in rows)


DEFAULT_WEIGHTS = ScoringWeights(
    version="v2",
    risk=RiskWeights(
        expiry=ExpiryRisk(
            weight=0.35,
            tiers=_tiers(
                ("critical", 14, 100),
                ("urgent", 30, 85),
                ("warning", 60, 65),
                ("moderate", 90, 45),
                ("stable", 180, 25),
                ("safe", 365, 10),
                ("veryLow", None, 0),
            ),
        ),
        lock=LockRisk(weight=0.15, locked=-15, unlocked=15),
        ownership=OwnershipRisk(
            weight=0.20,
            age_weight=0.6,
            renewal_weight=0.4,
            default_age_days=365,
            age_tiers=_tiers(
                ("new", 90, 100),
                ("young", 365, 75),
                ("established", 730, 40),
                ("mature", None, 15),
            ),
            renewal_tiers=_tiers(
                ("never", 0, 100),
                ("rare", 1, 60),
                ("normal", 3, 30),
                ("frequent", None, 10),
            ),
        ),
        market_activity=MarketActivityRisk(
            weight=0.20,
            offer_weight=0.6,
            recency_weight=0.4,
            offer_tiers=_tiers(
                ("none", 0, 100),
                ("low", 2, 70),
                ("moderate", 5, 45),
                ("high", 10, 20),
                ("veryHigh", None, 5),
            ),
            recency_tiers=_tiers(
                ("immediate", 1, 0),
                ("recent", 7, 20),
                ("moderate", 30, 50),
                ("stale", 60, 75),
                ("dormant", None, 100),
            ),
            active_days=0,
            monthly_days=15,
            dormant_days=90,
        ),
        registrar=RegistrarRisk(
            weight=0.10,
            verified=0,
            known=5,
            unknown=15,
            trusted_ids=frozenset({1, 2, 3, 101, 102, 103}),
        ),
        name_quality=NameQualityRisk(
            length_bands=_tiers(
                ("short", 4, -15),
                ("compact", 8, -5),
                ("average", 12, 5),
                ("long", 18, 15),
                ("veryLong", None, 25),
            ),
            obscure_tlds=frozenset(
                {"xyz", "top", "click", "loan", "work", "tk", "ml", "ga", "cf", "gq"}
            ),
            obscure_adjustment=10,
            premium_tlds=frozenset({"eth", "defi", "io", "ai"}),
            premium_adjustment=-5,
            display_threshold=3,
        ),
        top_factors=3,
    ),
    rarity=RarityWeights(
        name_length=NameLengthRarity(weight=0.40, max_rarity_length=4, min_rarity_length=12),
        dictionary=DictionaryRarity(
            weight=0.25,
            dictionary=25,
            brandable=15,
            random=0,
            brandable_min_length=4,
            brandable_max_length=8,
        ),
        tld_scarcity=TldScarcityRarity(
            weight=0.25,
            buckets=MappingProxyType({"ultra": 25, "rare": 20, "common": 10, "abundant": 0}),
        ),
        historic_demand=HistoricDemandRarity(weight=0.10, base_value=10, per_offer=2),
        top_factors=3,
    ),
    momentum=MomentumWeights(
        activity_trend=ActivityTrendMomentum(weight=0.50, weekly_to_monthly=4.3),
        recent_events=RecentEventsMomentum(weight=0.25, window_hours=72, points_per_event=33),
        search_popularity=SearchPopularityMomentum(
            weight=0.25, default_popularity=50, trend_adjustment=0.15
        ),
        top_factors=3,
    ),
    forecast=ForecastWeights(
        base_annual_growth=0.15,
        rarity_boost=0.5,
        momentum_divisor=500,
        risk_penalty=0.3,
        horizon_years=0.5,
        base_score=40,
        growth_scale=120,
        max_growth_points=60,
        confidence_band=8,
        top_factors=2,
    ),
    value=ValueWeights(
        base_value=100,
        value_floor=100,
        length_multipliers=_tiers(
            ("ultraShort", 3, 50),
            ("short", 5, 20),
            ("medium", 7, 8),
            ("long", 10, 3),
            ("veryLong", None, 1),
        ),
        high_value_multiplier=15,
        high_value_exact_bonus=2,
        medium_value_multiplier=5,
        medium_value_exact_bonus=1.5,
        tld_multipliers=MappingProxyType({"ultra": 3, "rare": 2, "common": 1.2, "abundant": 0.8}),
        offer_multiplier=0.1,
        activity_multiplier=0.02,
        max_market_multiplier=3,
        risk_impact=0.7,
        min_risk_multiplier=0.3,
        base_growth=0.075,
        momentum_growth=0.4,
        rarity_growth=0.25,
        risk_growth_penalty=0.15,
        base_confidence=70,
        confidence_step=10,
        activity_confidence_threshold=10,
        offer_confidence_threshold=3,
        max_confidence=95,
        top_factors=4,
    ),
    reference=ReferenceTables(
        tld_buckets=MappingProxyType(
            {
                "com": "common",
                "net": "common",
                "org": "common",
                "io": "rare",
                "xyz": "abundant",
                "eth": "ultra",
                "crypto": "rare",
                "nft": "rare",
                "dao": "rare",
                "defi": "ultra",
            }
        ),
        default_bucket="common",
        dictionary_words=frozenset(
            {
                "home", "tech", "data", "cloud", "smart", "digital", "crypto", "web",
                "meta", "verse", "chain", "token", "coin", "defi", "nft", "dao",
                "swap", "vault", "stake", "yield",
            }
        ),
        high_value_keywords=frozenset(
            {
                "ai", "crypto", "defi", "nft", "web3", "bank", "pay", "finance", "bet",
                "casino", "insurance", "loan", "cloud", "meta", "dao", "token", "coin",
                "chain", "swap", "trade",
            }
        ),
        medium_value_keywords=frozenset(
            {
                "tech", "data", "app", "shop", "store", "digital", "smart", "home",
                "health", "game", "media", "labs", "hub", "online", "market", "vault",
                "stake", "yield", "world", "verse",
            }
        ),
    ),
)


def _walk_numbers(node: object, path: str) -> Iterator[tuple[str, float]]:
    if isinstance(node, bool):
        return
    if isinstance(node, int | float):
        yield path, float(node)
    elif is_dataclass(node):
        for item in fields(node):
            yield from _walk_numbers(getattr(node, item.name), f"{path}.{item.name}")
    elif isinstance(node, MappingProxyType | dict):
        for key, value in node.items():
            yield from _walk_numbers(value, f"{path}.{key}")
    elif isinstance(node, tuple):
        for index, value in enumerate(node):
            yield from _walk_numbers(value, f"{path}[{index}]")


def _check_tiers(path: str, tiers: tuple[Tier, ...]) -> None:
    if not tiers:
        raise InvalidConfiguration(f"{path} must define at least one tier")
    if tiers[-1].upper_bound is not None:
        raise InvalidConfiguration(f"{path} must end with an open-ended tier")
    bounds: list[float] = []
    for tier in tiers[:-1]:
        if tier.upper_bound is None:
            raise InvalidConfiguration(f"{path} may only leave the last tier open-ended")
        bounds.append(tier.upper_bound)
    if any(later <= earlier for earlier, later in zip(bounds, bounds[1:], strict=False)):
        raise InvalidConfiguration(f"{path} bounds must be strictly ascending")


def validate_weights(weights: ScoringWeights) -> None:
    """Fail fast on weights that could silently skew scores.

    Raises:
        InvalidConfiguration: On non-finite numbers, negative weights, empty or
            unordered tier tables, explainer counts below 1, or missing bucket mappings.
    """
    if not weights.version.strip():
        raise InvalidConfiguration("version must be a non-empty string")

    for path, number in _walk_numbers(weights, "weights"):
        if not math.isfinite(number):
            raise InvalidConfiguration(f"{path} must be a finite number")

    risk = weights.risk
    dimension_weights = {
        "risk.expiry.weight": risk.expiry.weight,
        "risk.lock.weight": risk.lock.weight,
        "risk.ownership.weight": risk.ownership.weight,
        "risk.ownership.age_weight": risk.ownership.age_weight,
        "risk.ownership.renewal_weight": risk.ownership.renewal_weight,
        "risk.market_activity.weight": risk.market_activity.weight,
        "risk.market_activity.offer_weight": risk.market_activity.offer_weight,
        "risk.market_activity.recency_weight": risk.market_activity.recency_weight,
        "risk.registrar.weight": risk.registrar.weight,
        "rarity.name_length.weight": weights.rarity.name_length.weight,
        "rarity.dictionary.weight": weights.rarity.dictionary.weight,
        "rarity.tld_scarcity.weight": weights.rarity.tld_scarcity.weight,
        "rarity.historic_demand.weight": weights.rarity.historic_demand.weight,
        "momentum.activity_trend.weight": weights.momentum.activity_trend.weight,
        "momentum.recent_events.weight": weights.momentum.recent_events.weight,
        "momentum.search_popularity.weight": weights.momentum.search_popularity.weight,
    }
    for path, value in dimension_weights.items():
        if value < 0:
            raise InvalidConfiguration(f"{path} must not be negative")

    _check_tiers("risk.expiry.tiers", risk.expiry.tiers)
    _check_tiers("risk.ownership.age_tiers", risk.ownership.age_tiers)
    _check_tiers("risk.ownership.renewal_tiers", risk.ownership.renewal_tiers)
    _check_tiers("risk.market_activity.offer_tiers", risk.market_activity.offer_tiers)
    _check_tiers("risk.market_activity.recency_tiers", risk.market_activity.recency_tiers)
    _check_tiers("risk.name_quality.length_bands", risk.name_quality.length_bands)
    _check_tiers("value.length_multipliers", weights.value.length_multipliers)

    if weights.rarity.name_length.min_rarity_length <= weights.rarity.name_length.max_rarity_length:
        raise InvalidConfiguration(
            "rarity.name_length.min_rarity_length must exceed max_rarity_length"
        )
    if weights.forecast.momentum_divisor <= 0:
        raise InvalidConfiguration("forecast.momentum_divisor must be positive")

    explainer_counts = {
        "risk.top_factors": risk.top_factors,
        "rarity.top_factors": weights.rarity.top_factors,
        "momentum.top_factors": weights.momentum.top_factors,
        "forecast.top_factors": weights.forecast.top_factors,
        "value.top_factors": weights.value.top_factors,
    }
    for path, count in explainer_counts.items():
        if count < 1:
            raise InvalidConfiguration(f"{path} must be at least 1")

    buckets = set(weights.reference.tld_buckets.values()) | {weights.reference.default_bucket}
    for bucket in sorted(buckets):
        if bucket not in weights.rarity.tld_scarcity.buckets:
            raise InvalidConfiguration(f"rarity.tld_scarcity.buckets is missing '{bucket}'")
        if bucket not in weights.value.tld_multipliers:
            raise InvalidConfiguration(f"value.tld_multipliers is missing '{bucket}'")


def dimension_weight_totals(weights: ScoringWeights) -> dict[str, float]:
    """Sum the top-level weights of each weighted dimension (1.0 by convention)."""
    risk = weights.risk
    rarity = weights.rarity
    momentum = weights.momentum
    return {
        "risk": risk.expiry.weight
        + risk.lock.weight
        + risk.ownership.weight
        + risk.market_activity.weight
        + risk.registrar.weight,
        "risk.ownership": risk.ownership.age_weight + risk.ownership.renewal_weight,
        "risk.market_activity": risk.market_activity.offer_weight
        + risk.market_activity.recency_weight,
        "rarity": rarity.name_length.weight
        + rarity.dictionary.weight
        + rarity.tld_scarcity.weight
        + rarity.historic_demand.weight,
        "momentum": momentum.activity_trend.weight
        + momentum.recent_events.weight
        + momentum.search_popularity.weight,
    }
