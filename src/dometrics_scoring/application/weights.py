"""Loading and strict validation for scoring weights documents."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from ..domain.weights import (
    ActivityTrendMomentum,
    DictionaryRarity,
    ExpiryRisk,
    ForecastWeights,
    HistoricDemandRarity,
    LockRisk,
    MarketActivityRisk,
    MomentumWeights,
    NameLengthRarity,
    NameQualityRisk,
    OwnershipRisk,
    RarityWeights,
    RecentEventsMomentum,
    ReferenceTables,
    RegistrarRisk,
    RiskWeights,
    ScoringWeights,
    SearchPopularityMomentum,
    Tier,
    TldScarcityRarity,
    ValueWeights,
    validate_weights,
)
from ..exceptions import InvalidConfiguration, WeightsFileNotFoundError, WeightsValidationError
from ..protocols import FileSystem


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class _TierModel(_Strict):
    name: str
    upper_bound: float | None
    value: float

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text


class _ExpiryModel(_Strict):
    weight: float
    tiers: tuple[_TierModel, ...]


class _LockModel(_Strict):
    weight: float
    locked: float
    unlocked: float


class _OwnershipModel(_Strict):
    weight: float
    age_weight: float
    renewal_weight: float
    default_age_days: int
    age_tiers: tuple[_TierModel, ...]
    renewal_tiers: tuple[_TierModel, ...]


class _MarketActivityModel(_Strict):
    weight: float
    offer_weight: float
    recency_weight: float
    offer_tiers: tuple[_TierModel, ...]
    recency_tiers: tuple[_TierModel, ...]
    active_days: int
    monthly_days: int
    dormant_days: int


class _RegistrarModel(_Strict):
    weight: float
    verified: float
    known: float
    unknown: float
    trusted_ids: tuple[int, ...]


class _NameQualityModel(_Strict):
    length_bands: tuple[_TierModel, ...]
    obscure_tlds: tuple[str, ...]
    obscure_adjustment: float
    premium_tlds: tuple[str, ...]
    premium_adjustment: float
    display_threshold: float

    @field_validator("obscure_tlds", "premium_tlds")
    @classmethod
    def _normalise_tlds(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _normalise_words(value)


class _RiskModel(_Strict):
    expiry: _ExpiryModel
    lock: _LockModel
    ownership: _OwnershipModel
    market_activity: _MarketActivityModel
    registrar: _RegistrarModel
    name_quality: _NameQualityModel
    top_factors: int


class _NameLengthModel(_Strict):
    weight: float
    max_rarity_length: int
    min_rarity_length: int


class _DictionaryModel(_Strict):
    weight: float
    dictionary: float
    brandable: float
    random: float
    brandable_min_length: int
    brandable_max_length: int

    @model_validator(mode="after")
    def _validate_lengths(self) -> _DictionaryModel:
        if self.brandable_min_length > self.brandable_max_length:
            raise ValueError
        return self


class _TldScarcityModel(_Strict):
    weight: float
    buckets: dict[str, float]


class _HistoricDemandModel(_Strict):
    weight: float
    base_value: float
    per_offer: float


class _RarityModel(_Strict):
    name_length: _NameLengthModel
    dictionary: _DictionaryModel
    tld_scarcity: _TldScarcityModel
    historic_demand: _HistoricDemandModel
    top_factors: int


class _ActivityTrendModel(_Strict):
    weight: float
    weekly_to_monthly: float


class _RecentEventsModel(_Strict):
    weight: float
    window_hours: int
    points_per_event: float


class _SearchPopularityModel(_Strict):
    weight: float
    default_popularity: float
    trend_adjustment: float


class _MomentumModel(_Strict):
    activity_trend: _ActivityTrendModel
    recent_events: _RecentEventsModel
    search_popularity: _SearchPopularityModel
    top_factors: int


class _ForecastModel(_Strict):
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


class _ValueModel(_Strict):
    base_value: float
    value_floor: float
    length_multipliers: tuple[_TierModel, ...]
    high_value_multiplier: float
    high_value_exact_bonus: float
    medium_value_multiplier: float
    medium_value_exact_bonus: float
    tld_multipliers: dict[str, float]
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


class _ReferenceModel(_Strict):
    tld_buckets: dict[str, str]
    default_bucket: str
    dictionary_words: tuple[str, ...]
    high_value_keywords: tuple[str, ...]
    medium_value_keywords: tuple[str, ...]

    @field_validator("dictionary_words", "high_value_keywords", "medium_value_keywords")
    @classmethod
    def _normalise(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _normalise_words(value)

    @field_validator("tld_buckets")
    @classmethod
    def _normalise_buckets(cls, value: dict[str, str]) -> dict[str, str]:
        cleaned: dict[str, str] = {}
        for tld, bucket in value.items():
            key = tld.strip().lower()
            if not key or not bucket.strip():
                raise ValueError
            cleaned[key] = bucket.strip()
        return cleaned


class _ScoringWeightsModel(_Strict):
    version: str
    risk: _RiskModel
    rarity: _RarityModel
    momentum: _MomentumModel
    forecast: _ForecastModel
    value: _ValueModel
    reference: _ReferenceModel

    @field_validator("version")
    @classmethod
    def _validate_version(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text


def _normalise_words(values: tuple[str, ...]) -> tuple[str, ...]:
    if any(not value.strip() for value in values):
        raise ValueError
    return tuple(value.strip().lower() for value in values)


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def _to_readonly_mapping[ValueT](values: Mapping[str, ValueT]) -> MappingProxyType[str, ValueT]:
    return MappingProxyType(dict(values))


def _to_tiers(models: tuple[_TierModel, ...]) -> tuple[Tier, ...]:
    return tuple(
        Tier(name=model.name, upper_bound=model.upper_bound, value=model.value) for model in models
    )


def _to_risk(model: _RiskModel) -> RiskWeights:
    return RiskWeights(
        expiry=ExpiryRisk(weight=model.expiry.weight, tiers=_to_tiers(model.expiry.tiers)),
        lock=LockRisk(
            weight=model.lock.weight, locked=model.lock.locked, unlocked=model.lock.unlocked
        ),
        ownership=OwnershipRisk(
            weight=model.ownership.weight,
            age_weight=model.ownership.age_weight,
            renewal_weight=model.ownership.renewal_weight,
            default_age_days=model.ownership.default_age_days,
            age_tiers=_to_tiers(model.ownership.age_tiers),
            renewal_tiers=_to_tiers(model.ownership.renewal_tiers),
        ),
        market_activity=MarketActivityRisk(
            weight=model.market_activity.weight,
            offer_weight=model.market_activity.offer_weight,
            recency_weight=model.market_activity.recency_weight,
            offer_tiers=_to_tiers(model.market_activity.offer_tiers),
            recency_tiers=_to_tiers(model.market_activity.recency_tiers),
            active_days=model.market_activity.active_days,
            monthly_days=model.market_activity.monthly_days,
            dormant_days=model.market_activity.dormant_days,
        ),
        registrar=RegistrarRisk(
            weight=model.registrar.weight,
            verified=model.registrar.verified,
            known=model.registrar.known,
            unknown=model.registrar.unknown,
            trusted_ids=frozenset(model.registrar.trusted_ids),
        ),
        name_quality=NameQualityRisk(
            length_bands=_to_tiers(model.name_quality.length_bands),
            obscure_tlds=frozenset(model.name_quality.obscure_tlds),
            obscure_adjustment=model.name_quality.obscure_adjustment,
            premium_tlds=frozenset(model.name_quality.premium_tlds),
            premium_adjustment=model.name_quality.premium_adjustment,
            display_threshold=model.name_quality.display_threshold,
        ),
        top_factors=model.top_factors,
    )


def _to_rarity(model: _RarityModel) -> RarityWeights:
    return RarityWeights(
        name_length=NameLengthRarity(
            weight=model.name_length.weight,
            max_rarity_length=model.name_length.max_rarity_length,
            min_rarity_length=model.name_length.min_rarity_length,
        ),
        dictionary=DictionaryRarity(
            weight=model.dictionary.weight,
            dictionary=model.dictionary.dictionary,
            brandable=model.dictionary.brandable,
            random=model.dictionary.random,
            brandable_min_length=model.dictionary.brandable_min_length,
            brandable_max_length=model.dictionary.brandable_max_length,
        ),
        tld_scarcity=TldScarcityRarity(
            weight=model.tld_scarcity.weight,
            buckets=_to_readonly_mapping(model.tld_scarcity.buckets),
        ),
        historic_demand=HistoricDemandRarity(
            weight=model.historic_demand.weight,
            base_value=model.historic_demand.base_value,
            per_offer=model.historic_demand.per_offer,
        ),
        top_factors=model.top_factors,
    )


def _to_momentum(model: _MomentumModel) -> MomentumWeights:
    return MomentumWeights(
        activity_trend=ActivityTrendMomentum(
            weight=model.activity_trend.weight,
            weekly_to_monthly=model.activity_trend.weekly_to_monthly,
        ),
        recent_events=RecentEventsMomentum(
            weight=model.recent_events.weight,
            window_hours=model.recent_events.window_hours,
            points_per_event=model.recent_events.points_per_event,
        ),
        search_popularity=SearchPopularityMomentum(
            weight=model.search_popularity.weight,
            default_popularity=model.search_popularity.default_popularity,
            trend_adjustment=model.search_popularity.trend_adjustment,
        ),
        top_factors=model.top_factors,
    )


def _to_forecast(model: _ForecastModel) -> ForecastWeights:
    return ForecastWeights(**model.model_dump())


def _to_value(model: _ValueModel) -> ValueWeights:
    scalars = model.model_dump(exclude={"length_multipliers", "tld_multipliers"})
    return ValueWeights(
        **scalars,
        length_multipliers=_to_tiers(model.length_multipliers),
        tld_multipliers=_to_readonly_mapping(model.tld_multipliers),
    )


def _to_reference(model: _ReferenceModel) -> ReferenceTables:
    return ReferenceTables(
        tld_buckets=_to_readonly_mapping(model.tld_buckets),
        default_bucket=model.default_bucket,
        dictionary_words=frozenset(model.dictionary_words),
        high_value_keywords=frozenset(model.high_value_keywords),
        medium_value_keywords=frozenset(model.medium_value_keywords),
    )


def parse_scoring_weights(payload: str | bytes, *, source: str = "<weights>") -> ScoringWeights:
    """Validate a weights JSON document and convert it to ``ScoringWeights``.

    Raises:
        WeightsValidationError: If the document is malformed or its values are unusable.
    """
    try:
        model = _ScoringWeightsModel.model_validate_json(payload)
    except ValidationError as exc:
        raise WeightsValidationError(source, _format_validation_error(exc)) from exc

    weights = ScoringWeights(
        version=model.version,
        risk=_to_risk(model.risk),
        rarity=_to_rarity(model.rarity),
        momentum=_to_momentum(model.momentum),
        forecast=_to_forecast(model.forecast),
        value=_to_value(model.value),
        reference=_to_reference(model.reference),
    )
    try:
        validate_weights(weights)
    except InvalidConfiguration as exc:
        raise WeightsValidationError(source, exc.detail) from exc
    return weights


def load_scoring_weights(*, path: Path, fs: FileSystem) -> ScoringWeights:
    """Load and validate a scoring weights document from JSON."""
    if not fs.exists(path):
        raise WeightsFileNotFoundError(str(path))
    return parse_scoring_weights(fs.read_text(path), source=str(path))


def _to_document(node: object) -> object:
    if is_dataclass(node) and not isinstance(node, type):
        return {item.name: _to_document(getattr(node, item.name)) for item in fields(node)}
    if isinstance(node, Mapping):
        return {str(key): _to_document(node[key]) for key in sorted(node)}
    if isinstance(node, frozenset):
        return sorted(node)
    if isinstance(node, tuple):
        return [_to_document(item) for item in node]
    return node


def weights_to_document(weights: ScoringWeights) -> dict[str, object]:
    """Render weights as a JSON-ready document accepted by ``parse_scoring_weights``."""
    return {item.name: _to_document(getattr(weights, item.name)) for item in fields(weights)}
