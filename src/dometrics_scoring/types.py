"""Typed document shapes shared across IO boundaries."""

from __future__ import annotations

from typing import TypedDict


class ScoreFactorDocument(TypedDict):
    name: str
    description: str
    value: float
    weight: float
    contribution: float


class ExplainersDocument(TypedDict):
    risk: list[ScoreFactorDocument]
    rarity: list[ScoreFactorDocument]
    momentum: list[ScoreFactorDocument]
    forecast: list[ScoreFactorDocument]
    value: list[ScoreFactorDocument]


class DomainScoresDocument(TypedDict):
    risk: int
    rarity: int
    momentum: int
    forecast: int
    forecast_low: float
    forecast_high: float
    current_value: float
    projected_value: float
    value_confidence: int
    value_source: str
    weights_version: str
    explainers: ExplainersDocument


class DomainInputRow(TypedDict, total=False):
    """One inbound domain record as read from CSV or JSON (all optional but name/tld/expiry)."""

    name: str
    tld: str
    expires_at: str
    lock_status: str | bool
    registrar_id: str | int
    registrar_name: str
    renewal_count: str | int
    offer_count: str | int
    activity_7d: str | int
    activity_30d: str | int
    tokenized_at: str | None
    trend_popularity: str | float | None
    trend_direction: str | None


class ScoredDomainRow(TypedDict):
    """One row of the batch scoring output."""

    domain: str
    name: str
    tld: str
    risk: int
    rarity: int
    momentum: int
    forecast: int
    forecast_low: float
    forecast_high: float
    current_value: float
    projected_value: float
    value_confidence: int
    offer_count: int
    weights_version: str


class ExplainRow(TypedDict):
    """One explainer factor row of the batch scoring output."""

    domain: str
    category: str
    rank: int
    factor: str
    description: str
    value: float
    weight: float
    contribution: float
