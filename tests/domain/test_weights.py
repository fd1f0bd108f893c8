"""Tests for weights validation."""

from dataclasses import replace
from types import MappingProxyType

import pytest

from dometrics_scoring.domain.weights import (
    DEFAULT_WEIGHTS,
    ScoringWeights,
    Tier,
    dimension_weight_totals,
    validate_weights,
)
from dometrics_scoring.exceptions import InvalidConfiguration

RISK = DEFAULT_WEIGHTS.risk


def _with_expiry_tiers(*tiers: Tier) -> ScoringWeights:
    expiry = replace(RISK.expiry, tiers=tiers)
    return replace(DEFAULT_WEIGHTS, risk=replace(RISK, expiry=expiry))


def test_default_weights_are_valid_and_balanced() -> None:
    validate_weights(DEFAULT_WEIGHTS)

    for total in dimension_weight_totals(DEFAULT_WEIGHTS).values():
        assert total == pytest.approx(1.0)


def test_bucket_lookup_is_case_insensitive_with_default() -> None:
    assert DEFAULT_WEIGHTS.bucket_for("DEFI") == "ultra"
    assert DEFAULT_WEIGHTS.bucket_for("example") == "common"


@pytest.mark.parametrize(
    ("weights", "detail"),
    [
        (replace(DEFAULT_WEIGHTS, version="  "), "version must be a non-empty string"),
        (
            replace(DEFAULT_WEIGHTS, risk=replace(RISK, lock=replace(RISK.lock, weight=-1))),
            "risk.lock.weight must not be negative",
        ),
        (
            replace(
                DEFAULT_WEIGHTS,
                forecast=replace(DEFAULT_WEIGHTS.forecast, base_score=float("inf")),
            ),
            "weights.forecast.base_score must be a finite number",
        ),
        (_with_expiry_tiers(), "risk.expiry.tiers must define at least one tier"),
        (
            _with_expiry_tiers(Tier("soon", 14, 100), Tier("later", 90, 10)),
            "risk.expiry.tiers must end with an open-ended tier",
        ),
        (
            _with_expiry_tiers(Tier("a", 30, 100), Tier("b", 14, 50), Tier("c", None, 0)),
            "risk.expiry.tiers bounds must be strictly ascending",
        ),
        (
            _with_expiry_tiers(Tier("a", None, 100), Tier("b", None, 0)),
            "risk.expiry.tiers may only leave the last tier open-ended",
        ),
        (
            replace(
                DEFAULT_WEIGHTS,
                reference=replace(
                    DEFAULT_WEIGHTS.reference,
                    tld_buckets=MappingProxyType({"com": "legendary"}),
                ),
            ),
            "rarity.tld_scarcity.buckets is missing 'legendary'",
        ),
        (
            replace(
                DEFAULT_WEIGHTS,
                forecast=replace(DEFAULT_WEIGHTS.forecast, momentum_divisor=0),
            ),
            "forecast.momentum_divisor must be positive",
        ),
        (
            replace(DEFAULT_WEIGHTS, forecast=replace(DEFAULT_WEIGHTS.forecast, top_factors=0)),
            "forecast.top_factors must be at least 1",
        ),
        (
            replace(DEFAULT_WEIGHTS, value=replace(DEFAULT_WEIGHTS.value, top_factors=-1)),
            "value.top_factors must be at least 1",
        ),
    ],
    ids=[
        "blank-version",
        "negative-weight",
        "non-finite",
        "no-tiers",
        "closed-tiers",
        "unordered-tiers",
        "open-middle-tier",
        "unmapped-bucket",
        "zero-divisor",
        "no-forecast-explainers",
        "negative-value-explainers",
    ],
)
def test_validate_weights_rejects(weights: ScoringWeights, detail: str) -> None:
    with pytest.raises(InvalidConfiguration) as excinfo:
        validate_weights(weights)

    assert excinfo.value.detail == detail
