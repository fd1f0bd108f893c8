"""Tests for loading scoring weights documents."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from dometrics_scoring.application.weights import (
    load_scoring_weights,
    parse_scoring_weights,
    weights_to_document,
)
from dometrics_scoring.domain.weights import DEFAULT_WEIGHTS
from dometrics_scoring.exceptions import (
    InvalidConfiguration,
    WeightsFileNotFoundError,
    WeightsValidationError,
)
from dometrics_scoring.infrastructure import LocalFileSystem
from tests.fakes import InMemoryFileSystem

SHIPPED_WEIGHTS = Path(__file__).resolve().parents[2] / "data/reference/scoring_weights.json"


def _default_document() -> dict[str, Any]:
    return json.loads(json.dumps(weights_to_document(DEFAULT_WEIGHTS)))


def test_shipped_document_matches_defaults() -> None:
    weights = load_scoring_weights(path=SHIPPED_WEIGHTS, fs=LocalFileSystem())

    assert weights == DEFAULT_WEIGHTS


def test_exported_document_parses_back_to_the_same_weights() -> None:
    payload = json.dumps(weights_to_document(DEFAULT_WEIGHTS))

    assert parse_scoring_weights(payload) == DEFAULT_WEIGHTS


def test_exported_document_is_sorted_and_plain() -> None:
    document = _default_document()
    reference = document["reference"]

    assert isinstance(reference, dict)
    assert reference["dictionary_words"][:3] == ["chain", "cloud", "coin"]
    assert list(reference["tld_buckets"])[:2] == ["com", "crypto"]


def test_words_and_tlds_are_normalised() -> None:
    document = _default_document()
    document["reference"]["dictionary_words"] = [" Dragon ", "CLOUD"]
    document["reference"]["tld_buckets"] = {" COM ": "common"}

    weights = parse_scoring_weights(json.dumps(document))

    assert weights.reference.dictionary_words == frozenset({"dragon", "cloud"})
    assert weights.bucket_for("com") == "common"


def test_missing_file(in_memory_fs: InMemoryFileSystem) -> None:
    with pytest.raises(WeightsFileNotFoundError, match="DOMETRICS_WEIGHTS_PATH"):
        load_scoring_weights(path=Path("missing.json"), fs=in_memory_fs)


@pytest.mark.parametrize(
    ("mutate", "detail"),
    [
        (lambda doc: doc.pop("forecast"), "forecast: Field required"),
        (lambda doc: doc.update(unexpected=1), "unexpected: Extra inputs are not permitted"),
        (lambda doc: doc.update(version=" "), "version"),
        (
            lambda doc: doc["risk"]["lock"].update(weight=-0.5),
            "risk.lock.weight must not be negative",
        ),
        (
            lambda doc: doc["rarity"]["dictionary"].update(brandable_min_length=9),
            "rarity.dictionary",
        ),
    ],
    ids=["missing-section", "unknown-key", "blank-version", "negative-weight", "brandable-range"],
)
def test_invalid_documents(
    in_memory_fs: InMemoryFileSystem, mutate: Callable[[dict[str, Any]], object], detail: str
) -> None:
    document = _default_document()
    mutate(document)
    path = Path("weights.json")
    in_memory_fs.write_text(json.dumps(document), path)

    with pytest.raises(WeightsValidationError, match=detail) as excinfo:
        load_scoring_weights(path=path, fs=in_memory_fs)

    assert isinstance(excinfo.value, InvalidConfiguration)
    assert excinfo.value.path == "weights.json"


def test_malformed_json() -> None:
    with pytest.raises(WeightsValidationError, match="custom.json"):
        parse_scoring_weights("{not json", source="custom.json")
