"""Tests for CLI composition root wiring."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest
import typer

from dometrics_scoring import composition
from dometrics_scoring.application.weights import weights_to_document
from dometrics_scoring.cli_progress import CliProgressReporter
from dometrics_scoring.config import DEFAULT_VALUATION_MODEL, EngineConfig
from dometrics_scoring.domain.weights import DEFAULT_WEIGHTS
from dometrics_scoring.exceptions import WeightsFileNotFoundError
from dometrics_scoring.infrastructure import ChatCompletionValuationService, LocalFileSystem


def test_build_cli_dependencies_defaults() -> None:
    deps = composition.build_cli_dependencies(config=EngineConfig())

    assert isinstance(deps.fs, LocalFileSystem)
    assert deps.engine.weights is DEFAULT_WEIGHTS
    assert deps.valuation_service is None
    assert isinstance(deps.progress, CliProgressReporter)


def test_build_cli_dependencies_wires_valuation_service() -> None:
    config = EngineConfig(
        valuation_api_key="secret",
        valuation_base_url="https://valuation.test/v1",
        valuation_timeout_seconds=2.0,
        use_valuation=True,
    )

    deps = composition.build_cli_dependencies(config=config)

    service = deps.valuation_service
    assert isinstance(service, ChatCompletionValuationService)
    assert service.api_key == "secret"
    assert service.base_url == "https://valuation.test/v1"
    assert service.model == DEFAULT_VALUATION_MODEL
    assert service.timeout_seconds == 2.0


def test_build_cli_dependencies_skips_valuation_without_api_key() -> None:
    deps = composition.build_cli_dependencies(config=EngineConfig(use_valuation=True))

    assert deps.valuation_service is None


def test_build_cli_dependencies_loads_weights_document(tmp_path: Path) -> None:
    path = tmp_path / "weights.json"
    document = weights_to_document(replace(DEFAULT_WEIGHTS, version="custom"))
    path.write_text(json.dumps(document), encoding="utf-8")

    deps = composition.build_cli_dependencies(config=EngineConfig(weights_path=str(path)))

    assert deps.engine.weights.version == "custom"


def test_build_cli_dependencies_reports_missing_weights(tmp_path: Path) -> None:
    config = EngineConfig(weights_path=str(tmp_path / "missing.json"))

    with pytest.raises(WeightsFileNotFoundError):
        composition.build_cli_dependencies(config=config)


def test_composition_exposes_typer_app() -> None:
    assert isinstance(composition.app, typer.Typer)
