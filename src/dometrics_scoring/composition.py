"""Composition root for wiring CLI dependencies."""

from __future__ import annotations

from pathlib import Path

from .application.weights import load_scoring_weights
from .cli import CliDependencies, create_app
from .cli_progress import CliProgressReporter
from .config import EngineConfig
from .domain.engine import ScoringEngine
from .domain.weights import DEFAULT_WEIGHTS
from .infrastructure import ChatCompletionValuationService, LocalFileSystem
from .protocols import ValuationService


def build_cli_dependencies(*, config: EngineConfig) -> CliDependencies:
    """Build concrete dependencies for CLI commands.

    Args:
        config: Engine configuration (weights document and valuation service wiring).
    """
    fs = LocalFileSystem()
    weights = (
        load_scoring_weights(path=Path(config.weights_path), fs=fs)
        if config.weights_path
        else DEFAULT_WEIGHTS
    )
    valuation_service: ValuationService | None = None
    if config.valuation_enabled:
        valuation_service = ChatCompletionValuationService(
            api_key=config.valuation_api_key,
            base_url=config.valuation_base_url,
            model=config.valuation_model,
            timeout_seconds=config.valuation_timeout_seconds,
        )
    return CliDependencies(
        fs=fs,
        engine=ScoringEngine(weights),
        valuation_service=valuation_service,
        progress=CliProgressReporter(),
    )


app = create_app(build_cli_dependencies)


def main() -> None:
    app()
