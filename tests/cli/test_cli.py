"""Tests for CLI commands and wiring."""

from __future__ import annotations

import json
import re
from pathlib import Path

import pandas as pd
import pytest
import typer
from typer.testing import CliRunner

from dometrics_scoring import cli
from dometrics_scoring.application.weights import parse_scoring_weights
from dometrics_scoring.cli import CliDependencies
from dometrics_scoring.config import EngineConfig
from dometrics_scoring.domain.engine import ScoringEngine
from dometrics_scoring.domain.models import ValueEstimate
from dometrics_scoring.domain.weights import DEFAULT_WEIGHTS
from tests.fakes import FakeProgressReporter, FakeValuationService, InMemoryFileSystem

runner = CliRunner()
_ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

NOW_ARGS = ["--now", "2025-01-01T00:00:00Z"]
STORE = "state/tracked.json"


def _strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE_RE.sub("", text)


def _use_config(monkeypatch: pytest.MonkeyPatch, config: EngineConfig) -> None:
    def fake_from_env(cls: type[EngineConfig], dotenv_path: str | None = None) -> EngineConfig:
        _ = (cls, dotenv_path)
        return config

    monkeypatch.setattr(cli.EngineConfig, "from_env", classmethod(fake_from_env))


def _build_app_with_dependencies(
    deps: CliDependencies, seen_configs: list[EngineConfig] | None = None
) -> typer.Typer:
    def build_with_shared_deps(*, config: EngineConfig) -> CliDependencies:
        if seen_configs is not None:
            seen_configs.append(config)
        return deps

    return cli.create_app(build_with_shared_deps)


def _deps(
    fs: InMemoryFileSystem,
    *,
    valuation_service: FakeValuationService | None = None,
    progress: FakeProgressReporter | None = None,
) -> CliDependencies:
    return CliDependencies(
        fs=fs,
        engine=ScoringEngine(),
        valuation_service=valuation_service,
        progress=progress,
    )


def _write_domains(fs: InMemoryFileSystem, path: str = "data/raw/domains.csv") -> None:
    fs.write_csv(
        pd.DataFrame(
            {
                "name": ["ab", "defi"],
                "tld": ["com", "defi"],
                "expires_at": ["2025-01-11T00:00:00Z", "2027-01-01T00:00:00Z"],
                "lock_status": ["false", "true"],
                "registrar_id": ["", "1"],
                "renewal_count": ["", "2"],
                "offer_count": ["", "10"],
                "activity_7d": ["", "5"],
                "activity_30d": ["", "20"],
                "tokenized_at": ["", "2023-11-28T00:00:00Z"],
            }
        ),
        Path(path),
    )


@pytest.fixture(autouse=True)
def default_config(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_config(monkeypatch, EngineConfig(tracked_domains_path=STORE))


class TestScore:
    def test_json_output(self, in_memory_fs: InMemoryFileSystem) -> None:
        app = _build_app_with_dependencies(_deps(in_memory_fs))

        result = runner.invoke(
            app, ["score", "ab.com", "--expires-at", "2025-01-11T00:00:00Z", "--json", *NOW_ARGS]
        )

        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["domain"] == "ab.com"
        assert (document["risk"], document["rarity"], document["momentum"]) == (61, 43, 38)
        assert document["forecast"] == 49
        assert document["value_source"] == "deterministic"
        assert document["analysis"]["outlook"] == "fair"
        assert document["explainers"]["risk"][0]["name"] == "Expiry Buffer"

    def test_table_output(self, in_memory_fs: InMemoryFileSystem) -> None:
        app = _build_app_with_dependencies(_deps(in_memory_fs))

        result = runner.invoke(
            app,
            [
                "score",
                "defi",
                "--tld",
                "defi",
                "-e",
                "2027-01-01T00:00:00Z",
                "--locked",
                "--offers",
                "10",
                *NOW_ARGS,
            ],
        )

        assert result.exit_code == 0, result.output
        output = _strip_ansi(result.output)
        assert "defi.defi (weights v2)" in output
        assert "Outlook: good" in output

    def test_invalid_expiry_is_a_usage_error(self, in_memory_fs: InMemoryFileSystem) -> None:
        app = _build_app_with_dependencies(_deps(in_memory_fs))

        result = runner.invoke(app, ["score", "ab.com", "-e", "soon", *NOW_ARGS])

        assert result.exit_code == 2
        assert "expires_at" in _strip_ansi(result.output)

    def test_invalid_now_is_a_usage_error(self, in_memory_fs: InMemoryFileSystem) -> None:
        app = _build_app_with_dependencies(_deps(in_memory_fs))

        result = runner.invoke(
            app, ["score", "ab.com", "-e", "2025-06-01T00:00:00Z", "--now", "later"]
        )

        assert result.exit_code == 2

    def test_valuation_requires_an_api_key(self, in_memory_fs: InMemoryFileSystem) -> None:
        app = _build_app_with_dependencies(_deps(in_memory_fs))

        result = runner.invoke(
            app, ["score", "ab.com", "-e", "2025-06-01T00:00:00Z", "--use-valuation", *NOW_ARGS]
        )

        assert result.exit_code == 2
        assert "VALUATION_API_KEY" in _strip_ansi(result.output)

    def test_valuation_service_is_consulted(
        self, monkeypatch: pytest.MonkeyPatch, in_memory_fs: InMemoryFileSystem
    ) -> None:
        _use_config(monkeypatch, EngineConfig(valuation_api_key="key"))
        service = FakeValuationService(
            estimate=ValueEstimate(
                current_value=9000.0,
                projected_value=9900.0,
                confidence=80,
                factors=(),
                source="valuation_service",
            )
        )
        seen: list[EngineConfig] = []
        app = _build_app_with_dependencies(_deps(in_memory_fs, valuation_service=service), seen)

        result = runner.invoke(
            app,
            ["score", "ab.com", "-e", "2025-01-11T00:00:00Z", "--use-valuation", "--json"]
            + NOW_ARGS,
        )

        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["value_source"] == "valuation_service"
        assert document["current_value"] == 9000.0
        assert seen[0].use_valuation
        assert service.calls[0][0:2] == ("ab", "com")


def test_score_file_writes_outputs(in_memory_fs: InMemoryFileSystem) -> None:
    _write_domains(in_memory_fs)
    progress = FakeProgressReporter()
    app = _build_app_with_dependencies(_deps(in_memory_fs, progress=progress))

    result = runner.invoke(app, ["score-file", "-o", "out", *NOW_ARGS])

    assert result.exit_code == 0, result.output
    assert "Scoring complete" in _strip_ansi(result.output)
    scored = in_memory_fs.read_csv(Path("out/domains_scored.csv"))
    assert scored["domain"].tolist() == ["defi.defi", "ab.com"]
    assert progress.starts == [("Scoring domains", 2)]


class TestSearch:
    def test_matching_domains_are_listed(self, in_memory_fs: InMemoryFileSystem) -> None:
        _write_domains(in_memory_fs)
        app = _build_app_with_dependencies(_deps(in_memory_fs))

        result = runner.invoke(app, ["search", "low risk domains", *NOW_ARGS])

        assert result.exit_code == 0, result.output
        output = _strip_ansi(result.output)
        assert "Filtering: risk under 30" in output
        assert "defi.defi" in output
        assert "ab.com" not in output

    def test_no_matches(self, in_memory_fs: InMemoryFileSystem) -> None:
        _write_domains(in_memory_fs)
        app = _build_app_with_dependencies(_deps(in_memory_fs))

        result = runner.invoke(app, ["search", "dragon", *NOW_ARGS])

        assert result.exit_code == 0, result.output
        assert "No domains match this query." in _strip_ansi(result.output)


def test_tracking_and_alerts_flow(in_memory_fs: InMemoryFileSystem) -> None:
    app = _build_app_with_dependencies(_deps(in_memory_fs))
    counts = Path("data/raw/offer_counts.csv")

    tracked = runner.invoke(app, ["track", "42", "defi.defi", *NOW_ARGS])
    again = runner.invoke(app, ["track", "42", "defi.defi", *NOW_ARGS])

    assert "Tracking: defi.defi (42)" in _strip_ansi(tracked.output)
    assert "Already tracking 42" in _strip_ansi(again.output)

    in_memory_fs.write_csv(pd.DataFrame({"token_id": ["42"], "offer_count": ["2"]}), counts)
    first = runner.invoke(app, ["alerts", *NOW_ARGS])
    in_memory_fs.write_csv(pd.DataFrame({"token_id": ["42"], "offer_count": ["5"]}), counts)
    second = runner.invoke(app, ["alerts", "--now", "2025-01-02T00:00:00Z"])

    assert "No new offers." in _strip_ansi(first.output)
    assert "defi.defi: 3 new offers received (now 5)" in _strip_ansi(second.output)

    removed = runner.invoke(app, ["untrack", "42"])
    missing = runner.invoke(app, ["untrack", "42"])

    assert "Untracked: 42" in _strip_ansi(removed.output)
    assert "Not tracked: 42" in _strip_ansi(missing.output)
    assert in_memory_fs.read_json(Path(STORE))["domains"] == []


def test_export_weights_writes_a_loadable_document(in_memory_fs: InMemoryFileSystem) -> None:
    app = _build_app_with_dependencies(_deps(in_memory_fs))

    result = runner.invoke(app, ["export-weights", "-o", "weights.json"])

    assert result.exit_code == 0, result.output
    document = in_memory_fs.read_json(Path("weights.json"))
    assert parse_scoring_weights(json.dumps(document)) == DEFAULT_WEIGHTS
