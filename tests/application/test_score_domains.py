"""Tests for batch scoring of domain CSVs."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from dometrics_scoring.application.score_domains import (
    EXPLAIN_COLUMNS,
    SCORED_COLUMNS,
    rank_by_forecast,
    run_score_domains,
    score_frame,
)
from dometrics_scoring.domain.engine import ScoringEngine
from dometrics_scoring.exceptions import InvalidDomainRecord, InvalidTimestamp
from tests.fakes import FakeProgressReporter, InMemoryFileSystem
from tests.support.domains import NOW

ENGINE = ScoringEngine()


def _domains_frame(**overrides: list[str]) -> pd.DataFrame:
    columns = {
        "name": ["ab", "defi"],
        "tld": ["com", "defi"],
        "expires_at": ["2025-01-11T00:00:00Z", "2027-01-01T00:00:00Z"],
        "lock_status": ["false", "true"],
        "registrar_id": ["", "1"],
        "registrar_name": ["", "Verified Registrar"],
        "renewal_count": ["", "2"],
        "offer_count": ["", "10"],
        "activity_7d": ["", "5"],
        "activity_30d": ["", "20"],
        "tokenized_at": ["", "2023-11-28T00:00:00Z"],
        "token_id": ["7", ""],
    }
    columns.update(overrides)
    return pd.DataFrame(columns)


class TestScoreFrame:
    def test_scores_rows_in_input_order(self, fake_progress: FakeProgressReporter) -> None:
        records = score_frame(_domains_frame(), ENGINE, now=NOW, progress=fake_progress)

        assert [record.full_name for record in records] == ["ab.com", "defi.defi"]
        assert [record.scores.forecast for record in records] == [49, 62]
        assert [record.token_id for record in records] == ["7", None]
        assert records[1].offer_count == 10
        assert fake_progress.starts == [("Scoring domains", 2)]
        assert fake_progress.advances == [1, 1]
        assert fake_progress.domains_reported == 2
        assert fake_progress.finished == 1

    def test_missing_required_column(self) -> None:
        df = _domains_frame().drop(columns=["expires_at"])

        with pytest.raises(InvalidDomainRecord, match="missing required columns: expires_at"):
            score_frame(df, ENGINE, now=NOW)

    def test_invalid_row_names_its_csv_line(self, fake_progress: FakeProgressReporter) -> None:
        df = _domains_frame(name=["ab", "  "])

        with pytest.raises(InvalidDomainRecord, match="Row 3"):
            score_frame(df, ENGINE, now=NOW, progress=fake_progress)
        assert fake_progress.finished == 1

    def test_unparseable_expiry(self) -> None:
        df = _domains_frame(expires_at=["soon", "2027-01-01T00:00:00Z"])

        with pytest.raises(InvalidTimestamp, match="expires_at"):
            score_frame(df, ENGINE, now=NOW)


def test_rank_by_forecast_is_stable() -> None:
    expires_at = "2025-06-01T00:00:00Z"
    df = pd.DataFrame(
        {"name": ["ab", "cd"], "tld": ["com", "com"], "expires_at": [expires_at, expires_at]}
    )
    records = score_frame(df, ENGINE, now=NOW)

    assert [record.name for record in rank_by_forecast(records)] == ["ab", "cd"]


class TestRunScoreDomains:
    def test_writes_scored_and_explain_files(self, in_memory_fs: InMemoryFileSystem) -> None:
        in_memory_fs.write_csv(_domains_frame(), Path("raw/domains.csv"))

        paths = run_score_domains(
            input_path="raw/domains.csv", out_dir="out", fs=in_memory_fs, now=NOW
        )

        assert paths == {
            "scored": Path("out/domains_scored.csv"),
            "explain": Path("out/domains_explain.csv"),
        }
        scored = in_memory_fs.read_csv(paths["scored"])
        assert list(scored.columns) == list(SCORED_COLUMNS)
        assert scored["domain"].tolist() == ["defi.defi", "ab.com"]
        assert scored["forecast"].tolist() == [62, 49]
        assert scored["current_value"].tolist() == [432_000.0, 3438.0]
        assert scored["weights_version"].tolist() == ["v2", "v2"]

        explain = in_memory_fs.read_csv(paths["explain"])
        assert list(explain.columns) == list(EXPLAIN_COLUMNS)
        # 3 risk + 3 rarity + 3 momentum + 2 forecast + 4 value per domain
        assert len(explain) == 30
        first = explain.iloc[0]
        assert (first["domain"], first["category"], first["rank"]) == ("defi.defi", "risk", 1)
        ab_rows = explain[explain["domain"] == "ab.com"]
        forecast_rows = ab_rows[ab_rows["category"] == "forecast"]
        assert forecast_rows["factor"].tolist() == ["Rarity Impact", "Risk Impact"]

    def test_empty_input_writes_headers_only(self, in_memory_fs: InMemoryFileSystem) -> None:
        in_memory_fs.write_csv(pd.DataFrame(columns=["name", "expires_at"]), Path("in.csv"))

        paths = run_score_domains(input_path="in.csv", out_dir="out", fs=in_memory_fs, now=NOW)

        scored = in_memory_fs.read_csv(paths["scored"])
        assert scored.empty
        assert list(scored.columns) == list(SCORED_COLUMNS)
