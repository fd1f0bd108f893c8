"""Batch scoring: score every domain in a CSV and write scores plus explainers.

Outputs:
- domains_scored.csv: one row per domain, ordered by forecast (highest first)
- domains_explain.csv: one row per ranked explainer factor
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from ..domain.engine import ScoringEngine
from ..domain.search import ScoredDomain
from ..exceptions import InvalidDomainRecord
from ..infrastructure import LocalFileSystem
from ..io_validation import parse_domain_record
from ..observability import get_logger
from ..protocols import FileSystem, ProgressReporter
from ..types import ExplainRow, ScoredDomainRow

REQUIRED_INPUT_COLUMNS = ("name", "expires_at")
SCORED_COLUMNS = tuple(ScoredDomainRow.__annotations__)
EXPLAIN_COLUMNS = tuple(ExplainRow.__annotations__)
EXPLAIN_CATEGORIES = ("risk", "rarity", "momentum", "forecast", "value")

# CSV line of the first data row (line 1 is the header)
_FIRST_DATA_LINE = 2


def _token_id(row: dict[str, object]) -> str | None:
    value = row.get("token_id")
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def score_frame(
    df: pd.DataFrame,
    engine: ScoringEngine,
    *,
    now: datetime,
    progress: ProgressReporter | None = None,
) -> list[ScoredDomain]:
    """Validate and score every row of ``df`` in input order.

    Raises:
        InvalidDomainRecord: Naming the CSV line of the first invalid row.
        InvalidTimestamp: When an ``expires_at`` or ``tokenized_at`` is unparseable.
    """
    missing = [column for column in REQUIRED_INPUT_COLUMNS if column not in df.columns]
    if missing:
        raise InvalidDomainRecord(f"missing required columns: {', '.join(missing)}")

    if progress is not None:
        progress.start("Scoring domains", len(df))
    records: list[ScoredDomain] = []
    try:
        for position, row in enumerate(df.to_dict(orient="records")):
            payload = {str(key): value for key, value in row.items()}
            domain = parse_domain_record(payload, row_number=position + _FIRST_DATA_LINE)
            records.append(
                ScoredDomain(
                    name=domain.name,
                    tld=domain.tld,
                    scores=engine.score(domain, now=now),
                    offer_count=domain.offer_count,
                    tokenized_at=domain.tokenized_at,
                    token_id=_token_id(payload),
                )
            )
            if progress is not None:
                progress.advance(1)
    finally:
        if progress is not None:
            progress.finish()
    return records


def _scored_row(record: ScoredDomain) -> ScoredDomainRow:
    scores = record.scores
    return {
        "domain": record.full_name,
        "name": record.name,
        "tld": record.tld,
        "risk": scores.risk,
        "rarity": scores.rarity,
        "momentum": scores.momentum,
        "forecast": scores.forecast,
        "forecast_low": scores.forecast_low,
        "forecast_high": scores.forecast_high,
        "current_value": scores.current_value,
        "projected_value": scores.projected_value,
        "value_confidence": scores.value_confidence,
        "offer_count": record.offer_count,
        "weights_version": scores.weights_version,
    }


def _explain_rows(record: ScoredDomain) -> Iterable[ExplainRow]:
    explainers = record.scores.explainers
    for category in EXPLAIN_CATEGORIES:
        for rank, factor in enumerate(getattr(explainers, category), start=1):
            yield {
                "domain": record.full_name,
                "category": category,
                "rank": rank,
                "factor": factor.name,
                "description": factor.description,
                "value": round(factor.value, 4),
                "weight": round(factor.weight, 4),
                "contribution": round(factor.contribution, 4),
            }


def rank_by_forecast(records: Iterable[ScoredDomain]) -> list[ScoredDomain]:
    """Order by forecast, highest first; ties keep input order."""
    return sorted(records, key=lambda record: record.scores.forecast, reverse=True)


def run_score_domains(
    input_path: str | Path = "data/raw/domains.csv",
    out_dir: str | Path = "data/processed",
    engine: ScoringEngine | None = None,
    fs: FileSystem | None = None,
    now: datetime | None = None,
    progress: ProgressReporter | None = None,
) -> dict[str, Path]:
    """Score a CSV of domain descriptions.

    Args:
        input_path: CSV with at least ``name`` and ``expires_at`` columns.
        out_dir: Directory for output files.
        engine: Scoring engine (defaults to the built-in weights).
        fs: Optional filesystem for testing.
        now: Scoring instant shared by every row (defaults to the current time).
        progress: Optional progress reporter.

    Returns:
        Dict with paths to the scored and explain files.
    """
    fs = fs or LocalFileSystem()
    engine = engine or ScoringEngine()
    now = now or datetime.now(UTC)
    logger = get_logger("dometrics_scoring.score_domains")
    input_path = Path(input_path)
    out_dir = Path(out_dir)
    fs.mkdir(out_dir, parents=True)

    df = fs.read_csv(input_path)
    logger.info("Scoring: %s domains from %s", len(df), input_path)
    records = rank_by_forecast(score_frame(df, engine, now=now, progress=progress))

    scored_df = pd.DataFrame([_scored_row(record) for record in records], columns=SCORED_COLUMNS)
    scored_path = out_dir / "domains_scored.csv"
    fs.write_csv(scored_df, scored_path)
    logger.info("Scored: %s (%s domains)", scored_path, len(scored_df))

    explain_df = pd.DataFrame(
        [row for record in records for row in _explain_rows(record)], columns=EXPLAIN_COLUMNS
    )
    explain_path = out_dir / "domains_explain.csv"
    fs.write_csv(explain_df, explain_path)
    logger.info("Explainability: %s (%s factors)", explain_path, len(explain_df))

    return {"scored": scored_path, "explain": explain_path}
