"""Persistence of tracked domains as a JSON document through ``FileSystem``.

Usage example:
    from datetime import UTC, datetime
    from pathlib import Path

    from dometrics_scoring.application.tracking import load_tracked_domains, save_tracked_domains
    from dometrics_scoring.domain.tracking import track
    from dometrics_scoring.infrastructure import LocalFileSystem

    fs = LocalFileSystem()
    path = Path("data/state/tracked_domains.json")
    tracked = load_tracked_domains(path=path, fs=fs)
    tracked = track(tracked, "42", "defi.defi", now=datetime.now(UTC))
    save_tracked_domains(tracked, path=path, fs=fs)
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd
from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    NonNegativeInt,
    TypeAdapter,
    ValidationError,
)

from ..domain.tracking import OfferAlert, TrackedDomain, check_offer_alerts
from ..exceptions import InvalidDomainRecord, TrackedDomainsStoreError
from ..observability import get_logger
from ..protocols import FileSystem

STORE_VERSION = 1
_OFFER_COUNT = TypeAdapter(NonNegativeInt)


class _TrackedDomainModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    token_id: str
    domain_name: str
    added_at: AwareDatetime
    last_checked: AwareDatetime | None = None
    last_offer_count: NonNegativeInt | None = None


class _StoreModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    version: int = STORE_VERSION
    domains: list[_TrackedDomainModel]


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(UTC).isoformat()


def load_tracked_domains(*, path: Path, fs: FileSystem) -> tuple[TrackedDomain, ...]:
    """Load the tracked-domain store; a missing file means nothing is tracked.

    Raises:
        TrackedDomainsStoreError: If the file exists but cannot be decoded.
    """
    if not fs.exists(path):
        return ()
    try:
        payload = fs.read_json(path)
    except ValueError as exc:
        raise TrackedDomainsStoreError(str(path), str(exc)) from exc
    try:
        store = _StoreModel.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
        raise TrackedDomainsStoreError(str(path), f"{location}: {first['msg']}") from exc
    return tuple(
        TrackedDomain(
            token_id=item.token_id,
            domain_name=item.domain_name,
            added_at=item.added_at.astimezone(UTC),
            last_checked=item.last_checked.astimezone(UTC) if item.last_checked else None,
            last_offer_count=item.last_offer_count,
        )
        for item in store.domains
    )


def save_tracked_domains(
    tracked: Sequence[TrackedDomain], *, path: Path, fs: FileSystem
) -> None:
    fs.write_json(
        {
            "version": STORE_VERSION,
            "domains": [
                {
                    "token_id": domain.token_id,
                    "domain_name": domain.domain_name,
                    "added_at": _iso(domain.added_at),
                    "last_checked": _iso(domain.last_checked),
                    "last_offer_count": domain.last_offer_count,
                }
                for domain in tracked
            ],
        },
        path,
    )


def offer_counts_from_frame(df: pd.DataFrame) -> dict[str, int]:
    """Map token id to current offer count from a CSV with ``token_id`` and ``offer_count``.

    Rows without a token id are skipped.

    Raises:
        InvalidDomainRecord: On a missing column or a negative or non-numeric count.
    """
    missing = [column for column in ("token_id", "offer_count") if column not in df.columns]
    if missing:
        raise InvalidDomainRecord(f"missing required columns: {', '.join(missing)}")
    counts: dict[str, int] = {}
    for position, row in enumerate(df.to_dict(orient="records")):
        token_id = str(row["token_id"]).strip()
        if not token_id:
            continue
        try:
            counts[token_id] = _OFFER_COUNT.validate_python(str(row["offer_count"]).strip() or "0")
        except ValidationError as exc:
            raise InvalidDomainRecord(
                "offer_count must be a non-negative integer", position + 2
            ) from exc
    return counts


def run_offer_alerts(
    *,
    counts_path: Path,
    store_path: Path,
    fs: FileSystem,
    now: datetime,
) -> list[OfferAlert]:
    """Check tracked domains against current offer counts and persist what was seen."""
    logger = get_logger("dometrics_scoring.tracking")
    tracked = load_tracked_domains(path=store_path, fs=fs)
    counts = offer_counts_from_frame(fs.read_csv(counts_path))
    alerts, updated = check_offer_alerts(tracked, counts, now=now)
    save_tracked_domains(updated, path=store_path, fs=fs)
    logger.info("Checked %s tracked domains: %s alerts", len(updated), len(alerts))
    return alerts
