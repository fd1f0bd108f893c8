"""Pydantic-based validation for inbound domain records.

Blank or malformed optional numbers fall back to their documented defaults.
Timestamps are load-bearing and raise ``InvalidTimestamp`` instead.

Usage example:
    from dometrics_scoring.io_validation import parse_domain_record

    domain = parse_domain_record(
        {"name": "defi", "tld": "defi", "expires_at": "2027-01-01T00:00:00Z", "offer_count": "10"}
    )
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    NonNegativeInt,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .domain.models import UNKNOWN_REGISTRAR, DomainDescription, RecentEvent, TrendSignal
from .exceptions import InvalidDomainRecord, InvalidTimestamp

_DATETIME = TypeAdapter(datetime)
_TRUE_WORDS = frozenset({"true", "1", "yes", "y", "on", "locked"})


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and value != value:  # NaN from pandas
        return True
    return isinstance(value, str) and not value.strip()


def parse_timestamp(value: object, field_name: str) -> datetime:
    """Parse an ISO 8601 string, epoch seconds or datetime into an aware UTC datetime."""
    if _is_blank(value) or isinstance(value, bool):
        raise InvalidTimestamp(field_name, value)
    try:
        parsed = _DATETIME.validate_python(value.strip() if isinstance(value, str) else value)
    except ValidationError as exc:
        raise InvalidTimestamp(field_name, value) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_optional_timestamp(value: object, field_name: str) -> datetime | None:
    if _is_blank(value):
        return None
    return parse_timestamp(value, field_name)


def _lenient_count(value: object) -> object:
    """Blank or non-numeric counts become 0; negative numbers are kept so they fail."""
    if _is_blank(value) or isinstance(value, bool):
        return 0
    try:
        number = float(str(value).strip())
    except ValueError:
        return 0
    return int(number) if math.isfinite(number) else 0


class _DomainRecordModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    tld: str = ""
    lock_status: bool = False
    registrar_id: NonNegativeInt = 0
    registrar_name: str = UNKNOWN_REGISTRAR
    renewal_count: NonNegativeInt = 0
    offer_count: NonNegativeInt = 0
    activity_7d: NonNegativeInt = 0
    activity_30d: NonNegativeInt = 0
    trend_popularity: float | None = None
    trend_direction: Literal["rising", "stable", "declining"] = "stable"

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("name must not be empty")
        return text

    @field_validator("tld", mode="before")
    @classmethod
    def _clean_tld(cls, value: object) -> object:
        if _is_blank(value):
            return ""
        return str(value).strip().lstrip(".").lower()

    @field_validator("lock_status", mode="before")
    @classmethod
    def _coerce_lock(cls, value: object) -> object:
        if _is_blank(value):
            return False
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_WORDS
        return value

    @field_validator(
        "registrar_id",
        "renewal_count",
        "offer_count",
        "activity_7d",
        "activity_30d",
        mode="before",
    )
    @classmethod
    def _coerce_count(cls, value: object) -> object:
        return _lenient_count(value)

    @field_validator("registrar_name", mode="before")
    @classmethod
    def _coerce_registrar_name(cls, value: object) -> object:
        if _is_blank(value):
            return UNKNOWN_REGISTRAR
        return str(value).strip()

    @field_validator("trend_popularity", mode="before")
    @classmethod
    def _coerce_popularity(cls, value: object) -> object:
        if _is_blank(value):
            return None
        try:
            popularity = float(str(value).strip())
        except ValueError:
            return None
        return max(0.0, min(100.0, popularity))

    @field_validator("trend_direction", mode="before")
    @classmethod
    def _coerce_direction(cls, value: object) -> object:
        if _is_blank(value):
            return "stable"
        return str(value).strip().lower()


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def _parse_events(value: object) -> tuple[RecentEvent, ...]:
    if _is_blank(value):
        return ()
    if not isinstance(value, list | tuple):
        raise InvalidDomainRecord("recent_events must be a list")
    events: list[RecentEvent] = []
    for item in value:
        if not isinstance(item, Mapping):
            raise InvalidDomainRecord("recent_events entries must be objects")
        events.append(
            RecentEvent(
                type=str(item.get("type") or "unknown"),
                timestamp=parse_timestamp(item.get("timestamp"), "recent_events.timestamp"),
            )
        )
    return tuple(events)


def parse_domain_record(
    payload: Mapping[str, object], *, row_number: int | None = None
) -> DomainDescription:
    """Validate one inbound record (CSV row or JSON object) into a ``DomainDescription``.

    A missing ``tld`` is taken from a dotted ``name`` such as ``"ab.com"``.

    Raises:
        InvalidDomainRecord: On an empty name, missing TLD or negative counts.
        InvalidTimestamp: On a missing or unparseable ``expires_at`` or other timestamp.
    """
    try:
        model = _DomainRecordModel.model_validate(dict(payload))
    except ValidationError as exc:
        raise InvalidDomainRecord(_format_validation_error(exc), row_number) from exc

    name = model.name
    tld = model.tld
    if not tld and "." in name:
        name, _, tld = name.rpartition(".")
        tld = tld.lower()
    if not name or not tld:
        raise InvalidDomainRecord("name and tld are required", row_number)

    trend = None
    if model.trend_popularity is not None or model.trend_direction != "stable":
        trend = TrendSignal(popularity=model.trend_popularity, direction=model.trend_direction)

    return DomainDescription(
        name=name,
        tld=tld,
        expires_at=parse_timestamp(payload.get("expires_at"), "expires_at"),
        lock_status=model.lock_status,
        registrar_id=model.registrar_id,
        registrar_name=model.registrar_name,
        renewal_count=model.renewal_count,
        offer_count=model.offer_count,
        activity_7d=model.activity_7d,
        activity_30d=model.activity_30d,
        recent_events=_parse_events(payload.get("recent_events")),
        tokenized_at=parse_optional_timestamp(payload.get("tokenized_at"), "tokenized_at"),
        trend=trend,
    )
