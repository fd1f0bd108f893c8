"""Natural-language search over scored domains.

``parse_query`` turns phrases such as "low risk domains", "value over $10000"
or "top 5 rare domains" into ``SearchFilters``; ``apply_filters`` applies
them to ``ScoredDomain`` records.

Usage example:
    from dometrics_scoring.domain.search import apply_filters, explain_filters, parse_query

    filters = parse_query("top 5 low risk domains")
    print(explain_filters(filters))
    results = apply_filters(records, filters)
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Literal

from .models import DomainScores

SortMetric = Literal[
    "risk", "rarity", "momentum", "forecast", "value", "offers", "newest", "oldest"
]
SortOrder = Literal["asc", "desc"]

LOW_BAND = 30
HIGH_BAND = 70

SUGGESTIONS = (
    "low risk domains",
    "high rarity domains",
    "fastest growing domains",
    "show me the 10 newest domains",
    "domains with largest offers",
    "risk under 20",
    "value over $10000",
    "hot trending domains",
    "rare domains",
    "safe investments",
    "high momentum",
    "top 5 domains",
)

_LOW_RISK = re.compile(r"\b(?:low\s*risk|safe)\b")
_MEDIUM_RISK = re.compile(r"\b(?:medium|moderate)\s*risk\b")
_HIGH_RISK = re.compile(r"\b(?:high\s*risk|dangerous|risky)\b")
_RISK_UNDER = re.compile(r"risk\s*(?:under|below|less\s*than|<)\s*(\d+)")
_RISK_OVER = re.compile(r"risk\s*(?:over|above|more\s*than|greater\s*than|>)\s*(\d+)")
_RARE = re.compile(r"\b(?:rare|unique|uncommon|high\s*rarity)\b")
_COMMON = re.compile(r"\b(?:common|ordinary)\b")
_RARITY_OVER = re.compile(r"rarity\s*(?:over|above|>)\s*(\d+)")
_HOT = re.compile(r"\b(?:hot|trending|popular|fast(?:est)?\s*growing|high\s*momentum)\b")
_SLOW = re.compile(r"\b(?:slow|stagnant|declining)\b")
_MOMENTUM_OVER = re.compile(r"momentum\s*(?:over|above|>)\s*(\d+)")
_VALUE = re.compile(r"value\s*(over|above|under|below|>|<)\s*\$?(\d+)")
_NEWEST = re.compile(r"\b(?:newest|latest|recent|new)\b")
_OLDEST = re.compile(r"\b(?:oldest|earliest|old)\b")
_HIGHEST = re.compile(r"\b(?:highest|largest|biggest|most|expensive)\b")
_LOWEST = re.compile(r"\b(?:lowest|smallest|least|cheapest)\b")
_METRIC = re.compile(r"\b(risk|value|momentum|rarity|forecast|price)\b")
_OFFERS = re.compile(r"\b(?:offers?|bids?)\b")
_LARGE = re.compile(r"\b(?:large|largest|big|biggest|high|most)\b")
_METRIC_WORDS: dict[str, SortMetric] = {
    "risk": "risk",
    "value": "value",
    "price": "value",
    "momentum": "momentum",
    "rarity": "rarity",
    "forecast": "forecast",
}
_LIMIT = re.compile(
    r"\b(?:(?:top|first|show\s*me(?:\s*the)?|give\s*me(?:\s*the)?)\s+(\d+)"
    r"|(\d+)\s+(?:\w+\s+)?(?:domains?|results?))\b"
)


@dataclass(frozen=True)
class SearchFilters:
    risk_min: int | None = None
    risk_max: int | None = None
    rarity_min: int | None = None
    rarity_max: int | None = None
    momentum_min: int | None = None
    momentum_max: int | None = None
    value_min: int | None = None
    value_max: int | None = None
    sort_by: SortMetric | None = None
    sort_order: SortOrder | None = None
    limit: int | None = None
    search_term: str | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, item.name) is None for item in fields(self))


@dataclass(frozen=True)
class ScoredDomain:
    """A domain together with its scores, as listed on a dashboard."""

    name: str
    tld: str
    scores: DomainScores
    offer_count: int = 0
    tokenized_at: datetime | None = None
    token_id: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.name}.{self.tld}"


def _metric_from(text: str) -> SortMetric | None:
    match = _METRIC.search(text)
    if match is None:
        return None
    return _METRIC_WORDS[match.group(1)]


def parse_query(text: str) -> SearchFilters:
    """Parse a free-text query into search filters.

    A single token containing a dot is treated as a domain name search, and
    text with no recognised phrases becomes a plain search term.
    """
    query = text.strip()
    lowered = query.lower()
    if not lowered:
        return SearchFilters()
    if "." in lowered and " " not in lowered:
        return SearchFilters(search_term=query)

    values: dict[str, Any] = {}

    if _LOW_RISK.search(lowered):
        values["risk_max"] = LOW_BAND
    if _MEDIUM_RISK.search(lowered):
        values["risk_min"] = LOW_BAND
        values["risk_max"] = HIGH_BAND
    if _HIGH_RISK.search(lowered):
        values["risk_min"] = HIGH_BAND
    if match := _RISK_UNDER.search(lowered):
        values["risk_max"] = int(match.group(1))
    if match := _RISK_OVER.search(lowered):
        values["risk_min"] = int(match.group(1))

    if _RARE.search(lowered):
        values["rarity_min"] = HIGH_BAND
    if _COMMON.search(lowered):
        values["rarity_max"] = LOW_BAND
    if match := _RARITY_OVER.search(lowered):
        values["rarity_min"] = int(match.group(1))

    if _HOT.search(lowered):
        values["momentum_min"] = HIGH_BAND
    if _SLOW.search(lowered):
        values["momentum_max"] = LOW_BAND
    if match := _MOMENTUM_OVER.search(lowered):
        values["momentum_min"] = int(match.group(1))

    if match := _VALUE.search(lowered):
        amount = int(match.group(2))
        if match.group(1) in ("over", "above", ">"):
            values["value_min"] = amount
        else:
            values["value_max"] = amount

    if _NEWEST.search(lowered):
        values["sort_by"] = "newest"
        values["sort_order"] = "desc"
    if _OLDEST.search(lowered):
        values["sort_by"] = "oldest"
        values["sort_order"] = "asc"
    if _HIGHEST.search(lowered):
        metric = _metric_from(lowered)
        if metric is None:
            metric = "offers" if _OFFERS.search(lowered) else "value"
        values["sort_by"] = metric
        values["sort_order"] = "desc"
    if _LOWEST.search(lowered):
        metric = _metric_from(lowered)
        if metric is None:
            metric = "value" if "cheapest" in lowered else "risk"
        values["sort_by"] = metric
        values["sort_order"] = "asc"
    if _OFFERS.search(lowered) and _LARGE.search(lowered):
        values["sort_by"] = "offers"
        values["sort_order"] = "desc"

    if match := _LIMIT.search(lowered):
        values["limit"] = int(match.group(1) or match.group(2))

    if not values:
        values["search_term"] = query
    return SearchFilters(**values)


def _within(value: float, lower: int | None, upper: int | None) -> bool:
    if lower is not None and value < lower:
        return False
    return not (upper is not None and value > upper)


def _matches(record: ScoredDomain, filters: SearchFilters) -> bool:
    scores = record.scores
    if not _within(scores.risk, filters.risk_min, filters.risk_max):
        return False
    if not _within(scores.rarity, filters.rarity_min, filters.rarity_max):
        return False
    if not _within(scores.momentum, filters.momentum_min, filters.momentum_max):
        return False
    if not _within(scores.current_value, filters.value_min, filters.value_max):
        return False
    if filters.search_term:
        return filters.search_term.lower() in record.full_name.lower()
    return True


def _sort_key(metric: SortMetric, record: ScoredDomain) -> float:
    scores = record.scores
    if metric in ("newest", "oldest"):
        return record.tokenized_at.timestamp() if record.tokenized_at is not None else 0.0
    if metric == "value":
        return scores.current_value
    if metric == "offers":
        return float(record.offer_count)
    return float(getattr(scores, metric))


def apply_filters(records: Iterable[ScoredDomain], filters: SearchFilters) -> list[ScoredDomain]:
    """Filter, sort and truncate ``records``; unsorted queries keep input order."""
    selected = [record for record in records if _matches(record, filters)]
    if filters.sort_by is not None:
        metric = filters.sort_by
        selected.sort(
            key=lambda record: _sort_key(metric, record),
            reverse=filters.sort_order != "asc",
        )
    if filters.limit is not None:
        selected = selected[: max(0, filters.limit)]
    return selected


def explain_filters(filters: SearchFilters) -> str:
    """Render filters as a one-line human-readable summary."""
    parts: list[str] = []
    if filters.risk_min is not None and filters.risk_max is not None:
        parts.append(f"risk between {filters.risk_min}-{filters.risk_max}")
    elif filters.risk_min is not None:
        parts.append(f"risk over {filters.risk_min}")
    elif filters.risk_max is not None:
        parts.append(f"risk under {filters.risk_max}")
    if filters.rarity_min is not None:
        parts.append(f"rarity over {filters.rarity_min}")
    if filters.rarity_max is not None:
        parts.append(f"rarity under {filters.rarity_max}")
    if filters.momentum_min is not None:
        parts.append(f"momentum over {filters.momentum_min}")
    if filters.momentum_max is not None:
        parts.append(f"momentum under {filters.momentum_max}")
    if filters.value_min is not None:
        parts.append(f"value over ${filters.value_min:,}")
    if filters.value_max is not None:
        parts.append(f"value under ${filters.value_max:,}")
    if filters.sort_by is not None:
        order = "lowest" if filters.sort_order == "asc" else "highest"
        parts.append(f"sorted by {order} {filters.sort_by}")
    if filters.limit is not None:
        parts.append(f"showing {filters.limit} results")
    if filters.search_term:
        parts.append(f'matching "{filters.search_term}"')
    return f"Filtering: {', '.join(parts)}" if parts else "No filters applied"


def search_suggestions(text: str) -> list[str]:
    """Canned example queries containing ``text`` (at least two characters)."""
    lowered = text.strip().lower()
    if len(lowered) < 2:
        return []
    return [suggestion for suggestion in SUGGESTIONS if lowered in suggestion]
