"""Tracked domains and new-offer alerts.

Tracked domains are keyed by token id. Each check stores the last seen offer
count, and an alert fires when the count rises above it. The first
observation of a domain only records its count.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(frozen=True)
class TrackedDomain:
    token_id: str
    domain_name: str
    added_at: datetime
    last_checked: datetime | None = None
    last_offer_count: int | None = None


@dataclass(frozen=True)
class OfferAlert:
    token_id: str
    domain_name: str
    new_offers: int
    offer_count: int
    timestamp: datetime

    @property
    def message(self) -> str:
        plural = "s" if self.new_offers > 1 else ""
        return f"{self.new_offers} new offer{plural} received"


def is_tracked(tracked: Sequence[TrackedDomain], token_id: str) -> bool:
    return any(domain.token_id == token_id for domain in tracked)


def track(
    tracked: Sequence[TrackedDomain], token_id: str, domain_name: str, *, now: datetime
) -> tuple[TrackedDomain, ...]:
    """Add a domain; tracking an already tracked token id changes nothing."""
    if is_tracked(tracked, token_id):
        return tuple(tracked)
    return (*tracked, TrackedDomain(token_id=token_id, domain_name=domain_name, added_at=now))


def untrack(tracked: Sequence[TrackedDomain], token_id: str) -> tuple[TrackedDomain, ...]:
    return tuple(domain for domain in tracked if domain.token_id != token_id)


def check_offer_alerts(
    tracked: Sequence[TrackedDomain],
    current_counts: Mapping[str, int],
    *,
    now: datetime,
) -> tuple[list[OfferAlert], tuple[TrackedDomain, ...]]:
    """Compare current offer counts with the last seen ones.

    Domains missing from ``current_counts`` are left untouched.

    Returns:
        The alerts raised and the updated tracked-domain records.
    """
    alerts: list[OfferAlert] = []
    updated: list[TrackedDomain] = []
    for domain in tracked:
        if domain.token_id not in current_counts:
            updated.append(domain)
            continue
        count = current_counts[domain.token_id]
        previous = domain.last_offer_count
        if previous is not None and count > previous:
            alerts.append(
                OfferAlert(
                    token_id=domain.token_id,
                    domain_name=domain.domain_name,
                    new_offers=count - previous,
                    offer_count=count,
                    timestamp=now,
                )
            )
        updated.append(replace(domain, last_checked=now, last_offer_count=count))
    return alerts, tuple(updated)
