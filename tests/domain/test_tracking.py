"""Tests for tracked domains and new-offer alerts."""

from datetime import timedelta

from dometrics_scoring.domain.tracking import (
    OfferAlert,
    TrackedDomain,
    check_offer_alerts,
    is_tracked,
    track,
    untrack,
)
from tests.support.domains import NOW


def test_track_is_idempotent() -> None:
    tracked = track((), "1", "defi.defi", now=NOW)
    again = track(tracked, "1", "renamed.defi", now=NOW + timedelta(hours=1))

    assert again == (TrackedDomain(token_id="1", domain_name="defi.defi", added_at=NOW),)
    assert is_tracked(again, "1")
    assert not is_tracked(again, "2")


def test_untrack_removes_only_that_token() -> None:
    tracked = track(track((), "1", "a.com", now=NOW), "2", "b.com", now=NOW)

    assert [domain.token_id for domain in untrack(tracked, "1")] == ["2"]
    assert untrack(tracked, "missing") == tracked


class TestCheckOfferAlerts:
    def test_first_observation_only_records_the_count(self) -> None:
        tracked = track((), "1", "a.com", now=NOW)

        alerts, updated = check_offer_alerts(tracked, {"1": 4}, now=NOW)

        assert alerts == []
        assert updated[0].last_offer_count == 4
        assert updated[0].last_checked == NOW

    def test_rising_count_raises_an_alert(self) -> None:
        later = NOW + timedelta(days=1)
        tracked = (
            TrackedDomain(token_id="1", domain_name="a.com", added_at=NOW, last_offer_count=2),
        )

        alerts, updated = check_offer_alerts(tracked, {"1": 5}, now=later)

        assert alerts == [
            OfferAlert(
                token_id="1", domain_name="a.com", new_offers=3, offer_count=5, timestamp=later
            )
        ]
        assert alerts[0].message == "3 new offers received"
        assert updated[0].last_offer_count == 5

    def test_single_offer_message(self) -> None:
        tracked = (
            TrackedDomain(token_id="1", domain_name="a.com", added_at=NOW, last_offer_count=0),
        )

        alerts, _ = check_offer_alerts(tracked, {"1": 1}, now=NOW)

        assert alerts[0].message == "1 new offer received"

    def test_falling_count_is_recorded_without_alert(self) -> None:
        tracked = (
            TrackedDomain(token_id="1", domain_name="a.com", added_at=NOW, last_offer_count=5),
        )

        alerts, updated = check_offer_alerts(tracked, {"1": 2}, now=NOW)

        assert alerts == []
        assert updated[0].last_offer_count == 2

    def test_missing_counts_leave_domains_untouched(self) -> None:
        tracked = track((), "1", "a.com", now=NOW)

        alerts, updated = check_offer_alerts(tracked, {"other": 9}, now=NOW)

        assert alerts == []
        assert updated == tracked
