"""Tests for services/timeline_service.py."""

from datetime import UTC, datetime

import pytest
import time_machine

from models import TimelineEventType
from services.date_service import InvalidDateFormatError
from services.timeline_service import SLIP_UP_DEFAULT_DESCRIPTION, build_timeline
from tests.factories import ProfileFactory, SlipUpFactory

pytestmark = pytest.mark.unit


class TestBuildTimeline:
    def test_journey_start_only(self):
        profile = ProfileFactory.build(journey_start_date="2024-03-01", timezone="UTC")
        events = build_timeline(profile, [], now=datetime(2024, 3, 5, tzinfo=UTC))

        assert len(events) == 1
        assert events[0].type == TimelineEventType.SOBRIETY_START
        assert events[0].date == "2024-03-01"
        assert events[0].title == "Recovery Journey Began"

    def test_full_timeline_newest_first(self):
        profile = ProfileFactory.build(journey_start_date="2024-01-01", timezone="UTC")
        slip_ups = [
            SlipUpFactory.build(
                id="a",
                slip_up_date="2024-02-01",
                recovery_restart_date="2024-02-02",
                note="Rough week",
            ),
            SlipUpFactory.build(
                id="b", slip_up_date="2024-03-01", recovery_restart_date="2024-03-02"
            ),
        ]
        now = datetime(2024, 5, 5, 12, 0, tzinfo=UTC)

        events = build_timeline(profile, slip_ups, now=now)

        assert [(e.type, e.date) for e in events] == [
            (TimelineEventType.MILESTONE, "2024-05-01"),
            (TimelineEventType.MILESTONE, "2024-04-01"),
            (TimelineEventType.SLIP_UP, "2024-03-01"),
            (TimelineEventType.SLIP_UP, "2024-02-01"),
            (TimelineEventType.SOBRIETY_START, "2024-01-01"),
        ]
        assert events[0].title == "60 Days Sober"
        assert events[0].description == "Reached 60 Days Sober milestone"
        assert events[0].id == "milestone-60"

    def test_every_slip_up_is_listed(self):
        profile = ProfileFactory.build(journey_start_date="2024-01-01", timezone="UTC")
        slip_ups = [
            SlipUpFactory.build(slip_up_date=d)
            for d in ("2024-01-10", "2024-02-10", "2024-03-10")
        ]
        events = build_timeline(
            profile, slip_ups, now=datetime(2024, 3, 12, tzinfo=UTC)
        )
        slip_events = [e for e in events if e.type == TimelineEventType.SLIP_UP]
        assert len(slip_events) == 3

    def test_slip_up_description(self):
        profile = ProfileFactory.build(journey_start_date="2024-01-01", timezone="UTC")
        noted = SlipUpFactory.build(id="n", note="Stressful holiday")
        silent = SlipUpFactory.build(id="s", note=None)

        events = build_timeline(
            profile, [noted, silent], now=datetime(2024, 2, 5, tzinfo=UTC)
        )
        descriptions = {e.id: e.description for e in events}

        assert descriptions["slip-up-n"] == "Stressful holiday"
        assert descriptions["slip-up-s"] == SLIP_UP_DEFAULT_DESCRIPTION

    def test_slip_up_metadata(self):
        profile = ProfileFactory.build(journey_start_date="2024-01-01", timezone="UTC")
        slip_up = SlipUpFactory.build(
            id="x", slip_up_date="2024-02-01", recovery_restart_date="2024-02-03"
        )
        events = build_timeline(
            profile, [slip_up], now=datetime(2024, 2, 5, tzinfo=UTC)
        )
        slip_event = next(e for e in events if e.type == TimelineEventType.SLIP_UP)
        assert slip_event.metadata == {
            "slip_up_id": "x",
            "recovery_restart_date": "2024-02-03",
        }

    def test_same_day_ordering(self):
        """Same-day events: milestone, then slip-up, then journey start."""
        profile = ProfileFactory.build(journey_start_date="2024-01-01", timezone="UTC")
        first_day = SlipUpFactory.build(
            slip_up_date="2024-01-01", recovery_restart_date="2024-02-01"
        )
        # Restart recorded before the slip-up itself; accepted as-is
        inverted = SlipUpFactory.build(
            slip_up_date="2024-02-05", recovery_restart_date="2024-01-20"
        )
        events = build_timeline(
            profile,
            [first_day, inverted],
            now=datetime(2024, 2, 6, tzinfo=UTC),
            milestone_set=[4],
        )
        assert [(e.type, e.date) for e in events] == [
            (TimelineEventType.MILESTONE, "2024-02-05"),
            (TimelineEventType.SLIP_UP, "2024-02-05"),
            (TimelineEventType.SLIP_UP, "2024-01-01"),
            (TimelineEventType.SOBRIETY_START, "2024-01-01"),
        ]

    def test_not_started_is_empty(self):
        profile = ProfileFactory.build(journey_start_date=None, timezone="UTC")
        assert build_timeline(profile, [], now=datetime(2024, 1, 1, tzinfo=UTC)) == []

    def test_malformed_slip_up_date_raises(self):
        profile = ProfileFactory.build(journey_start_date="2024-01-01", timezone="UTC")
        bad = SlipUpFactory.build(
            slip_up_date="2024-02-31", recovery_restart_date="2024-03-01"
        )
        with pytest.raises(InvalidDateFormatError):
            build_timeline(profile, [bad], now=datetime(2024, 4, 1, tzinfo=UTC))

    @time_machine.travel(datetime(2024, 4, 10, 12, 0, tzinfo=UTC), tick=False)
    def test_now_defaults_to_current_time(self):
        profile = ProfileFactory.build(journey_start_date="2024-01-01", timezone="UTC")
        events = build_timeline(profile, [])
        milestone_days = [
            e.metadata["days"] for e in events if e.type == TimelineEventType.MILESTONE
        ]
        assert milestone_days == [90, 60, 30]
