"""Sobriety metrics.

Combines timezone resolution, streak anchor selection and calendar day
counting into the values the journey and home views display. Pure: the
current instant is a parameter and nothing is cached or persisted.
"""

from collections.abc import Iterable
from datetime import datetime

from models import JourneyState
from schemas import Profile, SlipUp, SobrietyMetrics
from services.date_service import day_difference
from services.streaks_service import select_streak_anchor
from services.timezone_service import resolve_timezone


def compute_metrics(
    profile: Profile | None,
    slip_ups: Iterable[SlipUp],
    now: datetime,
    default_timezone: str | None = None,
) -> SobrietyMetrics:
    """Compute current streak and total journey length.

    Args:
        profile: The user's profile (journey start date, timezone).
        slip_ups: All slip-ups for the user, in any order.
        now: The instant to measure up to.
        default_timezone: Fallback when the profile stores no timezone.

    Returns:
        SobrietyMetrics. days_sober counts from the most recent recovery
        restart (or the journey start when there are no slip-ups);
        journey_days always counts from the original journey start.

    Raises:
        InvalidDateFormatError: A stored date is malformed. Never masked
            as zero; it is a data problem the caller has to surface.
        InvalidTimezoneError: The resolved timezone is unknown.
    """
    timezone = resolve_timezone(profile, default_timezone)
    journey_start_date = profile.journey_start_date if profile else None

    anchor = select_streak_anchor(journey_start_date, slip_ups)

    days_sober = 0
    if anchor.anchor_date:
        days_sober = day_difference(anchor.anchor_date, now, timezone)

    journey_days = 0
    if anchor.journey_start_date:
        journey_days = day_difference(anchor.journey_start_date, now, timezone)

    return SobrietyMetrics(
        days_sober=days_sober,
        journey_days=journey_days,
        has_slip_ups=anchor.has_slip_ups,
        most_recent_slip_up=anchor.most_recent_slip_up,
        journey_start_date=anchor.journey_start_date,
        current_streak_start_date=anchor.anchor_date,
        timezone=timezone,
        state=JourneyState.ACTIVE if anchor.is_started else JourneyState.NOT_STARTED,
    )
