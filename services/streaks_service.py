"""Streak anchor selection.

Two start dates coexist for every journey:
- journey start: the original onboarding date, never changed by slip-ups
- streak anchor: the date the current unbroken streak counts from

The anchor is the journey start until a slip-up exists; after that it is
the recovery-restart date of the most recent slip-up.
"""

from collections.abc import Iterable
from datetime import date, datetime

from schemas import SlipUp, StreakAnchor
from services.date_service import parse_date_string


def _recency_key(slip_up: SlipUp) -> tuple[date, datetime]:
    return (parse_date_string(slip_up.recovery_restart_date), slip_up.created_at)


def find_most_recent_slip_up(slip_ups: Iterable[SlipUp]) -> SlipUp | None:
    """Return the slip-up with the latest recovery-restart date.

    Storage order is never trusted. Ties on the restart date go to the
    newest ``created_at``.

    Raises:
        InvalidDateFormatError: A recovery-restart date is malformed.
    """
    return max(slip_ups, key=_recency_key, default=None)


def select_streak_anchor(
    journey_start_date: str | None,
    slip_ups: Iterable[SlipUp],
) -> StreakAnchor:
    """Determine which date anchors the current streak.

    Args:
        journey_start_date: The profile's original start date, if onboarded.
        slip_ups: Every slip-up recorded for the user, in any order.

    Returns:
        StreakAnchor with the anchor date and the slip-up that set it.
        With no journey start and no slip-ups every field is empty and
        ``is_started`` is False.
    """
    most_recent = find_most_recent_slip_up(slip_ups)

    if most_recent is None:
        return StreakAnchor(
            anchor_date=journey_start_date or None,
            journey_start_date=journey_start_date or None,
        )

    return StreakAnchor(
        anchor_date=most_recent.recovery_restart_date,
        journey_start_date=journey_start_date or None,
        has_slip_ups=True,
        most_recent_slip_up=most_recent,
    )
