"""Milestone detection for the current sobriety streak.

Milestones are derived on the fly from the streak length; nothing is
stored. They are always measured from the streak anchor, so after a
slip-up "30 Days Sober" means 30 days since the most recent restart,
not since the original journey start.
"""

from collections.abc import Iterable
from typing import TypedDict

from schemas import MilestoneData, NextMilestone, SobrietyMetrics
from services.date_service import add_days


class MilestoneInfo(TypedDict):
    """Milestone catalog entry."""

    id: str
    days: int
    label: str


MILESTONES: list[MilestoneInfo] = [
    {"id": "milestone_30", "days": 30, "label": "30 Days Sober"},
    {"id": "milestone_60", "days": 60, "label": "60 Days Sober"},
    {"id": "milestone_90", "days": 90, "label": "90 Days Sober"},
    {"id": "milestone_180", "days": 180, "label": "6 Months Sober"},
    {"id": "milestone_365", "days": 365, "label": "1 Year Sober"},
    {"id": "milestone_730", "days": 730, "label": "2 Years Sober"},
    {"id": "milestone_1095", "days": 1095, "label": "3 Years Sober"},
]

DEFAULT_MILESTONE_DAYS: tuple[int, ...] = tuple(m["days"] for m in MILESTONES)

_LABELS = {m["days"]: m["label"] for m in MILESTONES}


def _thresholds(milestone_set: Iterable[int] | None) -> list[int]:
    if milestone_set is None:
        return list(DEFAULT_MILESTONE_DAYS)
    return sorted(set(milestone_set))


def milestone_label(days: int) -> str:
    return _LABELS.get(days, f"{days} Days Sober")


def detect_milestones(
    days_sober: int,
    milestone_set: Iterable[int] | None = None,
) -> list[int]:
    """Return every threshold reached by the current streak, ascending.

    Args:
        days_sober: Current streak length in days.
        milestone_set: Thresholds to check; defaults to the catalog.

    Returns:
        Thresholds <= days_sober. Empty when days_sober is 0.
    """
    if days_sober <= 0:
        return []
    return [days for days in _thresholds(milestone_set) if days <= days_sober]


def next_milestone(
    days_sober: int,
    milestone_set: Iterable[int] | None = None,
) -> NextMilestone | None:
    """The first threshold strictly above days_sober, or None past the last."""
    current = max(days_sober, 0)
    for days in _thresholds(milestone_set):
        if days > current:
            return NextMilestone(
                days=days,
                label=milestone_label(days),
                days_remaining=days - current,
            )
    return None


def build_milestones(
    metrics: SobrietyMetrics,
    milestone_set: Iterable[int] | None = None,
) -> list[MilestoneData]:
    """Reached milestones with the calendar date each one was hit.

    The date is the streak anchor plus N calendar days.
    """
    anchor = metrics.current_streak_start_date
    if not anchor:
        return []

    return [
        MilestoneData(
            days=days,
            label=milestone_label(days),
            reached_on=add_days(anchor, days),
        )
        for days in detect_milestones(metrics.days_sober, milestone_set)
    ]
