"""Journey timeline.

Builds the list of events the journey view renders: the day the journey
began, every recorded slip-up, and each milestone reached in the current
streak. Newest first.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from models import TimelineEventType
from schemas import Profile, SlipUp, TimelineEvent
from services.date_service import parse_date_string
from services.milestones_service import build_milestones
from services.sobriety_service import compute_metrics

SLIP_UP_DEFAULT_DESCRIPTION = "Recovery journey restarted"

# Same-day events are listed milestone first, journey start last
_TYPE_ORDER = {
    TimelineEventType.MILESTONE: 0,
    TimelineEventType.SLIP_UP: 1,
    TimelineEventType.SOBRIETY_START: 2,
}


def _slip_up_event(slip_up: SlipUp, index: int) -> TimelineEvent:
    return TimelineEvent(
        id=f"slip-up-{slip_up.id or index}",
        type=TimelineEventType.SLIP_UP,
        date=slip_up.slip_up_date,
        title="Slip Up",
        description=slip_up.note or SLIP_UP_DEFAULT_DESCRIPTION,
        icon="refresh",
        metadata={
            "slip_up_id": slip_up.id,
            "recovery_restart_date": slip_up.recovery_restart_date,
        },
    )


def build_timeline(
    profile: Profile | None,
    slip_ups: Iterable[SlipUp],
    now: datetime | None = None,
    default_timezone: str | None = None,
    milestone_set: Iterable[int] | None = None,
) -> list[TimelineEvent]:
    """Build journey timeline events, newest first.

    Raises:
        InvalidDateFormatError: A stored date is malformed.
    """
    slip_ups = list(slip_ups)
    if now is None:
        now = datetime.now(UTC)

    events: list[TimelineEvent] = []

    if profile is not None and profile.journey_start_date:
        parse_date_string(profile.journey_start_date)
        events.append(
            TimelineEvent(
                id="sobriety-start",
                type=TimelineEventType.SOBRIETY_START,
                date=profile.journey_start_date,
                title="Recovery Journey Began",
                description="Started your path to recovery",
                icon="calendar",
            )
        )

    for index, slip_up in enumerate(slip_ups):
        parse_date_string(slip_up.slip_up_date)
        events.append(_slip_up_event(slip_up, index))

    metrics = compute_metrics(profile, slip_ups, now, default_timezone)
    for milestone in build_milestones(metrics, milestone_set):
        events.append(
            TimelineEvent(
                id=f"milestone-{milestone.days}",
                type=TimelineEventType.MILESTONE,
                date=milestone.reached_on,
                title=milestone.label,
                description=f"Reached {milestone.label} milestone",
                icon="award",
                metadata={"days": milestone.days},
            )
        )

    # ISO dates sort chronologically as strings; every date was validated above
    events.sort(key=lambda e: _TYPE_ORDER[e.type])
    events.sort(key=lambda e: e.date, reverse=True)
    return events
