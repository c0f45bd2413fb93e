"""Pydantic schemas for records consumed and produced by the engine."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models import JourneyState, TimelineEventType


class Profile(BaseModel):
    """Profile row as read from storage.

    Calendar dates are kept as raw strings; the date layer validates them
    so that malformed stored dates surface as InvalidDateFormatError.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str | None = None
    journey_start_date: str | None = Field(default=None, alias="sobriety_date")
    timezone: str | None = None


class SlipUp(BaseModel):
    """A recorded slip-up. Immutable once created."""

    model_config = ConfigDict(
        from_attributes=True, populate_by_name=True, frozen=True
    )

    id: str | None = None
    user_id: str | None = None
    slip_up_date: str
    recovery_restart_date: str
    note: str | None = Field(default=None, alias="notes")
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # Storage timestamps without an offset are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class StreakAnchor(BaseModel):
    """Which date the current unbroken streak counts from."""

    model_config = ConfigDict(frozen=True)

    anchor_date: str | None = None
    journey_start_date: str | None = None
    has_slip_ups: bool = False
    most_recent_slip_up: SlipUp | None = None

    @property
    def is_started(self) -> bool:
        return self.anchor_date is not None


class SobrietyMetrics(BaseModel):
    """Derived day counts for the presentation layer.

    days_sober counts from the current streak anchor; journey_days always
    counts from the original journey-start date.
    """

    days_sober: int = 0
    journey_days: int = 0
    has_slip_ups: bool = False
    most_recent_slip_up: SlipUp | None = None
    journey_start_date: str | None = None
    current_streak_start_date: str | None = None
    timezone: str
    state: JourneyState = JourneyState.NOT_STARTED


class MilestoneData(BaseModel):
    """A milestone reached within the current streak."""

    days: int
    label: str
    reached_on: str


class NextMilestone(BaseModel):
    """The closest milestone not yet reached."""

    days: int
    label: str
    days_remaining: int


class TimelineEvent(BaseModel):
    """A single entry on the journey timeline."""

    id: str
    type: TimelineEventType
    date: str
    title: str
    description: str
    icon: str
    metadata: dict[str, Any] | None = None


class RecordsExport(BaseModel):
    """A profile and its slip-ups as exported from storage."""

    profile: Profile | None = None
    slip_ups: list[SlipUp] = Field(default_factory=list)

    @field_validator("slip_ups", mode="before")
    @classmethod
    def null_means_empty(cls, value: Any) -> Any:
        return [] if value is None else value
