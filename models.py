"""Enumerations shared by the timeline engine and its callers.

Profile and slip-up rows live in the external store; only the value
vocabularies the engine produces are defined here.
"""

from enum import Enum as PyEnum


class JourneyState(str, PyEnum):
    """Whether a recovery timeline exists for the account.

    NOT_STARTED is the "empty journey" state: no journey-start date and
    no slip-ups. Callers must branch on it explicitly; it is not an error.
    """

    NOT_STARTED = "not_started"
    ACTIVE = "active"


class TimelineEventType(str, PyEnum):
    """Kind of entry shown on the journey timeline."""

    SOBRIETY_START = "sobriety_start"
    SLIP_UP = "slip_up"
    MILESTONE = "milestone"
