from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Canonical attendance status stored per team member per day."""

    ON_TIME = "on_time"
    LATE = "late"
    LEFT_EARLY = "left_early"
    LATE_AND_LEFT_EARLY = "late_and_left_early"
    NO_SHOW = "no_show"
    DAY_OFF = "day_off"


class StatusFlag(str, Enum):
    """Independent toggles that combine into a flag-based status."""

    LATE = "late"
    LEFT_EARLY = "left_early"


class ShiftBoundary(str, Enum):
    START = "start"
    END = "end"


class AttendanceErrorKind(str, Enum):
    FETCH = "fetch"
    WRITE = "write"
