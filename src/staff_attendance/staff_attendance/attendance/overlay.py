"""Uncommitted edits layered over persisted records.

The persisted side is an immutable snapshot; the overlay holds what the user
has typed or toggled but not yet committed. ``get_display_state`` merges the
two without touching either, so the merge rules are testable on their own.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import time
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from ..common.datetime_utils import format_clock_time
from ..core.enums import AttendanceStatus, StatusFlag
from .model import AttendanceRecord
from .status_machine import canonical_status, flags_for_status, is_exclusive

EDITABLE_FIELDS = frozenset({"flags", "clock_in_time", "clock_out_time", "notes"})


@dataclass(frozen=True)
class PendingEdit:
    flags: frozenset[StatusFlag] = frozenset()
    clock_in_time: Optional[time] = None
    clock_out_time: Optional[time] = None
    notes: Optional[str] = None
    # Only fields named here override the persisted record.
    edited: frozenset[str] = frozenset()

    def with_value(self, name: str, value: Any) -> "PendingEdit":
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"Not an editable field: {name!r}")
        return replace(self, **{name: value}, edited=self.edited | {name})

    def has(self, name: str) -> bool:
        return name in self.edited


class PendingEditOverlay:
    """Pending edits keyed by team member id."""

    def __init__(self) -> None:
        self._edits: dict[str, PendingEdit] = {}

    def get(self, team_member_id: str) -> Optional[PendingEdit]:
        return self._edits.get(team_member_id)

    def set_field(self, team_member_id: str, name: str, value: Any) -> PendingEdit:
        edit = self._edits.get(team_member_id, PendingEdit()).with_value(name, value)
        self._edits[team_member_id] = edit
        return edit

    def clear(self, team_member_id: str) -> None:
        self._edits.pop(team_member_id, None)

    def retain(self, team_member_id: str, names: Iterable[str]) -> None:
        """Drop every edited field of a member except ``names``."""
        edit = self._edits.get(team_member_id)
        if edit is None:
            return
        keep = edit.edited & frozenset(names)
        if keep:
            self._edits[team_member_id] = replace(edit, edited=keep)
        else:
            del self._edits[team_member_id]

    def snapshot(self) -> Mapping[str, PendingEdit]:
        return MappingProxyType(dict(self._edits))

    def __contains__(self, team_member_id: object) -> bool:
        return team_member_id in self._edits

    def __len__(self) -> int:
        return len(self._edits)


@dataclass(frozen=True)
class DisplayState:
    team_member_id: str
    status: Optional[AttendanceStatus]
    flags: frozenset[StatusFlag]
    clock_in_time: Optional[time]
    clock_out_time: Optional[time]
    notes: Optional[str]
    is_submitted: bool
    is_combined: bool
    has_pending: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "team_member_id": self.team_member_id,
            "status": self.status.value if self.status else None,
            "flags": sorted(f.value for f in self.flags),
            "clock_in_time": format_clock_time(self.clock_in_time),
            "clock_out_time": format_clock_time(self.clock_out_time),
            "notes": self.notes or "",
            "is_submitted": self.is_submitted,
            "is_combined": self.is_combined,
            "has_pending": self.has_pending,
            "error": self.error,
        }


def get_display_state(
    team_member_id: str,
    persisted: Optional[AttendanceRecord],
    pending: Optional[PendingEdit],
    *,
    error: Optional[str] = None,
) -> DisplayState:
    persisted_status = persisted.status if persisted else None

    if pending is not None and pending.has("flags"):
        flags = pending.flags
        status = canonical_status(flags)
        # Clearing both flags falls back to a prior exclusive status, else unset.
        if status is None and is_exclusive(persisted_status):
            status = persisted_status
    else:
        flags = flags_for_status(persisted_status)
        status = persisted_status

    def pick(name: str):
        if pending is not None and pending.has(name):
            return getattr(pending, name)
        return getattr(persisted, name) if persisted else None

    return DisplayState(
        team_member_id=team_member_id,
        status=status,
        flags=frozenset(flags),
        clock_in_time=pick("clock_in_time"),
        clock_out_time=pick("clock_out_time"),
        notes=pick("notes"),
        is_submitted=persisted is not None,
        is_combined=persisted_status == AttendanceStatus.LATE_AND_LEFT_EARLY,
        has_pending=pending is not None,
        error=error,
    )
