from __future__ import annotations

import logging
import threading
from datetime import date, time
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..autosave.registry import TaskRegistry
from ..common.validators import clean_notes
from ..core.constants import DEFAULT_AUTOSAVE_DELAY_MS
from ..core.enums import AttendanceStatus, StatusFlag
from ..core.exceptions import AttendanceError, FetchError, ValidationError
from .model import AttendanceRecord, MarkAttendanceParams
from .overlay import DisplayState, PendingEditOverlay, get_display_state
from .service import AttendanceService
from .status_machine import StatusStateMachine, is_exclusive, toggle_flag

logger = logging.getLogger(__name__)


class AttendanceSheet:
    """Editable attendance for one tenant and one day.

    Exclusive statuses commit as soon as they are selected. Flag toggles commit
    once the clock times they need are present. Clock-time and notes edits are
    debounced per team member; when the timer fires the sheet re-reads what is
    currently displayed, so only the last value of a burst is written.
    """

    def __init__(
        self,
        service: AttendanceService,
        *,
        tenant_id: str,
        work_date: date,
        registry: Optional[TaskRegistry] = None,
        state_machine: Optional[StatusStateMachine] = None,
        autosave_delay_ms: int = DEFAULT_AUTOSAVE_DELAY_MS,
    ):
        self._service = service
        self.tenant_id = tenant_id
        self.work_date = work_date
        self._registry = registry if registry is not None else TaskRegistry()
        self._machine = state_machine or StatusStateMachine()
        self._delay_ms = int(autosave_delay_ms)

        self._persisted: Mapping[str, AttendanceRecord] = MappingProxyType({})
        self._overlay = PendingEditOverlay()
        self._row_errors: dict[str, str] = {}
        self._last_edited: dict[str, str] = {}
        self._loaded = False
        self.fetch_error: Optional[str] = None
        self._lock = threading.RLock()

    # -- persisted snapshot -------------------------------------------------

    def load(self) -> list[AttendanceRecord]:
        """(Re)load the day from storage. Pending edits are kept.

        On failure the previously loaded rows stay visible and ``fetch_error``
        is set; calling ``load`` again retries.
        """
        try:
            records = self._service.fetch_daily(tenant_id=self.tenant_id, work_date=self.work_date)
        except FetchError as exc:
            logger.warning("Could not load attendance for %s: %s", self.work_date, exc)
            with self._lock:
                self.fetch_error = str(exc)
                return list(self._persisted.values())

        with self._lock:
            self.fetch_error = None
            self._loaded = True
            self._persisted = MappingProxyType({r.team_member_id: r for r in records})
        return records

    @property
    def needs_load(self) -> bool:
        """True until a load succeeds, and again after a failed reload."""
        return not self._loaded or self.fetch_error is not None

    def persisted(self, team_member_id: str) -> Optional[AttendanceRecord]:
        return self._persisted.get(team_member_id)

    def _store(self, record: AttendanceRecord) -> None:
        updated = dict(self._persisted)
        updated[record.team_member_id] = record
        self._persisted = MappingProxyType(updated)

    def _forget(self, team_member_id: str) -> None:
        updated = dict(self._persisted)
        updated.pop(team_member_id, None)
        self._persisted = MappingProxyType(updated)

    # -- display -------------------------------------------------------------

    def get_display_state(self, team_member_id: str) -> DisplayState:
        with self._lock:
            return get_display_state(
                team_member_id,
                self._persisted.get(team_member_id),
                self._overlay.get(team_member_id),
                error=self._row_errors.get(team_member_id),
            )

    def display_states(self, team_member_ids: Iterable[str]) -> list[DisplayState]:
        return [self.get_display_state(mid) for mid in team_member_ids]

    def has_pending_saves(self) -> bool:
        return len(self._registry) > 0

    # -- UI events -----------------------------------------------------------

    def select_status(self, team_member_id: str, status: AttendanceStatus, *, actor_id: str) -> DisplayState:
        """Commit an exclusive status now, clearing flags and clock times."""
        status = AttendanceStatus(status)
        if not is_exclusive(status):
            raise ValidationError(f"{status.value} is set by toggling its flags")

        with self._lock:
            self._registry.cancel(team_member_id)
            self._last_edited.pop(team_member_id, None)
            current = self.get_display_state(team_member_id)
            params = self._machine.build_params(
                team_member_id=team_member_id,
                work_date=self.work_date,
                status=status,
                notes=current.notes,
            )
            if self._commit(params, actor_id=actor_id) is not None:
                self._overlay.clear(team_member_id)
            return self.get_display_state(team_member_id)

    def toggle_flag(self, team_member_id: str, flag: StatusFlag, *, actor_id: str) -> DisplayState:
        """Toggle late / left early; commits only when the selection is complete."""
        flag = StatusFlag(flag)
        with self._lock:
            flags = toggle_flag(self.get_display_state(team_member_id).flags, flag)
            self._overlay.set_field(team_member_id, "flags", flags)

            state = self.get_display_state(team_member_id)
            params = self._ready_params(state)
            if params is not None:
                self._registry.cancel(team_member_id)
                self._last_edited.pop(team_member_id, None)
                if not self._differs(params, self._persisted.get(team_member_id)):
                    self._overlay.clear(team_member_id)
                elif self._commit(params, actor_id=actor_id) is not None:
                    self._overlay.clear(team_member_id)
            return self.get_display_state(team_member_id)

    def change_clock_in(self, team_member_id: str, value: Optional[time], *, actor_id: str) -> DisplayState:
        return self._edit(team_member_id, "clock_in_time", value, actor_id=actor_id)

    def change_clock_out(self, team_member_id: str, value: Optional[time], *, actor_id: str) -> DisplayState:
        return self._edit(team_member_id, "clock_out_time", value, actor_id=actor_id)

    def change_notes(self, team_member_id: str, notes: Optional[str], *, actor_id: str) -> DisplayState:
        return self._edit(team_member_id, "notes", notes or "", actor_id=actor_id)

    def delete(self, team_member_id: str) -> DisplayState:
        with self._lock:
            self._registry.cancel(team_member_id)
            self._last_edited.pop(team_member_id, None)
            record = self._persisted.get(team_member_id)
            if record is not None:
                try:
                    self._service.delete_attendance(record.id, tenant_id=self.tenant_id)
                except AttendanceError as exc:
                    logger.warning("Delete failed for %s on %s: %s", team_member_id, self.work_date, exc)
                    self._row_errors[team_member_id] = str(exc)
                    return self.get_display_state(team_member_id)
                self._forget(team_member_id)
            self._row_errors.pop(team_member_id, None)
            self._overlay.clear(team_member_id)
            return self.get_display_state(team_member_id)

    def flush(self, team_member_id: str, *, actor_id: str) -> DisplayState:
        """Run a pending autosave now instead of waiting for its timer."""
        if self._registry.cancel(team_member_id):
            self._autosave(team_member_id, actor_id)
        return self.get_display_state(team_member_id)

    def close(self) -> None:
        self._registry.cancel_all()

    # -- internals -----------------------------------------------------------

    def _edit(self, team_member_id: str, field: str, value, *, actor_id: str) -> DisplayState:
        with self._lock:
            self._overlay.set_field(team_member_id, field, value)
            self._last_edited[team_member_id] = field
            self._registry.schedule(
                team_member_id,
                self._delay_ms,
                lambda: self._autosave(team_member_id, actor_id),
            )
            return self.get_display_state(team_member_id)

    def _autosave(self, team_member_id: str, actor_id: str) -> None:
        with self._lock:
            existed = team_member_id in self._persisted
            field = self._last_edited.pop(team_member_id, None)
            state = self.get_display_state(team_member_id)
            params = self._ready_params(state)
            if params is None:
                logger.debug("Holding incomplete selection for %s", team_member_id)
                return
            if not self._differs(params, self._persisted.get(team_member_id)):
                return
            if self._commit(params, actor_id=actor_id) is None:
                return
            # Existing rows keep the saved field pending so a refresh racing the edit cannot flicker.
            if existed and field is not None:
                self._overlay.retain(team_member_id, (field,))
            else:
                self._overlay.clear(team_member_id)

    def _ready_params(self, state: DisplayState) -> Optional[MarkAttendanceParams]:
        if not self._machine.is_commit_ready(
            state.status, clock_in_time=state.clock_in_time, clock_out_time=state.clock_out_time
        ):
            return None
        return self._machine.build_params(
            team_member_id=state.team_member_id,
            work_date=self.work_date,
            status=state.status,
            clock_in_time=state.clock_in_time,
            clock_out_time=state.clock_out_time,
            notes=state.notes,
        )

    @staticmethod
    def _differs(params: MarkAttendanceParams, persisted: Optional[AttendanceRecord]) -> bool:
        if persisted is None:
            return True
        return (
            params.status != persisted.status
            or params.clock_in_time != persisted.clock_in_time
            or params.clock_out_time != persisted.clock_out_time
            or clean_notes(params.notes) != clean_notes(persisted.notes)
        )

    def _commit(self, params: MarkAttendanceParams, *, actor_id: str) -> Optional[AttendanceRecord]:
        member_id = params.team_member_id
        try:
            record = self._service.mark_attendance(params, tenant_id=self.tenant_id, actor_id=actor_id)
        except AttendanceError as exc:
            logger.warning("Save failed for %s on %s: %s", member_id, self.work_date, exc)
            self._row_errors[member_id] = str(exc)
            return None
        self._row_errors.pop(member_id, None)
        self._store(record)
        return record


class AttendanceSheetRegistry:
    """Keeps one live sheet per (tenant, day) for the web layer."""

    def __init__(
        self,
        service: AttendanceService,
        *,
        autosave_delay_ms: int = DEFAULT_AUTOSAVE_DELAY_MS,
        registry_factory=TaskRegistry,
        max_sheets: int = 31,
    ):
        self._service = service
        self._delay_ms = int(autosave_delay_ms)
        self._registry_factory = registry_factory
        self._max_sheets = int(max_sheets)
        self._sheets: dict[tuple[str, date], AttendanceSheet] = {}
        self._lock = threading.Lock()

    def get(self, tenant_id: str, work_date: date) -> AttendanceSheet:
        """Cached sheet for the day, loaded on first use and after a failed load."""
        key = (tenant_id, work_date)
        with self._lock:
            sheet = self._sheets.get(key)
            if sheet is None:
                sheet = AttendanceSheet(
                    self._service,
                    tenant_id=tenant_id,
                    work_date=work_date,
                    registry=self._registry_factory(),
                    autosave_delay_ms=self._delay_ms,
                )
                self._sheets[key] = sheet
                self._evict_idle(keep=key)
        # Storage round-trips happen outside the registry lock.
        if sheet.needs_load:
            sheet.load()
        return sheet

    def refresh(self, tenant_id: str, work_date: Optional[date] = None) -> None:
        """Reload cached sheets after writes made outside of them."""
        with self._lock:
            sheets = [
                s for (t, d), s in self._sheets.items()
                if t == tenant_id and (work_date is None or d == work_date)
            ]
        for sheet in sheets:
            sheet.load()

    def _evict_idle(self, *, keep: tuple[str, date]) -> None:
        # Oldest first; sheets with unsaved edits are never dropped.
        for key in list(self._sheets):
            if len(self._sheets) <= self._max_sheets:
                return
            if key != keep and not self._sheets[key].has_pending_saves():
                del self._sheets[key]
