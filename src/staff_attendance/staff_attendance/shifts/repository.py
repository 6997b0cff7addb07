from __future__ import annotations

from typing import Protocol, Sequence

from .model import ShiftSchedule


class ShiftRepository(Protocol):
    def list_all(self) -> Sequence[ShiftSchedule]:
        raise NotImplementedError
