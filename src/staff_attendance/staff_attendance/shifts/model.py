from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class ShiftSchedule:
    """Named work schedule; the end may fall after midnight."""

    shift_code: str
    shift_name: str
    start_time: time
    end_time: time
