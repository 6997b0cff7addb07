from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import AttendanceStatus
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_and_early_strategy import LateAndEarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import OnTimeStrategy


def _default_strategies() -> dict[AttendanceStatus, AttendanceStrategy]:
    return {
        AttendanceStatus.ON_TIME: OnTimeStrategy(),
        AttendanceStatus.LATE: LateStrategy(),
        AttendanceStatus.LEFT_EARLY: EarlyLeaveStrategy(),
        AttendanceStatus.LATE_AND_LEFT_EARLY: LateAndEarlyLeaveStrategy(),
        AttendanceStatus.NO_SHOW: AbsentStrategy(AttendanceStatus.NO_SHOW),
        AttendanceStatus.DAY_OFF: AbsentStrategy(AttendanceStatus.DAY_OFF),
    }


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: one strategy per canonical status."""

    strategies: dict[AttendanceStatus, AttendanceStrategy] = field(default_factory=_default_strategies)

    def for_status(self, status: AttendanceStatus) -> AttendanceStrategy:
        return self.strategies[AttendanceStatus(status)]
