from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TeamMember:
    """Staff member as seen by attendance tracking (owned by the directory)."""

    id: str
    full_name: str
    shift_code: Optional[str]
    is_active: bool = True
