from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TeamMember


class TeamMemberRepository(Protocol):
    def list_active(
        self,
        *,
        tenant_id: str,
        shift_code: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[TeamMember]:
        """Active members of a tenant, optionally narrowed by shift and name."""

        raise NotImplementedError
