from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ADMIN_ROLE = "admin"
MEMBER_ROLE = "member"


@dataclass(frozen=True)
class Identity:
    """Caller identity decoded from a verified access token."""

    user_id: int
    role: str
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE
