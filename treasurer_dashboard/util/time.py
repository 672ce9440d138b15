from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current UTC time. Default clock for token issue/verify."""
    return datetime.now(timezone.utc)
