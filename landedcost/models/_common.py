from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec="seconds") + "Z"


def new_id() -> str:
    return str(uuid4())
