from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def to_json(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, sort_keys=True)


def from_json(text: str | None, default: Any = None) -> Any:
    if not text:
        return default
    return json.loads(text)


def placeholders(n: int) -> str:
    return ", ".join("?" for _ in range(n))
