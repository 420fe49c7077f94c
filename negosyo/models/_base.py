"""Column helpers shared by the ORM models."""
import json
from datetime import datetime, timezone
from typing import Any


def utcnow():
    return datetime.now(timezone.utc)


def dump_json(value: Any) -> str:
    """Serialize a JSON column value with stable key order."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def load_json(raw: str | None, default: Any = None) -> Any:
    if not raw:
        return default
    return json.loads(raw)
