from __future__ import annotations
from datetime import datetime, timezone
from decimal import Decimal
import orjson, uuid

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def new_id() -> str:
    return str(uuid.uuid4())

def _default(obj):
    if isinstance(obj, Decimal):
        return float(obj)
    raise TypeError

def to_json(obj) -> bytes:
    return orjson.dumps(obj, default=_default)
