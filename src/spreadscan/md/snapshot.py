from __future__ import annotations
import orjson
from pydantic import ValidationError
from spreadscan.core.types import OrderBook
from spreadscan.core.errors import SnapshotDecodeError
from spreadscan.core.utils import to_json

def _text(payload) -> str:
    return payload.decode("utf-8", errors="replace") if isinstance(payload, (bytes, bytearray)) else str(payload)

def parse_key(payload) -> str:
    """A JSON object with a string "key" names the book; anything else is the key itself."""
    try:
        obj = orjson.loads(payload)
    except orjson.JSONDecodeError:
        return _text(payload)
    if isinstance(obj, dict) and isinstance(obj.get("key"), str):
        return obj["key"]
    return _text(payload)

def decode_book(key: str, raw) -> OrderBook:
    try:
        d = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise SnapshotDecodeError(key, str(e)) from e
    if not isinstance(d, dict):
        raise SnapshotDecodeError(key, f"expected object, got {type(d).__name__}")
    try:
        return OrderBook(**d)
    except (ValidationError, TypeError, IndexError, ArithmeticError) as e:
        raise SnapshotDecodeError(key, str(e)) from e

def encode_book(book: OrderBook) -> bytes:
    return to_json(book.model_dump())
