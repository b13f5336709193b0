from decimal import Decimal as D

import orjson
import pytest

from spreadscan.core.errors import SnapshotDecodeError
from spreadscan.md.snapshot import decode_book, encode_book, parse_key


def test_parse_key_from_json_object():
    assert parse_key(b'{"key": "orderbook:binance:BTC/USDT"}') == "orderbook:binance:BTC/USDT"


def test_parse_key_falls_back_to_raw_payload():
    assert parse_key(b"orderbook:binance:BTC/USDT") == "orderbook:binance:BTC/USDT"
    assert parse_key("plain-key") == "plain-key"
    # valid JSON without a string "key" field is still the raw payload
    assert parse_key(b'{"key": 5}') == '{"key": 5}'
    assert parse_key(b"42") == "42"


def test_decode_book():
    raw = orjson.dumps({
        "exchange": "binance", "pair": "BTC/USDT",
        "bids": [[30000.5, 0.25], [29999.0, 1.0]],
        "asks": [[30001.0, 0.5]],
        "timestamp": 1700000000,
    })
    book = decode_book("k", raw)
    assert book.key == "binance:BTC/USDT"
    assert book.best_bid == (D("30000.5"), D("0.25"))
    assert book.best_ask == (D("30001.0"), D("0.5"))
    assert book.usable
    assert book.timestamp == 1700000000


@pytest.mark.parametrize("raw", [
    b"not json",
    b"[1, 2]",
    b'{"pair": "BTC/USDT"}',
    b'{"exchange": "x", "pair": "BTC/USDT", "bids": [[1]], "asks": [], "timestamp": 1}',
    b'{"exchange": "x", "pair": "BTC/USDT", "bids": [], "asks": [], "timestamp": "soon"}',
    b'{"exchange": "x", "pair": "BTC/USDT", "bids": [{"p": 1}], "asks": [], "timestamp": 1}',
    b'{"exchange": "x", "pair": "BTC/USDT", "bids": ["12"], "asks": ["34"], "timestamp": 1}',
    b'{"exchange": "x", "pair": "BTC/USDT", "bids": [[1, 2, 3]], "asks": [], "timestamp": 1}',
    b'{"exchange": "x", "pair": "BTC/USDT", "bids": [["abc", 1]], "asks": [], "timestamp": 1}',
    b'{"exchange": "x", "pair": "BTC/USDT", "bids": {"1": 2}, "asks": [], "timestamp": 1}',
])
def test_decode_failures_carry_key(raw):
    with pytest.raises(SnapshotDecodeError) as exc:
        decode_book("orderbook:x:BTC/USDT", raw)
    assert exc.value.key == "orderbook:x:BTC/USDT"
    assert "orderbook:x:BTC/USDT" in str(exc.value)


def test_encode_book_flat_layout():
    raw = orjson.dumps({"exchange": "a", "pair": "BTC/USDT", "bids": [[1.5, 2.0]], "asks": [], "timestamp": 3})
    d = orjson.loads(encode_book(decode_book("k", raw)))
    assert d == {"exchange": "a", "pair": "BTC/USDT", "bids": [[1.5, 2.0]], "asks": [], "timestamp": 3}
