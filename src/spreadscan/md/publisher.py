from __future__ import annotations
import asyncio
import logging
from typing import List
import ccxt
from spreadscan.core.types import OrderBook
from spreadscan.core.errors import TransportError
from spreadscan.core.symbol_map import unify_symbol
from spreadscan.md.redis_feed import RedisFeed

log = logging.getLogger(__name__)

def to_order_book(ex_id: str, pair: str, ob: dict, depth: int) -> OrderBook:
    ts = ob.get("timestamp") or ob.get("nonce") or 0
    return OrderBook(
        exchange=ex_id,
        pair=unify_symbol(pair),
        bids=[lvl[:2] for lvl in ob.get("bids", [])[:depth]],
        asks=[lvl[:2] for lvl in ob.get("asks", [])[:depth]],
        timestamp=int(ts),
    )

async def run_rest_exchange(ex_id: str, pairs: List[str], poll_ms: int, feed: RedisFeed,
                            depth: int = 5, ttl_s: int = 30):
    """Poll top-of-book depth for each pair via ccxt and push every snapshot to the feed."""
    ex = getattr(ccxt, ex_id)({"enableRateLimit": True})
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, ex.load_markets)
    avail = [p for p in pairs if p in ex.markets]
    missing = sorted(set(pairs) - set(avail))
    if missing:
        log.warning("%s: pairs not listed, skipping %s", ex_id, ", ".join(missing))

    async def poll_pair(p: str):
        while True:
            try:
                ob = await loop.run_in_executor(None, ex.fetch_order_book, p, depth)
                await feed.push(to_order_book(ex_id, p, ob, depth), ttl_s=ttl_s)
            except (ccxt.BaseError, TransportError) as e:
                log.warning("%s %s: poll failed (%s)", ex_id, p, e)
            await asyncio.sleep(poll_ms / 1000)

    await asyncio.gather(*(poll_pair(p) for p in avail))
