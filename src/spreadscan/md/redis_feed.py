from __future__ import annotations
import asyncio
import logging
from typing import AsyncIterator, Optional
import redis.asyncio as redis
from redis.exceptions import RedisError
from spreadscan.core.config import RedisSettings
from spreadscan.core.errors import ConnectionSetupError, TransportError
from spreadscan.core.types import OrderBook
from spreadscan.md.snapshot import encode_book

log = logging.getLogger(__name__)

def snapshot_key(book: OrderBook) -> str:
    return f"orderbook:{book.exchange}:{book.pair}"

class RedisFeed:
    """Update notifications over pub/sub, latest snapshots under plain string keys."""

    def __init__(self, settings: RedisSettings, channel: str = "orderbook_updates",
                 client: Optional[redis.Redis] = None):
        self.settings = settings
        self.channel = channel
        self.client = client or redis.Redis(host=settings.host, port=settings.port,
                                            password=settings.password, db=0)

    async def connect(self):
        try:
            await self.client.ping()
        except (RedisError, OSError) as e:
            raise ConnectionSetupError(f"Redis connection failed at {self.settings.addr}: {e}") from e

    async def notifications(self, reconnect_delay_s: float = 1.0) -> AsyncIterator[bytes]:
        while True:
            pubsub = self.client.pubsub()
            try:
                await pubsub.subscribe(self.channel)
                log.info("Subscribed to %s channel", self.channel)
                async for msg in pubsub.listen():
                    if msg.get("type") == "message":
                        yield msg["data"]
            except (RedisError, OSError) as e:
                log.error("Notification channel error: %s", e)
                await asyncio.sleep(reconnect_delay_s)
            finally:
                await pubsub.aclose()

    async def fetch(self, key: str) -> bytes:
        try:
            data = await self.client.get(key)
        except (RedisError, OSError) as e:
            raise TransportError(f"Failed to fetch orderbook {key}: {e}") from e
        if data is None:
            raise TransportError(f"No orderbook stored under {key}")
        return data

    async def push(self, book: OrderBook, ttl_s: int = 30) -> str:
        key = snapshot_key(book)
        try:
            await self.client.set(key, encode_book(book), ex=ttl_s)
            await self.client.publish(self.channel, key)
        except (RedisError, OSError) as e:
            raise TransportError(f"Failed to push orderbook {key}: {e}") from e
        log.debug("Pushed and published orderbook: %s", key)
        return key

    async def close(self):
        await self.client.aclose()
