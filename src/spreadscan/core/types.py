from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional, Tuple
from datetime import datetime
from decimal import Decimal
from spreadscan.core.utils import new_id, utc_now

Number = Decimal
Level = Tuple[Number, Number]        # (price, size)

def _num(x) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x))

class OrderBook(BaseModel):
    """Venue snapshot. bids descending, asks ascending, best level at index 0."""
    model_config = ConfigDict(frozen=True)

    exchange: str
    pair: str                # venue-native spelling, e.g. "WBTC/USDT"
    bids: List[Level] = []
    asks: List[Level] = []
    timestamp: int = 0

    @field_validator("bids", "asks", mode="before")
    @classmethod
    def _levels(cls, v):
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            raise ValueError("levels must be a list of [price, size]")
        out = []
        for lvl in v:
            if not isinstance(lvl, (list, tuple)) or len(lvl) != 2:
                raise ValueError(f"level must be [price, size], got {lvl!r}")
            try:
                out.append((_num(lvl[0]), _num(lvl[1])))
            except ArithmeticError as e:
                raise ValueError(f"non-numeric level {lvl!r}") from e
        return out

    @property
    def key(self) -> str:
        return book_key(self.exchange, self.pair)

    @property
    def usable(self) -> bool:
        return bool(self.bids) and bool(self.asks)

    @property
    def best_bid(self) -> Optional[Level]:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[Level]:
        return self.asks[0] if self.asks else None

def book_key(exchange: str, pair: str) -> str:
    return f"{exchange}:{pair}"

class ArbitrageOpportunity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    buy_exchange: str
    sell_exchange: str
    pair: str                # canonical
    buy_price: Number
    sell_price: Number
    max_size: Number
    gross_profit_per_unit: Number
    estimated_fees: Number
    net_profit: Number
    roi_percentage: Number
    timestamp: datetime

class ExecutionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    opportunity: ArbitrageOpportunity
    execution_size: Number
    created_at: datetime

    @classmethod
    def for_opportunity(cls, opp: ArbitrageOpportunity) -> "ExecutionRequest":
        return cls(id=new_id(), opportunity=opp, execution_size=opp.max_size, created_at=utc_now())

class RuntimeConfig(BaseModel):
    min_absolute_profit: Number = Decimal("1.0")
    min_roi_percentage: Number = Decimal("0.1")
    full_scan_interval: int = Field(10, ge=1)
    max_notional_usd: Number = Decimal("100000")
    default_reference_price: Number = Field(Decimal("50000"), gt=0)
    reference_prices: Dict[str, Number] = {}
    redis_channel: str = "orderbook_updates"
    snapshot_ttl_s: int = 30
    publish_poll_ms: int = 1000
    publish_depth: int = 5
    csv_out: Optional[str] = None
    dashboard_enabled: bool = False
    dashboard_host: str = "127.0.0.1"
    dashboard_port: int = 8000
