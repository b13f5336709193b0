from __future__ import annotations
import yaml
from decimal import Decimal as D
from pathlib import Path
from typing import Annotated, Dict, Optional
from pydantic import BaseModel, Field
from spreadscan.core.types import Number
from spreadscan.core.symbol_map import PairNormalizer

class VenueFee(BaseModel):
    taker_pct: Number = Field(D("0.1"), ge=0)     # percent, 0.1 == 0.1%
    maker_pct: Number = Field(D("0.1"), ge=0)
    gas_cost: Number = Field(D(0), ge=0)          # flat, charged once per leg on this venue

class FeeSchedule(BaseModel):
    venues: Dict[str, VenueFee] = {}
    default_fee_pct: Number = Field(D("0.15"), ge=0)
    withdrawal_fees: Dict[str, Annotated[Number, Field(ge=0)]] = {}     # per unit of size, by base asset
    use_market_orders: bool = True                # taker tier when True, maker otherwise

    @classmethod
    def default(cls) -> "FeeSchedule":
        return cls(
            venues={
                "binance": VenueFee(taker_pct=D("0.1"), maker_pct=D("0.1")),
                "uniswap-v3-exact": VenueFee(taker_pct=D("0.3"), maker_pct=D("0.3"), gas_cost=D(50)),
            },
            withdrawal_fees={"BTC": D("0.0005"), "WBTC": D("0.0005"), "ETH": D("0.005"), "USDT": D(10)},
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "FeeSchedule":
        d = yaml.safe_load(Path(path).read_text()) or {}
        return cls(**d)

    def fee_pct(self, ex: str) -> D:
        v = self.venues.get(ex)
        if v is None:
            return self.default_fee_pct
        return v.taker_pct if self.use_market_orders else v.maker_pct

    def gas_cost(self, ex: str) -> D:
        v = self.venues.get(ex)
        return v.gas_cost if v is not None else D(0)

def base_asset(pair: str) -> str:
    """
    Base asset heuristic: left of "/", else the pair with USDT/USD removed, else the
    first four characters. Lossy for symbols like "BTCEUR" (-> "BTCE").
    """
    if "/" in pair:
        return pair.split("/")[0]
    if "USDT" in pair:
        return pair.replace("USDT", "")
    if "USD" in pair:
        return pair.replace("USD", "")
    return pair[:4]

class FeeModel:
    def __init__(self, schedule: Optional[FeeSchedule] = None, normalizer: Optional[PairNormalizer] = None):
        self.schedule = schedule or FeeSchedule.default()
        self.normalizer = normalizer or PairNormalizer()

    def _leg(self, size: D, ex: str, price: Optional[D]) -> D:
        notional = size * price if price is not None else size
        return notional * self.schedule.fee_pct(ex) / D(100) + self.schedule.gas_cost(ex)

    def estimate(self, size: D, buy_ex: str, sell_ex: str, pair: str,
                 buy_price: Optional[D] = None, sell_price: Optional[D] = None) -> D:
        """
        Trading fee on both legs + gas per on-chain leg + withdrawal of the base asset.
        With prices given the percentage applies to each leg's notional, otherwise to size.
        """
        total = self._leg(size, buy_ex, buy_price) + self._leg(size, sell_ex, sell_price)
        asset = self.normalizer.canonical(base_asset(pair))
        wd = self.schedule.withdrawal_fees.get(asset)
        if wd is not None:
            total += wd * size
        return total
