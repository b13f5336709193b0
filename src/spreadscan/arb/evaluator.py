from __future__ import annotations
from decimal import Decimal as D
from typing import Optional
from spreadscan.core.types import ArbitrageOpportunity, RuntimeConfig
from spreadscan.core.fees import FeeModel, base_asset
from spreadscan.core.utils import new_id, utc_now

CONSERVATIVE_FACTOR = D("0.8")

class OpportunityEvaluator:
    def __init__(self, fees: FeeModel, cfg: RuntimeConfig):
        self.fees = fees
        self.cfg = cfg

    def reference_price(self, pair: Optional[str]) -> D:
        if pair:
            asset = self.fees.normalizer.canonical(base_asset(pair))
            ref = self.cfg.reference_prices.get(asset)
            if ref:
                return ref
        return self.cfg.default_reference_price

    def size_cap(self, pair: Optional[str] = None) -> D:
        return self.cfg.max_notional_usd / self.reference_price(pair)

    def choose_execution_size(self, ask_size: D, bid_size: D, pair: Optional[str] = None) -> D:
        # same size on both legs: 80% of the thinner side, capped by the notional limit
        conservative = min(ask_size, bid_size) * CONSERVATIVE_FACTOR
        return min(conservative, self.size_cap(pair))

    def evaluate(self, buy_ex: str, sell_ex: str, pair: str,
                 buy_price: D, sell_price: D,
                 buy_size: D, sell_size: D) -> Optional[ArbitrageOpportunity]:
        if sell_price <= buy_price or buy_price <= 0:
            return None

        size = self.choose_execution_size(buy_size, sell_size, pair)
        if size <= 0:
            return None

        gross_per_unit = sell_price - buy_price
        fees = self.fees.estimate(size, buy_ex, sell_ex, pair, buy_price=buy_price, sell_price=sell_price)
        net = gross_per_unit * size - fees
        roi = net / (buy_price * size) * D(100)

        if net < self.cfg.min_absolute_profit or roi < self.cfg.min_roi_percentage:
            return None

        return ArbitrageOpportunity(
            id=new_id(),
            buy_exchange=buy_ex, sell_exchange=sell_ex, pair=pair,
            buy_price=buy_price, sell_price=sell_price, max_size=size,
            gross_profit_per_unit=gross_per_unit,
            estimated_fees=fees, net_profit=net, roi_percentage=roi,
            timestamp=utc_now(),
        )
