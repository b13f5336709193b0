from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal as D
from typing import Dict, Iterable, Tuple

@dataclass(frozen=True)
class WrappedAsset:
    ticker: str          # e.g. WBTC
    underlying: str      # e.g. BTC
    discount: D          # multiplier applied to the buy-side price

# Wrapped tokens trade at a structural discount to the underlying. Extend as you see more.
WRAPPED = (
    WrappedAsset("WBTC", "BTC", D("0.9999")),
)

# Legacy asset ids some venues still report (Kraken), same asset, no price effect.
ALIASES = {
    "XBT": "BTC",
    "XDG": "DOGE",
}

def unify_symbol(sym: str) -> str:
    return "/".join(ALIASES.get(a, a) for a in sym.split("/"))

class PairNormalizer:
    def __init__(self, wrapped: Iterable[WrappedAsset] = WRAPPED):
        # longest ticker first so a shorter mapping never eats part of a longer one
        self.wrapped = sorted(wrapped, key=lambda w: len(w.ticker), reverse=True)

    def canonical(self, pair: str) -> str:
        for w in self.wrapped:
            pair = pair.replace(w.ticker, w.underlying)
        return pair

    def price_adjustment(self, *pairs: str) -> D:
        adj = D(1)
        for w in self.wrapped:
            if any(w.ticker in p for p in pairs):
                adj *= w.discount
        return adj

    def normalize(self, pair_a: str, pair_b: str) -> Tuple[str, str, D]:
        return self.canonical(pair_a), self.canonical(pair_b), self.price_adjustment(pair_a, pair_b)

    @classmethod
    def from_config(cls, entries: Dict[str, dict] | None) -> "PairNormalizer":
        if not entries:
            return cls()
        return cls(WrappedAsset(t, e["underlying"], D(str(e.get("discount", 1)))) for t, e in entries.items())
