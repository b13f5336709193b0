from __future__ import annotations
import logging
from typing import Callable, List, Optional
from spreadscan.core.types import ArbitrageOpportunity, OrderBook
from spreadscan.core.errors import BookNotFoundError
from spreadscan.core.symbol_map import PairNormalizer
from spreadscan.md.book_store import BookStore
from spreadscan.arb.evaluator import OpportunityEvaluator

log = logging.getLogger(__name__)

def by_roi(opps: List[ArbitrageOpportunity]) -> List[ArbitrageOpportunity]:
    return sorted(opps, key=lambda o: o.roi_percentage, reverse=True)

class SpreadAnalyzer:
    """
    Cross-exchange spread scanner over a BookStore.

    Full scan: every canonical-pair group, every venue pair, both directions.
    Targeted scan: the updated book against each comparable book, both directions.
    A direction buys at one book's best ask (times the wrapped-asset adjustment)
    and sells into the other book's best bid.
    """
    def __init__(self, store: BookStore, evaluator: OpportunityEvaluator,
                 full_scan_interval: int = 10,
                 publish_opp: Optional[Callable[[ArbitrageOpportunity], None]] = None):
        self.store = store
        self.normalizer: PairNormalizer = store.normalizer
        self.evaluator = evaluator
        self.full_scan_interval = full_scan_interval
        self.publish_opp = publish_opp
        self.update_counter = 0

    def _direction(self, buy: OrderBook, sell: OrderBook, pair: str) -> Optional[ArbitrageOpportunity]:
        adj = self.normalizer.price_adjustment(buy.pair, sell.pair)
        ask_p, ask_sz = buy.asks[0]
        bid_p, bid_sz = sell.bids[0]
        return self.evaluator.evaluate(buy.exchange, sell.exchange, pair,
                                       ask_p * adj, bid_p, ask_sz, bid_sz)

    def _compare(self, k1: str, b1: OrderBook, k2: str, b2: OrderBook, pair: str) -> List[ArbitrageOpportunity]:
        if b1.exchange == b2.exchange:
            return []
        if not b1.usable or not b2.usable:
            log.warning("Empty orderbook found: %s or %s", k1, k2)
            return []
        found = []
        for buy, sell in ((b1, b2), (b2, b1)):
            opp = self._direction(buy, sell, pair)
            if opp is not None:
                found.append(opp)
        return found

    def analyze_all_spreads(self) -> List[ArbitrageOpportunity]:
        groups = self.store.group_by_canonical_pair()
        log.debug("Grouped %d orderbooks into %d trading pairs", len(self.store), len(groups))

        opps: List[ArbitrageOpportunity] = []
        for pair, books in groups.items():
            if len({b.exchange for _, b in books}) < 2:
                log.debug("Skipping %s with less than 2 exchanges", pair)
                continue
            for i in range(len(books)):
                for j in range(i + 1, len(books)):
                    (k1, b1), (k2, b2) = books[i], books[j]
                    opps.extend(self._compare(k1, b1, k2, b2, pair))
        return by_roi(opps)

    def analyze_spread(self, updated_key: str) -> List[ArbitrageOpportunity]:
        updated = self.store.get(updated_key)
        if updated is None:
            raise BookNotFoundError(updated_key)

        pair = self.normalizer.canonical(updated.pair)
        opps: List[ArbitrageOpportunity] = []
        for key, book in self.store.items():
            if key == updated_key:
                continue
            if self.normalizer.canonical(book.pair) != pair:
                continue
            opps.extend(self._compare(updated_key, updated, key, book, pair))
        return by_roi(opps)

    def on_book(self, book: OrderBook) -> List[ArbitrageOpportunity]:
        """Upsert one snapshot and run the scan the update counter selects."""
        key = self.store.upsert(book)
        log.info("Updated orderbook: %s (bids: %d, asks: %d)", key, len(book.bids), len(book.asks))

        self.update_counter += 1
        if self.is_full_scan_due():
            log.info("Running comprehensive analysis (update #%d)...", self.update_counter)
            opps = self.analyze_all_spreads()
        else:
            opps = self.analyze_spread(key)

        if self.publish_opp is not None:
            for o in opps:
                self.publish_opp(o)
        return opps

    def is_full_scan_due(self) -> bool:
        return self.update_counter > 0 and self.update_counter % self.full_scan_interval == 0
