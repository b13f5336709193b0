from __future__ import annotations
import csv
from pathlib import Path
from spreadscan.core.types import OrderBook, ArbitrageOpportunity

class CsvSink:
    def __init__(self, outdir: Path):
        self.outdir = Path(outdir)
        self.outdir.mkdir(parents=True, exist_ok=True)
        self._book_path = self.outdir / "book_snapshots.csv"
        self._opp_path = self.outdir / "opportunities.csv"
        self._ensure_headers()

    def _ensure_headers(self):
        if not self._book_path.exists():
            with self._book_path.open("w", newline="") as f:
                w = csv.writer(f)
                w.writerow(["timestamp","exchange","pair","bid","bid_sz","ask","ask_sz","bid_levels","ask_levels"])
        if not self._opp_path.exists():
            with self._opp_path.open("w", newline="") as f:
                w = csv.writer(f)
                w.writerow(["ts_iso","id","pair","buy_exchange","sell_exchange","buy_price","sell_price",
                            "max_size","gross_profit_per_unit","estimated_fees","net_profit","roi_percentage"])

    def write_book(self, b: OrderBook):
        bid = b.best_bid or ("", "")
        ask = b.best_ask or ("", "")
        with self._book_path.open("a", newline="") as f:
            w = csv.writer(f)
            w.writerow([b.timestamp, b.exchange, b.pair, str(bid[0]), str(bid[1]),
                        str(ask[0]), str(ask[1]), len(b.bids), len(b.asks)])

    def write_opp(self, o: ArbitrageOpportunity):
        with self._opp_path.open("a", newline="") as f:
            w = csv.writer(f)
            w.writerow([
                o.timestamp.strftime("%Y-%m-%dT%H:%M:%S"), o.id, o.pair, o.buy_exchange, o.sell_exchange,
                str(o.buy_price), str(o.sell_price), str(o.max_size), str(o.gross_profit_per_unit),
                str(o.estimated_fees), str(o.net_profit), str(o.roi_percentage),
            ])
