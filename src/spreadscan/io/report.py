from __future__ import annotations
from decimal import Decimal as D
from typing import List
from spreadscan.core.types import ArbitrageOpportunity

def risk_level(roi: D) -> str:
    if roi > 2:
        return "HIGH PROFIT"
    if roi > 1:
        return "MODERATE"
    return "LOW MARGIN"

def format_summary(summary: dict) -> List[str]:
    lines = [
        "MARKET DATA SUMMARY",
        f"  Active Exchanges: {summary['exchanges']}",
        f"  Trading Pairs: {summary['pairs']}",
        f"  Total Orderbooks: {summary['books']}",
    ]
    lines += [f"  - {ex}: {n} pairs" for ex, n in sorted(summary["per_exchange"].items())]
    lines += [f"   {p}: {n} exchanges" for p, n in sorted(summary["multi_venue_pairs"].items())]
    return lines

def format_opportunity(idx: int, o: ArbitrageOpportunity) -> List[str]:
    spread_pct = o.gross_profit_per_unit / o.buy_price * 100
    return [
        f"Opportunity #{idx}",
        f"  ID: {o.id}",
        f"  Strategy: Buy {o.buy_exchange} -> Sell {o.sell_exchange}",
        f"  Pair: {o.pair}",
        f"  Buy Price: ${o.buy_price:.4f}",
        f"  Sell Price: ${o.sell_price:.4f}",
        f"  Spread: ${o.gross_profit_per_unit:.4f} ({spread_pct:.3f}%)",
        f"  Max Execution Size: {o.max_size:.6f}",
        f"  Gross Profit: ${o.gross_profit_per_unit * o.max_size:.2f}",
        f"  Estimated Fees: ${o.estimated_fees:.2f}",
        f"  NET PROFIT: ${o.net_profit:.2f}",
        f"  ROI: {o.roi_percentage:.2f}%",
        f"  Timestamp: {o.timestamp:%Y-%m-%d %H:%M:%S} UTC",
        f"  Risk Level: {risk_level(o.roi_percentage)}",
    ]

def format_report(opps: List[ArbitrageOpportunity], summary: dict) -> str:
    lines = format_summary(summary)
    if not opps:
        lines.append("SPREAD ANALYSIS: No profitable opportunities found")
    else:
        lines.append("ARBITRAGE OPPORTUNITIES DETECTED")
        for i, o in enumerate(opps, start=1):
            lines += format_opportunity(i, o)
    return "\n".join(lines)
