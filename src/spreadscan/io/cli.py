from __future__ import annotations
import argparse, asyncio, logging, sys
from pathlib import Path
from typing import List, Optional
from spreadscan.core.config import (CONFIG, load_runtime, load_fees, load_normalizer,
                                    load_pairs, load_exchanges, redis_settings)
from spreadscan.core.errors import ConnectionSetupError, SpreadScanError
from spreadscan.core.fees import FeeModel
from spreadscan.core.types import ArbitrageOpportunity, ExecutionRequest, RuntimeConfig
from spreadscan.md.book_store import BookStore
from spreadscan.md.redis_feed import RedisFeed
from spreadscan.md.snapshot import parse_key, decode_book
from spreadscan.md.publisher import run_rest_exchange
from spreadscan.arb.evaluator import OpportunityEvaluator
from spreadscan.arb.engine import SpreadAnalyzer
from spreadscan.io.csv_sink import CsvSink
from spreadscan.io.dashboard_api import make_app
from spreadscan.io.report import format_report
import uvicorn

log = logging.getLogger(__name__)

class Broadcaster:
    """Rolling list of the last opportunities plus non-blocking fan-out to dashboard streams."""

    def __init__(self, keep: int = 500):
        self.keep = keep
        self.latest: list[dict] = []
        self.subs: list[asyncio.Queue] = []

    def publish(self, o: ArbitrageOpportunity):
        payload = o.model_dump(mode="json")
        self.latest.insert(0, payload)
        if len(self.latest) > self.keep:
            self.latest.pop()
        for q in list(self.subs):
            if not q.full():
                q.put_nowait(payload)

    def latest_fn(self, n: int):
        return self.latest[:n]

    def subscribe_fn(self, queue: asyncio.Queue):
        self.subs.append(queue)
        def unsub():
            try:
                self.subs.remove(queue)
            except ValueError:
                pass
        return unsub

def build_analyzer(cfg: RuntimeConfig, config_dir: Path = CONFIG) -> SpreadAnalyzer:
    normalizer = load_normalizer(config_dir)
    fees = FeeModel(load_fees(config_dir), normalizer)
    store = BookStore(normalizer)
    return SpreadAnalyzer(store, OpportunityEvaluator(fees, cfg), cfg.full_scan_interval)

def guarded(write, what: str):
    """Output writes fail per update, never the loop."""
    def wrapper(item):
        try:
            write(item)
        except OSError as e:
            log.error("Failed to write %s: %s", what, e)
    return wrapper

def wire_outputs(analyzer: SpreadAnalyzer, hub: Broadcaster, sink: Optional[CsvSink]):
    write_opp = guarded(sink.write_opp, "opportunity") if sink is not None else None
    if sink is not None:
        analyzer.store.subscribe(guarded(sink.write_book, "book snapshot"))

    def publish(o: ArbitrageOpportunity):
        hub.publish(o)
        if write_opp is not None:
            write_opp(o)
    analyzer.publish_opp = publish

async def handle_payload(payload, feed: RedisFeed, analyzer: SpreadAnalyzer) -> Optional[List[ArbitrageOpportunity]]:
    """One loop iteration. Per-update failures are logged and yield None."""
    log.debug("Received message: %r", payload)
    key = parse_key(payload)
    try:
        raw = await feed.fetch(key)
        book = decode_book(key, raw)
        return analyzer.on_book(book)
    except SpreadScanError as e:
        log.error("%s", e)
        return None

def report(opps: List[ArbitrageOpportunity], analyzer: SpreadAnalyzer) -> List[ExecutionRequest]:
    full = analyzer.is_full_scan_due()
    if not opps:
        if full:
            log.info("Comprehensive analysis complete - no profitable opportunities found")
        return []
    log.info("\n%s", format_report(opps, analyzer.store.summary()))
    if full:
        log.info("Found %d total arbitrage opportunities, best ROI: %.2f%%", len(opps), opps[0].roi_percentage)

    requests = []
    for o in opps:
        req = ExecutionRequest.for_opportunity(o)
        # dispatch is not wired; requests are only logged
        log.info("Would execute: %s (Net: $%.2f, ROI: %.2f%%)", req.id, o.net_profit, o.roi_percentage)
        requests.append(req)
    return requests

async def run_analyzer(config_dir: Path = CONFIG):
    cfg = load_runtime(config_dir)
    analyzer = build_analyzer(cfg, config_dir)
    settings = redis_settings()
    feed = RedisFeed(settings, cfg.redis_channel)

    fs = analyzer.evaluator.fees.schedule
    log.info("Connecting to Redis at: %s", settings.addr)
    log.info("Execution strategy: %s", "Market Orders (Taker)" if fs.use_market_orders else "Limit Orders (Maker)")
    for ex in sorted(fs.venues):
        log.info("  - %s fee: %.3f%%", ex, fs.fee_pct(ex))
    log.info("  - Min Profit: $%.2f, Min ROI: %.1f%%", cfg.min_absolute_profit, cfg.min_roi_percentage)

    await feed.connect()
    log.info("Redis connection successful")

    hub = Broadcaster()
    sink = CsvSink(Path(cfg.csv_out)) if cfg.csv_out else None
    wire_outputs(analyzer, hub, sink)

    tasks = []
    if cfg.dashboard_enabled:
        app = make_app(hub.latest_fn, hub.subscribe_fn, analyzer.store.summary)
        server = uvicorn.Server(uvicorn.Config(app=app, host=cfg.dashboard_host, port=cfg.dashboard_port, log_level="info"))
        tasks.append(asyncio.create_task(server.serve()))

    log.info("Analyzer ready! Waiting for orderbook updates...")
    try:
        async for payload in feed.notifications():
            opps = await handle_payload(payload, feed, analyzer)
            if opps is not None:
                report(opps, analyzer)
    finally:
        for t in tasks:
            t.cancel()
        await feed.close()

async def run_publisher(config_dir: Path = CONFIG):
    cfg = load_runtime(config_dir)
    pairs = load_pairs(config_dir)
    feed = RedisFeed(redis_settings(), cfg.redis_channel)
    await feed.connect()

    async def spawn_exchange(eid: str):
        log.info("%s: using REST via ccxt", eid)
        await run_rest_exchange(eid, pairs, cfg.publish_poll_ms, feed,
                                depth=cfg.publish_depth, ttl_s=cfg.snapshot_ttl_s)

    try:
        await asyncio.gather(*(spawn_exchange(e["id"]) for e in load_exchanges(config_dir)))
    finally:
        await feed.close()

def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(prog="spreadscan", description="Cross-exchange spread analyzer")
    parser.add_argument("command", nargs="?", default="analyze", choices=["analyze", "publish"])
    parser.add_argument("--config-dir", type=Path, default=CONFIG)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="[%(levelname)s] %(message)s")
    runner = run_analyzer if args.command == "analyze" else run_publisher
    try:
        asyncio.run(runner(args.config_dir))
    except ConnectionSetupError as e:
        log.error("%s", e)
        log.error("Make sure Redis is running: redis-server")
        sys.exit(1)
    except KeyboardInterrupt:
        pass

if __name__ == "__main__":
    main()
