from decimal import Decimal as D

import pytest

from spreadscan.arb.engine import SpreadAnalyzer
from spreadscan.arb.evaluator import OpportunityEvaluator
from spreadscan.core.fees import FeeModel, FeeSchedule, VenueFee
from spreadscan.core.symbol_map import PairNormalizer
from spreadscan.core.types import OrderBook, RuntimeConfig
from spreadscan.md.book_store import BookStore


def make_book(exchange, pair, bid=None, ask=None, ts=1):
    bids = [bid] if bid is not None else []
    asks = [ask] if ask is not None else []
    return OrderBook(exchange=exchange, pair=pair, bids=bids, asks=asks, timestamp=ts)


@pytest.fixture
def cfg():
    return RuntimeConfig(min_absolute_profit=D("1.0"), min_roi_percentage=D("0.1"))


@pytest.fixture
def schedule():
    # two venues at 0.1% taker, no withdrawal fees configured
    return FeeSchedule(
        venues={
            "A": VenueFee(taker_pct=D("0.1"), maker_pct=D("0.1")),
            "B": VenueFee(taker_pct=D("0.1"), maker_pct=D("0.1")),
        },
    )


@pytest.fixture
def fee_model(schedule):
    return FeeModel(schedule, PairNormalizer())


@pytest.fixture
def evaluator(fee_model, cfg):
    return OpportunityEvaluator(fee_model, cfg)


@pytest.fixture
def analyzer(evaluator):
    return SpreadAnalyzer(BookStore(PairNormalizer()), evaluator, full_scan_interval=3)
