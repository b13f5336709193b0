from decimal import Decimal as D

import pytest
from pydantic import ValidationError

from spreadscan.core.fees import FeeModel, FeeSchedule, VenueFee, base_asset


def test_base_asset_heuristic():
    assert base_asset("WBTC/USDT") == "WBTC"
    assert base_asset("BTCUSDT") == "BTC"
    assert base_asset("ETHUSD") == "ETH"
    # lossy on purpose: no separator and no USD quote
    assert base_asset("BTCEUR") == "BTCE"


def test_default_schedule_venue_fees():
    model = FeeModel()
    # binance 0.1% both legs on raw size, no withdrawal for unknown asset
    assert model.estimate(D(100), "binance", "binance", "FOO/USDT") == D("0.2")
    # unlisted venues pay 0.15%
    assert model.estimate(D(100), "kraken", "okx", "FOO/USDT") == D("0.30")


def test_gas_charged_per_onchain_leg():
    model = FeeModel()
    one = model.estimate(D(1), "binance", "uniswap-v3-exact", "FOO/USDT")
    two = model.estimate(D(1), "uniswap-v3-exact", "uniswap-v3-exact", "FOO/USDT")
    assert one == D("0.001") + D("0.003") + D(50)
    assert two == D("0.006") + D(100)


def test_withdrawal_fee_per_unit_with_wrapped_lookup():
    schedule = FeeSchedule(withdrawal_fees={"BTC": D("0.0005")}, default_fee_pct=D(0))
    model = FeeModel(schedule)
    assert model.estimate(D(2), "x", "y", "WBTC/USDT") == D("0.0010")
    assert model.estimate(D(2), "x", "y", "ETH/USDT") == 0


def test_notional_basis_when_prices_given(fee_model):
    fees = fee_model.estimate(D("0.8"), "A", "B", "BTC/USDT", buy_price=D(30000), sell_price=D(30200))
    assert fees == D("48.16")


def test_maker_tier():
    schedule = FeeSchedule(venues={"v": VenueFee(taker_pct=D("0.2"), maker_pct=D("0.05"))}, use_market_orders=False)
    assert schedule.fee_pct("v") == D("0.05")
    assert schedule.fee_pct("unknown") == D("0.15")


def test_estimate_non_negative_and_monotonic():
    model = FeeModel()
    for buy, sell in [("binance", "uniswap-v3-exact"), ("kraken", "binance"), ("uniswap-v3-exact", "okx")]:
        prev = None
        for size in [D(0), D("0.001"), D("0.5"), D(1), D(10), D(1000)]:
            fee = model.estimate(size, buy, sell, "WBTC/USDT", buy_price=D(30000), sell_price=D(30100))
            assert fee >= 0
            if prev is not None:
                assert fee >= prev
            prev = fee


def test_schedule_from_yaml(tmp_path):
    p = tmp_path / "fees.yml"
    p.write_text(
        "use_market_orders: true\n"
        "venues:\n"
        "  kraken:\n"
        "    taker_pct: 0.26\n"
        "    maker_pct: 0.16\n"
        "withdrawal_fees:\n"
        "  ETH: 0.005\n"
    )
    s = FeeSchedule.from_yaml(p)
    assert float(s.fee_pct("kraken")) == 0.26
    assert float(s.withdrawal_fees["ETH"]) == 0.005
    assert s.gas_cost("kraken") == 0


def test_negative_fees_rejected():
    with pytest.raises(ValidationError):
        FeeSchedule(withdrawal_fees={"BTC": D(-5)})
    with pytest.raises(ValidationError):
        VenueFee(gas_cost=D(-1))
    with pytest.raises(ValidationError):
        FeeSchedule(default_fee_pct=D("-0.1"))
