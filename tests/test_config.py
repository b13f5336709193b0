from decimal import Decimal as D

from spreadscan.core import config


def test_repo_config_files_load():
    cfg = config.load_runtime()
    assert cfg.full_scan_interval == 10
    assert float(cfg.min_absolute_profit) == 1.0
    fees = config.load_fees()
    assert fees.use_market_orders
    assert fees.gas_cost("uniswap-v3-exact") == 50
    n = config.load_normalizer()
    assert n.normalize("WBTC/USDT", "BTC/USDT") == ("BTC/USDT", "BTC/USDT", D("0.9999"))
    assert "BTC/USDT" in config.load_pairs()
    assert [e["id"] for e in config.load_exchanges()] == ["binance"]


def test_missing_runtime_file_uses_defaults(tmp_path):
    cfg = config.load_runtime(tmp_path)
    assert cfg.min_roi_percentage == D("0.1")
    assert cfg.redis_channel == "orderbook_updates"


def test_redis_settings_from_env(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    monkeypatch.setenv("REDIS_ADDR", "redis.internal:6380")
    monkeypatch.setenv("REDIS_PASS", "secret")
    s = config.redis_settings()
    assert (s.host, s.port, s.password) == ("redis.internal", 6380, "secret")
    assert s.addr == "redis.internal:6380"


def test_redis_settings_defaults(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    monkeypatch.delenv("REDIS_ADDR", raising=False)
    monkeypatch.delenv("REDIS_PASS", raising=False)
    s = config.redis_settings()
    assert (s.host, s.port, s.password) == ("127.0.0.1", 6379, None)
