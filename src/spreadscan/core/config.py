from __future__ import annotations
import os, yaml
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
from spreadscan.core.types import RuntimeConfig
from spreadscan.core.fees import FeeSchedule
from spreadscan.core.symbol_map import PairNormalizer

ROOT = Path(__file__).resolve().parents[3]
CONFIG = ROOT / "config"

def load_yaml(p: Path):
    return yaml.safe_load(p.read_text()) or {}

def load_runtime(config_dir: Path = CONFIG) -> RuntimeConfig:
    p = config_dir / "runtime.yml"
    if not p.exists():
        return RuntimeConfig()
    return RuntimeConfig(**(load_yaml(p).get("runtime") or {}))

def load_fees(config_dir: Path = CONFIG) -> FeeSchedule:
    p = config_dir / "fees.yml"
    return FeeSchedule.from_yaml(p) if p.exists() else FeeSchedule.default()

def load_normalizer(config_dir: Path = CONFIG) -> PairNormalizer:
    p = config_dir / "wrapped.yml"
    return PairNormalizer.from_config(load_yaml(p).get("wrapped") if p.exists() else None)

def load_pairs(config_dir: Path = CONFIG) -> List[str]:
    return load_yaml(config_dir / "pairs.yml").get("pairs", [])

def load_exchanges(config_dir: Path = CONFIG) -> List[dict]:
    return [e for e in load_yaml(config_dir / "exchanges.yml").get("exchanges", []) if e.get("enabled")]

@dataclass(frozen=True)
class RedisSettings:
    host: str = "127.0.0.1"
    port: int = 6379
    password: Optional[str] = None

    @property
    def addr(self) -> str:
        return f"{self.host}:{self.port}"

def redis_settings() -> RedisSettings:
    load_dotenv()
    addr = os.getenv("REDIS_ADDR", "127.0.0.1:6379")
    host, _, port = addr.partition(":")
    try:
        port_n = int(port) if port else 6379
    except ValueError:
        port_n = 6379
    return RedisSettings(host=host or "127.0.0.1", port=port_n, password=os.getenv("REDIS_PASS") or None)
