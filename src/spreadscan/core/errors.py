from __future__ import annotations


class SpreadScanError(Exception):
    """Base for every per-update failure the analysis loop survives."""


class TransportError(SpreadScanError):
    pass


class SnapshotDecodeError(SpreadScanError):
    def __init__(self, key: str, reason: str):
        super().__init__(f"failed to decode order book for {key}: {reason}")
        self.key = key


class BookNotFoundError(SpreadScanError, KeyError):
    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"order book not found for key: {self.key}"


class ConnectionSetupError(SpreadScanError):
    """Raised at startup only; fatal."""
