from __future__ import annotations
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Tuple
from spreadscan.core.types import OrderBook
from spreadscan.core.symbol_map import PairNormalizer

Entry = Tuple[str, OrderBook]

class BookStore:
    """Latest snapshot per exchange:pair key. Last write wins, nothing is evicted."""

    def __init__(self, normalizer: Optional[PairNormalizer] = None):
        self.normalizer = normalizer or PairNormalizer()
        self._books: Dict[str, OrderBook] = {}
        self._subs: list[Callable[[OrderBook], None]] = []

    def upsert(self, book: OrderBook) -> str:
        key = book.key
        self._books[key] = book
        for cb in self._subs:
            cb(book)
        return key

    def get(self, key: str) -> Optional[OrderBook]:
        return self._books.get(key)

    def subscribe(self, cb: Callable[[OrderBook], None]):
        self._subs.append(cb)

    def snapshot(self) -> Dict[str, OrderBook]:
        return dict(self._books)

    def items(self) -> List[Entry]:
        return list(self._books.items())

    def __len__(self) -> int:
        return len(self._books)

    def __contains__(self, key: str) -> bool:
        return key in self._books

    def group_by_canonical_pair(self) -> Dict[str, List[Entry]]:
        groups: Dict[str, List[Entry]] = defaultdict(list)
        for key, book in self._books.items():
            groups[self.normalizer.canonical(book.pair)].append((key, book))
        return dict(groups)

    def summary(self) -> dict:
        groups = self.group_by_canonical_pair()
        per_exchange: Dict[str, int] = defaultdict(int)
        for book in self._books.values():
            per_exchange[book.exchange] += 1
        return {
            "exchanges": len(per_exchange),
            "pairs": len(groups),
            "books": len(self._books),
            "per_exchange": dict(per_exchange),
            "multi_venue_pairs": {p: len(b) for p, b in groups.items() if len(b) > 1},
        }
