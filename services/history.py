"""Bounded most-recent-first list of searched coins."""

from typing import Iterator, List

from models.schemas import Coin


class RecentHistory:
    """
    Recently searched coins, newest first, unique by coin id.

    Pushing a coin that is already present moves it to the front instead of
    adding a duplicate. The oldest entry falls off once ``max_size`` is hit.
    """

    def __init__(self, max_size: int = 6):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = max_size
        self._entries: List[Coin] = []

    def push(self, coin: Coin) -> None:
        self._entries = [entry for entry in self._entries if entry.id != coin.id]
        self._entries.insert(0, coin)
        del self._entries[self.max_size:]

    def entries(self) -> List[Coin]:
        return list(self._entries)

    def __iter__(self) -> Iterator[Coin]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, coin_id: object) -> bool:
        return any(entry.id == coin_id for entry in self._entries)
