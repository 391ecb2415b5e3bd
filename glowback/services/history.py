# glowback/services/history.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from glowback.services.io import ImageRef


@dataclass(frozen=True)
class HistoryEntry:
    id: int
    original: ImageRef
    restored: ImageRef
    original_file_name: str


class RestorationHistory:
    """Последние восстановления в памяти; при переполнении вытесняется самое старое."""
    def __init__(self, maxlen: int = 5):
        if maxlen < 1:
            raise ValueError("maxlen must be >= 1")
        self._items: List[HistoryEntry] = []
        self._last_id = 0
        self.maxlen = maxlen

    def next_id(self) -> int:
        self._last_id += 1
        return self._last_id

    def append(self, entry: HistoryEntry) -> None:
        self._items.append(entry)
        if len(self._items) > self.maxlen:
            del self._items[:-self.maxlen]

    def select(self, entry_id: int) -> Optional[HistoryEntry]:
        for item in self._items:
            if item.id == entry_id:
                return item
        return None

    def list(self) -> List[HistoryEntry]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)
