"""LIFO record of removed seams, enough to put each one back exactly."""

from typing import Iterator, List, NamedTuple

import torch


class HistoryEntry(NamedTuple):
    path: torch.Tensor           # (H,) column per row, before removal
    pixel_values: torch.Tensor   # (H,) removed pixels
    energy_values: torch.Tensor  # (H,) removed energy-state values


class SeamHistory:
    """Stack of HistoryEntry; its depth is the number of seams that can be re-added."""

    def __init__(self):
        self._entries: List[HistoryEntry] = []

    def push(self, entry: HistoryEntry):
        self._entries.append(entry)

    def pop(self) -> HistoryEntry:
        if not self._entries:
            raise IndexError("pop from empty seam history")
        return self._entries.pop()

    def peek(self) -> HistoryEntry:
        if not self._entries:
            raise IndexError("peek at empty seam history")
        return self._entries[-1]

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        """Most recent entry first."""
        return reversed(self._entries)
