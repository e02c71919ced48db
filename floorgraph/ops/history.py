from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from floorgraph.core.hashing import batch_hash
from floorgraph.ops.operation import Operation


@dataclass(frozen=True)
class HistoryEntry:
    forward: Tuple[Operation, ...]
    inverse: Tuple[Operation, ...]
    label: str = "edit"
    before_hash: str = ""
    after_hash: str = ""

    @property
    def digest(self) -> str:
        """Hash of the forward batch, stable across sessions."""
        return batch_hash(self.forward)


class EditHistory:
    """Entry list plus cursor.

    ``cursor`` is the index of the most recently applied entry, -1 when
    nothing is applied. Recording a new entry drops every entry after the
    cursor, so an undone branch is gone once a new edit lands.
    """

    def __init__(self) -> None:
        self._entries: List[HistoryEntry] = []
        self.cursor = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    @property
    def forward(self) -> Tuple[Tuple[Operation, ...], ...]:
        return tuple(e.forward for e in self._entries)

    @property
    def inverse(self) -> Tuple[Tuple[Operation, ...], ...]:
        return tuple(e.inverse for e in self._entries)

    @property
    def can_undo(self) -> bool:
        return self.cursor >= 0

    @property
    def can_redo(self) -> bool:
        return self.cursor < len(self._entries) - 1

    @property
    def undo_depth(self) -> int:
        return self.cursor + 1

    @property
    def redo_depth(self) -> int:
        return len(self._entries) - 1 - self.cursor

    def current(self) -> Optional[HistoryEntry]:
        if self.cursor < 0:
            return None
        return self._entries[self.cursor]

    def upcoming(self) -> Optional[HistoryEntry]:
        if not self.can_redo:
            return None
        return self._entries[self.cursor + 1]

    def record(self, entry: HistoryEntry) -> int:
        del self._entries[self.cursor + 1 :]
        self._entries.append(entry)
        self.cursor = len(self._entries) - 1
        return self.cursor

    def step_back(self) -> None:
        if not self.can_undo:
            raise IndexError("history cursor already at start")
        self.cursor -= 1

    def step_forward(self) -> None:
        if not self.can_redo:
            raise IndexError("history cursor already at end")
        self.cursor += 1

    def clear(self) -> None:
        self._entries.clear()
        self.cursor = -1
