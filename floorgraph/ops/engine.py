from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Dict, Iterable, Union

from floorgraph.core.errors import ApplyError, NoOpError, RedoFailed, UndoFailed
from floorgraph.core.hashing import document_hash
from floorgraph.ops.history import EditHistory, HistoryEntry
from floorgraph.ops.operation import Operation, coerce_ops
from floorgraph.ops.patch import apply_with_inverse

logger = logging.getLogger(__name__)


class PatchEngine:
    """Commits operation batches against one document and walks them back and forth.

    Every batch is applied to a copy first; the live document is only swapped
    once the whole batch succeeded, so a failure never leaves a partial edit.
    """

    def __init__(self, document: Any, *, track_hashes: bool = True) -> None:
        self._document = document
        self.history = EditHistory()
        self._track_hashes = track_hashes

    @property
    def document(self) -> Any:
        return self._document

    def _hash(self, document: Any) -> str:
        return document_hash(document) if self._track_hashes else ""

    def apply_edit(self, ops: Iterable[Union[Operation, Dict[str, Any]]], *, label: str = "edit") -> HistoryEntry:
        # Values are copied; history never aliases the caller's objects.
        forward = tuple(Operation(op.kind, op.path, deepcopy(op.value), op.from_path) for op in coerce_ops(ops))
        if not forward:
            raise ApplyError("Empty operation batch")
        # Raises ApplyError with the live document untouched.
        new_document, inverse = apply_with_inverse(self._document, forward)
        try:
            before_hash = self._hash(self._document)
            after_hash = self._hash(new_document)
        except ValueError as exc:
            raise ApplyError(f"Edit leaves a document that cannot be hashed: {exc}") from exc
        entry = HistoryEntry(
            forward=forward,
            inverse=tuple(inverse),
            label=str(label),
            before_hash=before_hash,
            after_hash=after_hash,
        )
        self._document = new_document
        self.history.record(entry)
        logger.debug("committed %s (%d ops), cursor=%d", entry.label, len(forward), self.history.cursor)
        return entry

    def undo(self) -> HistoryEntry:
        entry = self.history.current()
        if entry is None:
            raise NoOpError("Nothing to undo")
        try:
            new_document, _ = apply_with_inverse(self._document, entry.inverse)
        except ApplyError as exc:
            raise UndoFailed(f"Failed to undo {entry.label}: {exc}", op_index=exc.op_index) from exc
        self._document = new_document
        self.history.step_back()
        logger.debug("undid %s, cursor=%d", entry.label, self.history.cursor)
        return entry

    def redo(self) -> HistoryEntry:
        entry = self.history.upcoming()
        if entry is None:
            raise NoOpError("Nothing to redo")
        try:
            new_document, _ = apply_with_inverse(self._document, entry.forward)
        except ApplyError as exc:
            raise RedoFailed(f"Failed to redo {entry.label}: {exc}", op_index=exc.op_index) from exc
        self._document = new_document
        self.history.step_forward()
        logger.debug("redid %s, cursor=%d", entry.label, self.history.cursor)
        return entry

    def reset_document(self, document: Any) -> None:
        """Swap the document without recording history; the existing history is kept."""
        self._document = document

    @property
    def cursor(self) -> int:
        return self.history.cursor

    @property
    def undo_depth(self) -> int:
        return self.history.undo_depth

    @property
    def redo_depth(self) -> int:
        return self.history.redo_depth
