from __future__ import annotations

from typing import Optional


class FloorGraphError(Exception):
    pass


class ApplyError(FloorGraphError):
    """An operation batch does not fit the current document."""

    def __init__(self, message: str, *, op_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.op_index = op_index


class UndoFailed(ApplyError):
    pass


class RedoFailed(ApplyError):
    pass


class NoOpError(FloorGraphError):
    """Undo or redo requested at a history boundary."""


class SimplifyFailed(FloorGraphError):
    pass


class SaveFailed(FloorGraphError):
    def __init__(self, message: str, *, path: str = "", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.path = path
        self.status = status


class IdentityConflictError(FloorGraphError):
    def __init__(self, room_id: str) -> None:
        super().__init__(f"Room id already in use: {room_id}")
        self.room_id = room_id


class DocumentClosedError(FloorGraphError, RuntimeError):
    pass
