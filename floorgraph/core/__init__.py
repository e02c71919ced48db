from floorgraph.core.errors import (
    ApplyError,
    DocumentClosedError,
    FloorGraphError,
    IdentityConflictError,
    NoOpError,
    RedoFailed,
    SaveFailed,
    SimplifyFailed,
    UndoFailed,
)
from floorgraph.core.settings import EditorSettings, load_settings

__all__ = [
    "FloorGraphError",
    "ApplyError",
    "UndoFailed",
    "RedoFailed",
    "NoOpError",
    "SimplifyFailed",
    "SaveFailed",
    "IdentityConflictError",
    "DocumentClosedError",
    "EditorSettings",
    "load_settings",
]
