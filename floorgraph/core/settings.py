from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

# Persistence gateway paths, relative to the gateway root / base URL.
GRAPH_SAVE_PATH = "graph/update"
ROOM_SAVE_PATH = "room/update"
ROOM_CREATE_PATH = "room/create"
ADD_DOORS_PATH = "addDoorToGraph"

# Edge weights are stored with this many decimals.
DIST_DECIMALS = 2

DEFAULT_HTTP_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class EditorSettings:
    graph_save_path: str = GRAPH_SAVE_PATH
    room_save_path: str = ROOM_SAVE_PATH
    room_create_path: str = ROOM_CREATE_PATH
    add_doors_path: str = ADD_DOORS_PATH
    dist_decimals: int = DIST_DECIMALS
    save_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    simplify_url: Optional[str] = None
    simplify_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorSettings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown editor settings: {', '.join(unknown)}")
        out = replace(cls(), **data)
        if out.dist_decimals < 0:
            raise ValueError("dist_decimals must be >= 0")
        return out


def load_settings(path: str | Path) -> EditorSettings:
    p = Path(path).expanduser()
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must hold a JSON object: {p}")
    return EditorSettings.from_dict(data)
