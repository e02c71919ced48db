from __future__ import annotations

import re
import uuid
from typing import Any, Dict, Optional, Protocol

# Leading floor designator of a room name: A-F, 0-9, LL, M, EV or PH.
FLOOR_REGEX = re.compile(r"^(?:LL|EV|PH|M|[A-F0-9])")


class IdAllocator(Protocol):
    def allocate(self) -> str: ...


class UuidAllocator:
    def allocate(self) -> str:
        return str(uuid.uuid4())


def extract_building_code(floor_code: str) -> str:
    """``"GHC-4"`` -> ``"GHC"``."""
    return str(floor_code).split("-")[0]


def derive_room_id(building_code: str, name: str) -> str:
    return f"{building_code}-{name}"


def building_code_from_room_id(room_id: str) -> str:
    return str(room_id).split("-", 1)[0]


def room_name_from_room_id(room_id: str) -> str:
    parts = str(room_id).split("-", 1)
    return parts[1] if len(parts) > 1 else ""


def extract_floor_level(room_name: str) -> str:
    m = FLOOR_REGEX.match(str(room_name))
    return m.group(0) if m else ""


def room_id_by_name(rooms: Dict[str, Dict[str, Any]], room_name: str) -> Optional[str]:
    for room_id, info in rooms.items():
        if info.get("name") == room_name:
            return room_id
    return None


def node_id_by_room_id(graph: Dict[str, Dict[str, Any]], room_id: Optional[str]) -> Optional[str]:
    if room_id is None:
        return None
    for node_id, node in graph.items():
        if node.get("roomId") == room_id:
            return node_id
    return None


def room_id_of_node(graph: Dict[str, Dict[str, Any]], node_id: Optional[str]) -> Optional[str]:
    if not node_id or node_id not in graph:
        return None
    return graph[node_id].get("roomId")
