from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

from floorgraph.core.errors import IdentityConflictError, SimplifyFailed
from floorgraph.geometry.polygon2d import validate_polygon
from floorgraph.geometry.polygon_edit import add_hole, delete_hole, delete_polygon
from floorgraph.geometry.simplify import Simplifier, simplify_polygon
from floorgraph.ops.history import HistoryEntry
from floorgraph.ops.operation import Operation, add, remove, replace
from floorgraph.project.identity import IdAllocator, UuidAllocator, derive_room_id
from floorgraph.project.saving import Level
from floorgraph.project.schema import Polygon, RoomInfo, polygon_from_data

if TYPE_CHECKING:
    from floorgraph.project.store import DocumentStore

logger = logging.getLogger(__name__)


def _room_dict(info: Union[RoomInfo, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(info, RoomInfo):
        return info.to_dict()
    return RoomInfo.from_dict(info).to_dict()


def room_update_ops(
    graph: Dict[str, Any],
    rooms: Dict[str, Any],
    building_code: str,
    old_id: str,
    new_info: Union[RoomInfo, Dict[str, Any]],
) -> Tuple[str, List[Operation]]:
    """Batch that stores ``new_info`` for the room currently keyed ``old_id``.

    The key is re-derived from the new name. When it changes, every node
    pointing at ``old_id`` is re-pointed, the old entry removed and the new
    one added, all in the returned batch so it commits and undoes as one step.
    """
    if old_id not in rooms:
        raise ValueError(f"Room not found: {old_id}")
    data = _room_dict(new_info)
    new_id = derive_room_id(building_code, data["name"])
    if new_id == old_id:
        return new_id, [replace(("rooms", old_id), data)]
    if new_id in rooms:
        raise IdentityConflictError(new_id)
    ops: List[Operation] = []
    for node_id in sorted(graph):
        if graph[node_id].get("roomId") == old_id:
            ops.append(replace(("graph", node_id, "roomId"), new_id))
    ops.append(remove(("rooms", old_id)))
    ops.append(add(("rooms", new_id), data))
    return new_id, ops


def save_room_info(store: "DocumentStore", room_id: str, new_info: Union[RoomInfo, Dict[str, Any]]) -> str:
    """Commit a room field change; returns the (possibly new) room id."""
    try:
        new_id, ops = room_update_ops(store.graph, store.rooms, store.building_code, room_id, new_info)
    except IdentityConflictError as exc:
        store.notifier.notify(Level.ERROR, str(exc))
        raise
    label = "update room" if new_id == room_id else f"rename room {room_id} -> {new_id}"
    store.apply_edit(ops, label=label)
    if new_id != room_id:
        logger.info("renamed room %s -> %s (%d nodes)", room_id, new_id, len(ops) - 2)
    return new_id


def create_room(store: "DocumentStore", node_id: str, allocator: Optional[IdAllocator] = None) -> str:
    """Create an empty room for a node that has none, keyed by an allocated token."""
    if not store.has_node(node_id):
        raise ValueError(f"Node not found: {node_id}")
    node = store.node(node_id)
    if node.room_id:
        raise ValueError(f"Node {node_id} already belongs to room {node.room_id}")
    room_id = (allocator or UuidAllocator()).allocate()
    if store.has_room(room_id):
        raise IdentityConflictError(room_id)
    info = RoomInfo(name="", label_position=node.pos)
    ops = [
        add(("rooms", room_id), info.to_dict()),
        replace(("graph", node_id, "roomId"), room_id),
    ]
    store.apply_edit(ops, label="create room", persist=False)
    store.save_room(room_id, create=True)
    store.save_graph()
    return room_id


def save_polygon(store: "DocumentStore", room_id: str, polygon: Polygon, *, label: str = "edit polygon") -> HistoryEntry:
    """Commit a polygon change. Crossing edges or stray holes only raise a warning."""
    if not store.has_room(room_id):
        raise ValueError(f"Room not found: {room_id}")
    polygon = polygon_from_data(polygon)
    report = validate_polygon(polygon)
    if report.self_intersections or report.hole_outside_outer:
        store.notifier.notify(Level.WARNING, f"Polygon of {room_id} has " + ", ".join(report.problems))
    return store.apply_edit([replace(("rooms", room_id, "polygon"), polygon)], label=label)


def add_room_hole(store: "DocumentStore", room_id: str) -> int:
    """Returns the index of the new (empty) hole ring."""
    polygon, active = add_hole(store.room(room_id).polygon)
    save_polygon(store, room_id, polygon, label="add hole")
    return active


def delete_room_hole(store: "DocumentStore", room_id: str, ring_index: int) -> int:
    """Returns the ring index to keep editing."""
    polygon, active = delete_hole(store.room(room_id).polygon, ring_index)
    save_polygon(store, room_id, polygon, label="delete hole")
    return active


def delete_room_polygon(store: "DocumentStore", room_id: str) -> HistoryEntry:
    return save_polygon(store, room_id, delete_polygon(), label="delete polygon")


def simplify_room_polygon(store: "DocumentStore", room_id: str, simplifier: Simplifier) -> HistoryEntry:
    original = store.room(room_id).polygon
    try:
        polygon = simplify_polygon(original, simplifier)
    except SimplifyFailed as exc:
        store.notifier.notify(Level.ERROR, f"Failed to simplify polygon: {exc}")
        raise
    report = validate_polygon(polygon)
    if validate_polygon(original).valid and not report.valid:
        problems = ", ".join(report.problems)
        store.notifier.notify(Level.ERROR, f"Failed to simplify polygon: result is invalid ({problems})")
        raise SimplifyFailed(f"Simplified polygon is invalid: {problems}")
    return save_polygon(store, room_id, polygon, label="simplify polygon")
