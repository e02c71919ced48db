from floorgraph.ops.engine import PatchEngine
from floorgraph.ops.graph_ops import (
    add_node_ops,
    assign_room_ops,
    connect_ops,
    disconnect_ops,
    move_node_ops,
    remove_node_ops,
)
from floorgraph.ops.history import EditHistory, HistoryEntry
from floorgraph.ops.operation import OpKind, Operation, add, expect, move, parse_pointer, remove, replace, to_pointer
from floorgraph.ops.patch import apply_patch, apply_with_inverse, invert
from floorgraph.ops.room_ops import (
    add_room_hole,
    create_room,
    delete_room_hole,
    delete_room_polygon,
    room_update_ops,
    save_polygon,
    save_room_info,
    simplify_room_polygon,
)

__all__ = [
    "PatchEngine",
    "EditHistory",
    "HistoryEntry",
    "OpKind",
    "Operation",
    "add",
    "expect",
    "move",
    "remove",
    "replace",
    "parse_pointer",
    "to_pointer",
    "apply_patch",
    "apply_with_inverse",
    "invert",
    "add_node_ops",
    "assign_room_ops",
    "connect_ops",
    "disconnect_ops",
    "move_node_ops",
    "remove_node_ops",
    "add_room_hole",
    "create_room",
    "delete_room_hole",
    "delete_room_polygon",
    "room_update_ops",
    "save_polygon",
    "save_room_info",
    "simplify_room_polygon",
]
