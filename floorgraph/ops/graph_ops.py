from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from floorgraph.core.settings import DIST_DECIMALS
from floorgraph.geometry.polygon_edit import dist
from floorgraph.ops.operation import Operation, add, remove, replace

GRAPH = "graph"


def _pos(node: Dict[str, Any]) -> Sequence[float]:
    p = node["pos"]
    return (float(p["x"]), float(p["y"]))


def _require(graph: Dict[str, Any], node_id: str) -> Dict[str, Any]:
    if node_id not in graph:
        raise ValueError(f"Node not found: {node_id}")
    return graph[node_id]


def add_node_ops(graph: Dict[str, Any], node_id: str, pos: Sequence[float], room_id: Optional[str] = None) -> List[Operation]:
    if node_id in graph:
        raise ValueError(f"Node already exists: {node_id}")
    node = {"pos": {"x": float(pos[0]), "y": float(pos[1])}, "roomId": room_id, "neighbors": {}}
    return [add((GRAPH, node_id), node)]


def remove_node_ops(graph: Dict[str, Any], node_id: str) -> List[Operation]:
    """Drop back-links from every neighbour, then the node itself."""
    node = _require(graph, node_id)
    ops: List[Operation] = []
    for nb in sorted(node.get("neighbors") or {}):
        if nb in graph and node_id in (graph[nb].get("neighbors") or {}):
            ops.append(remove((GRAPH, nb, "neighbors", node_id)))
    ops.append(remove((GRAPH, node_id)))
    return ops


def connect_ops(graph: Dict[str, Any], a: str, b: str, *, decimals: int = DIST_DECIMALS) -> List[Operation]:
    if a == b:
        raise ValueError("Cannot connect a node to itself")
    na = _require(graph, a)
    nb = _require(graph, b)
    d = dist(_pos(na), _pos(nb), decimals)
    ops: List[Operation] = []
    if b not in (na.get("neighbors") or {}):
        ops.append(add((GRAPH, a, "neighbors", b), {"dist": d}))
    if a not in (nb.get("neighbors") or {}):
        ops.append(add((GRAPH, b, "neighbors", a), {"dist": d}))
    if not ops:
        raise ValueError(f"Nodes already connected: {a}, {b}")
    return ops


def disconnect_ops(graph: Dict[str, Any], a: str, b: str) -> List[Operation]:
    na = _require(graph, a)
    nb = _require(graph, b)
    ops: List[Operation] = []
    if b in (na.get("neighbors") or {}):
        ops.append(remove((GRAPH, a, "neighbors", b)))
    if a in (nb.get("neighbors") or {}):
        ops.append(remove((GRAPH, b, "neighbors", a)))
    if not ops:
        raise ValueError(f"Nodes are not connected: {a}, {b}")
    return ops


def move_node_ops(graph: Dict[str, Any], node_id: str, pos: Sequence[float], *, decimals: int = DIST_DECIMALS) -> List[Operation]:
    """Move a node and refresh the distance on every edge touching it, both ways."""
    node = _require(graph, node_id)
    new_pos = (float(pos[0]), float(pos[1]))
    ops = [replace((GRAPH, node_id, "pos"), {"x": new_pos[0], "y": new_pos[1]})]
    for nb in sorted(node.get("neighbors") or {}):
        if nb not in graph:
            continue
        d = dist(new_pos, _pos(graph[nb]), decimals)
        ops.append(replace((GRAPH, node_id, "neighbors", nb, "dist"), d))
        if node_id in (graph[nb].get("neighbors") or {}):
            ops.append(replace((GRAPH, nb, "neighbors", node_id, "dist"), d))
    return ops


def assign_room_ops(graph: Dict[str, Any], node_id: str, room_id: Optional[str]) -> List[Operation]:
    _require(graph, node_id)
    return [replace((GRAPH, node_id, "roomId"), room_id)]
