from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

Point2 = Tuple[float, float]
Ring = List[List[float]]
Polygon = List[Ring]

# Plain JSON-shaped document parts, as stored by the patch engine.
GraphDict = Dict[str, Dict[str, Any]]
RoomsDict = Dict[str, Dict[str, Any]]


def empty_polygon() -> Polygon:
    return [[]]


def polygon_from_data(data: Any) -> Polygon:
    """Accepts a ring list or a GeoJSON Polygon mapping."""
    if isinstance(data, dict):
        if data.get("type") not in (None, "Polygon"):
            raise ValueError(f"Unsupported geometry type: {data.get('type')}")
        data = data.get("coordinates", [[]])
    rings: Polygon = []
    for ring in data or [[]]:
        rings.append([[float(p[0]), float(p[1])] for p in ring])
    return rings or empty_polygon()


def polygon_to_geojson(polygon: Polygon) -> Dict[str, Any]:
    return {"type": "Polygon", "coordinates": deepcopy(polygon)}


def _point_from_data(data: Any) -> Point2:
    if isinstance(data, dict):
        return (float(data["x"]), float(data["y"]))
    x, y = data
    return (float(x), float(y))


def _point_to_dict(p: Point2) -> Dict[str, float]:
    return {"x": float(p[0]), "y": float(p[1])}


@dataclass
class Edge:
    dist: float

    def to_dict(self) -> Dict[str, Any]:
        return {"dist": float(self.dist)}


@dataclass
class Node:
    id: str
    pos: Point2
    room_id: Optional[str] = None
    neighbors: Dict[str, Edge] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pos": _point_to_dict(self.pos),
            "roomId": self.room_id,
            "neighbors": {nid: e.to_dict() for nid, e in self.neighbors.items()},
        }

    @classmethod
    def from_dict(cls, node_id: str, data: Dict[str, Any]) -> "Node":
        neighbors = {}
        for nid, edge in dict(data.get("neighbors") or {}).items():
            neighbors[str(nid)] = Edge(dist=float((edge or {}).get("dist", 0.0)))
        room_id = data.get("roomId")
        return cls(
            id=str(node_id),
            pos=_point_from_data(data["pos"]),
            room_id=str(room_id) if room_id else None,
            neighbors=neighbors,
        )

    @property
    def adjacency(self) -> frozenset:
        return frozenset(self.neighbors)


@dataclass
class RoomInfo:
    name: str
    type: str = ""
    display_alias: str = ""
    aliases: List[str] = field(default_factory=list)
    label_position: Point2 = (0.0, 0.0)
    polygon: Polygon = field(default_factory=empty_polygon)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "displayAlias": self.display_alias,
            "aliases": list(self.aliases),
            "labelPosition": _point_to_dict(self.label_position),
            "polygon": deepcopy(self.polygon),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomInfo":
        return cls(
            name=str(data.get("name", "")),
            type=str(data.get("type") or ""),
            display_alias=str(data.get("displayAlias") or ""),
            aliases=[str(a) for a in data.get("aliases") or []],
            label_position=_point_from_data(data.get("labelPosition") or (0.0, 0.0)),
            polygon=polygon_from_data(data.get("polygon")),
        )


def graph_from_dict(data: GraphDict) -> Dict[str, Node]:
    return {str(nid): Node.from_dict(nid, raw) for nid, raw in data.items()}


def graph_to_dict(graph: Dict[str, Node]) -> GraphDict:
    return {nid: node.to_dict() for nid, node in graph.items()}


def rooms_from_dict(data: RoomsDict) -> Dict[str, RoomInfo]:
    return {str(rid): RoomInfo.from_dict(raw) for rid, raw in data.items()}


def rooms_to_dict(rooms: Dict[str, RoomInfo]) -> RoomsDict:
    return {rid: room.to_dict() for rid, room in rooms.items()}


def normalize_graph(data: Any) -> GraphDict:
    if not isinstance(data, dict):
        raise ValueError("graph must be a mapping of node id to node")
    return graph_to_dict(graph_from_dict(data))


def normalize_rooms(data: Any) -> RoomsDict:
    if not isinstance(data, dict):
        raise ValueError("rooms must be a mapping of room id to room info")
    return rooms_to_dict(rooms_from_dict(data))
