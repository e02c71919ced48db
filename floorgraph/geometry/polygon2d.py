from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from floorgraph.geometry.tolerance import EPS_AREA, EPS_WELD
from floorgraph.project.schema import Point2, Polygon


@dataclass(frozen=True)
class PolygonValidityReport:
    """Structural checks on a room polygon (exterior ring first, then holes)."""

    valid: bool
    self_intersections: int = 0
    winding: str = "CCW"
    hole_outside_outer: int = 0
    duplicate_vertices: int = 0
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @property
    def problems(self) -> List[str]:
        """Human readable reasons the polygon is not valid."""
        out: List[str] = []
        if self.self_intersections:
            out.append(f"{self.self_intersections} crossing edge pair(s)")
        if self.hole_outside_outer:
            out.append(f"{self.hole_outside_outer} hole(s) outside the room outline")
        out.extend(w for w in self.warnings if w.startswith("Exterior"))
        return out


def _ring_xy(ring: Sequence[Sequence[float]]) -> np.ndarray:
    return np.asarray([[float(p[0]), float(p[1])] for p in ring], dtype=float).reshape(-1, 2)


def ring_area(ring: Sequence[Sequence[float]]) -> float:
    """Signed shoelace area; positive for counter-clockwise rings."""
    pts = _ring_xy(ring)
    if len(pts) < 3:
        return 0.0
    nxt = np.roll(pts, -1, axis=0)
    return 0.5 * float(np.sum(pts[:, 0] * nxt[:, 1] - nxt[:, 0] * pts[:, 1]))


def _cross(o: np.ndarray, a: np.ndarray, b: np.ndarray) -> float:
    return float((a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0]))


def _edges_cross(p: np.ndarray, q: np.ndarray, r: np.ndarray, s: np.ndarray) -> bool:
    """Proper crossing only; shared endpoints and touching do not count."""
    return _cross(p, q, r) * _cross(p, q, s) < 0.0 and _cross(r, s, p) * _cross(r, s, q) < 0.0


def point_in_ring(pt: Sequence[float], ring: Sequence[Sequence[float]]) -> bool:
    pts = _ring_xy(ring)
    if len(pts) < 3:
        return False
    x, y = float(pt[0]), float(pt[1])
    inside = False
    for (x1, y1), (x2, y2) in zip(pts, np.roll(pts, -1, axis=0)):
        if (y1 > y) != (y2 > y) and x < x1 + (x2 - x1) * (y - y1) / (y2 - y1):
            inside = not inside
    return inside


def point_in_polygon(pt: Sequence[float], polygon: Polygon) -> bool:
    """Inside the exterior ring and outside every hole."""
    if not polygon or len(polygon[0]) < 3:
        return False
    if not point_in_ring(pt, polygon[0]):
        return False
    return not any(point_in_ring(pt, hole) for hole in polygon[1:])


def _crossings(ring: Sequence[Sequence[float]]) -> int:
    pts = _ring_xy(ring)
    n = len(pts)
    if n < 4:
        return 0
    edges = list(zip(pts, np.roll(pts, -1, axis=0)))
    count = 0
    for i in range(n):
        # Skip the neighbouring edges, which share a vertex with edge i.
        for j in range(i + 2, n - (1 if i == 0 else 0)):
            if _edges_cross(*edges[i], *edges[j]):
                count += 1
    return count


def _duplicates(ring: Sequence[Sequence[float]]) -> int:
    keys = [(round(float(p[0]) / EPS_WELD), round(float(p[1]) / EPS_WELD)) for p in ring]
    return len(keys) - len(set(keys))


def validate_polygon(polygon: Polygon) -> PolygonValidityReport:
    if not polygon or len(polygon[0]) < 3:
        return PolygonValidityReport(valid=False, warnings=["Exterior ring has fewer than 3 points."])
    outer = polygon[0]
    warnings: List[str] = []

    area = ring_area(outer)
    if abs(area) <= EPS_AREA:
        warnings.append("Exterior ring has zero area.")

    hole_out = 0
    for hole in polygon[1:]:
        if len(hole) < 3:
            warnings.append("Hole has fewer than 3 points.")
            continue
        centroid = _ring_xy(hole).mean(axis=0)
        if not point_in_ring(centroid, outer):
            hole_out += 1

    crossings = sum(_crossings(ring) for ring in polygon)
    return PolygonValidityReport(
        valid=crossings == 0 and hole_out == 0 and abs(area) > EPS_AREA,
        self_intersections=crossings,
        winding="CCW" if area > 0.0 else "CW",
        hole_outside_outer=hole_out,
        duplicate_vertices=sum(_duplicates(ring) for ring in polygon),
        warnings=warnings,
    )


def room_at_point(rooms: Dict[str, Dict[str, Any]], pt: Point2) -> Optional[str]:
    """Id of the first room whose polygon contains ``pt``."""
    for room_id, info in rooms.items():
        if point_in_polygon(pt, info.get("polygon") or [[]]):
            return room_id
    return None
