from __future__ import annotations

from copy import deepcopy
from typing import Sequence, Tuple

import numpy as np

from floorgraph.core.settings import DIST_DECIMALS
from floorgraph.geometry.tolerance import EPS_POS
from floorgraph.project.schema import Polygon, empty_polygon

PointLike = Sequence[float]


def _segment_distances(p: PointLike, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
    """Distance from ``p`` to each clamped segment ``starts[i] -> ends[i]``."""
    pt = np.asarray(p, dtype=float)[:2]
    d = ends - starts
    len_sq = np.einsum("ij,ij->i", d, d)
    t = np.zeros_like(len_sq)
    ok = len_sq > EPS_POS
    t[ok] = np.einsum("ij,ij->i", pt - starts[ok], d[ok]) / len_sq[ok]
    t = np.clip(t, 0.0, 1.0)
    closest = starts + t[:, None] * d
    return np.hypot(pt[0] - closest[:, 0], pt[1] - closest[:, 1])


def distance_point_to_segment(p: PointLike, a: PointLike, b: PointLike) -> float:
    starts = np.asarray([a], dtype=float)[:, :2]
    ends = np.asarray([b], dtype=float)[:, :2]
    return float(_segment_distances(p, starts, ends)[0])


def dist(p1: PointLike, p2: PointLike, decimals: int = DIST_DECIMALS) -> float:
    return round(float(np.hypot(float(p1[0]) - float(p2[0]), float(p1[1]) - float(p2[1]))), decimals)


def _ring_array(ring: Sequence[PointLike]) -> np.ndarray:
    return np.asarray([[float(x), float(y)] for x, y, *_ in ring], dtype=float).reshape(-1, 2)


def nearest_edge_index(ring: Sequence[PointLike], p: PointLike) -> int:
    """Index ``i`` of the edge ``ring[i] -> ring[i + 1]`` closest to ``p``.

    Rings are stored open; for three or more points the closing edge
    ``ring[-1] -> ring[0]`` is index ``len(ring) - 1``.
    """
    pts = _ring_array(ring)
    if len(pts) < 2:
        raise ValueError("ring needs at least 2 points to have an edge")
    if len(pts) == 2:
        starts, ends = pts[:1], pts[1:]
    else:
        starts, ends = pts, np.roll(pts, -1, axis=0)
    return int(np.argmin(_segment_distances(p, starts, ends)))


def nearest_vertex_index(ring: Sequence[PointLike], p: PointLike) -> int:
    pts = _ring_array(ring)
    if len(pts) == 0:
        raise ValueError("ring has no vertices")
    # Degenerate segments: distance to the vertex itself.
    return int(np.argmin(_segment_distances(p, pts, pts)))


def _check_ring(polygon: Polygon, ring_index: int) -> None:
    if ring_index < 0 or ring_index >= len(polygon):
        raise ValueError(f"ring index out of range: {ring_index}")


def add_vertex(polygon: Polygon, ring_index: int, p: PointLike) -> Polygon:
    _check_ring(polygon, ring_index)
    out = deepcopy(polygon)
    ring = out[ring_index]
    point = [float(p[0]), float(p[1])]
    if len(ring) < 3:
        ring.append(point)
        return out
    ring.insert(nearest_edge_index(ring, point) + 1, point)
    return out


def delete_vertex(polygon: Polygon, ring_index: int, p: PointLike) -> Polygon:
    _check_ring(polygon, ring_index)
    out = deepcopy(polygon)
    ring = out[ring_index]
    ring.pop(nearest_vertex_index(ring, p))
    return out


def move_vertex(polygon: Polygon, ring_index: int, vertex_index: int, p: PointLike) -> Polygon:
    _check_ring(polygon, ring_index)
    ring = polygon[ring_index]
    if vertex_index < 0 or vertex_index >= len(ring):
        raise ValueError(f"vertex index out of range: {vertex_index}")
    out = deepcopy(polygon)
    out[ring_index][vertex_index] = [float(p[0]), float(p[1])]
    return out


def add_hole(polygon: Polygon) -> Tuple[Polygon, int]:
    """Append an empty ring; returns the new polygon and the ring to edit next."""
    out = deepcopy(polygon)
    out.append([])
    return out, len(out) - 1


def delete_hole(polygon: Polygon, ring_index: int) -> Tuple[Polygon, int]:
    if ring_index == 0:
        raise ValueError("the exterior ring cannot be deleted")
    _check_ring(polygon, ring_index)
    out = deepcopy(polygon)
    del out[ring_index]
    return out, max(ring_index - 1, 0)


def delete_polygon() -> Polygon:
    return empty_polygon()
