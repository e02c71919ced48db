"""
Floor-plan geometry helpers.

Pure polygon editing functions, hit-testing and the polygon simplification client.
"""

from floorgraph.geometry.polygon2d import PolygonValidityReport, point_in_polygon, room_at_point, validate_polygon
from floorgraph.geometry.polygon_edit import (
    add_hole,
    add_vertex,
    delete_hole,
    delete_polygon,
    delete_vertex,
    dist,
    distance_point_to_segment,
    move_vertex,
    nearest_edge_index,
    nearest_vertex_index,
)
from floorgraph.geometry.simplify import HttpSimplifier, Simplifier, simplify_polygon

__all__ = [
    "PolygonValidityReport",
    "point_in_polygon",
    "room_at_point",
    "validate_polygon",
    "add_hole",
    "add_vertex",
    "delete_hole",
    "delete_polygon",
    "delete_vertex",
    "dist",
    "distance_point_to_segment",
    "move_vertex",
    "nearest_edge_index",
    "nearest_vertex_index",
    "HttpSimplifier",
    "Simplifier",
    "simplify_polygon",
]
