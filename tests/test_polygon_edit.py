from __future__ import annotations

import math
from copy import deepcopy

import pytest

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

SQUARE = [[[0.0, 0.0], [4.0, 0.0], [4.0, 4.0], [0.0, 4.0]]]


def test_distance_to_segment_interior_and_clamped_ends() -> None:
    assert distance_point_to_segment((2.0, 3.0), (0.0, 0.0), (4.0, 0.0)) == pytest.approx(3.0)
    assert distance_point_to_segment((-3.0, 4.0), (0.0, 0.0), (4.0, 0.0)) == pytest.approx(5.0)
    assert distance_point_to_segment((7.0, 4.0), (0.0, 0.0), (4.0, 0.0)) == pytest.approx(5.0)


def test_degenerate_segment_is_point_distance() -> None:
    p, a = (3.0, -2.0), (1.0, 1.0)
    assert distance_point_to_segment(p, a, a) == pytest.approx(math.dist(p, a))


def test_dist_rounds_to_two_decimals() -> None:
    assert dist((0.0, 0.0), (1.0, 1.0)) == 1.41
    assert dist((0.0, 0.0), (3.0, 4.0)) == 5.0
    assert dist((0.0, 0.0), (1.0, 1.0), decimals=4) == 1.4142


def test_nearest_edge_includes_closing_edge() -> None:
    ring = SQUARE[0]
    assert nearest_edge_index(ring, (2.0, -0.5)) == 0
    assert nearest_edge_index(ring, (4.5, 2.0)) == 1
    assert nearest_edge_index(ring, (-0.5, 2.0)) == 3
    with pytest.raises(ValueError):
        nearest_edge_index([[0.0, 0.0]], (1.0, 1.0))


def test_nearest_vertex() -> None:
    assert nearest_vertex_index(SQUARE[0], (3.9, 3.8)) == 2
    with pytest.raises(ValueError):
        nearest_vertex_index([], (0.0, 0.0))


def test_add_vertex_inserts_into_nearest_edge_without_mutating_input() -> None:
    before = deepcopy(SQUARE)
    out = add_vertex(SQUARE, 0, (2.0, -0.1))
    assert SQUARE == before
    assert out[0] == [[0.0, 0.0], [2.0, -0.1], [4.0, 0.0], [4.0, 4.0], [0.0, 4.0]]
    closing = add_vertex(SQUARE, 0, (-0.2, 2.0))
    assert closing[0][-1] == [-0.2, 2.0]


def test_add_vertex_appends_while_ring_is_short() -> None:
    poly, active = add_hole(SQUARE)
    poly = add_vertex(poly, active, (1.0, 1.0))
    poly = add_vertex(poly, active, (2.0, 1.0))
    assert poly[active] == [[1.0, 1.0], [2.0, 1.0]]


def test_delete_vertex_removes_nearest() -> None:
    out = delete_vertex(SQUARE, 0, (4.1, 0.2))
    assert out[0] == [[0.0, 0.0], [4.0, 4.0], [0.0, 4.0]]
    assert len(SQUARE[0]) == 4


def test_move_vertex() -> None:
    out = move_vertex(SQUARE, 0, 2, (5.0, 5.0))
    assert out[0][2] == [5.0, 5.0]
    assert SQUARE[0][2] == [4.0, 4.0]
    with pytest.raises(ValueError):
        move_vertex(SQUARE, 0, 9, (1.0, 1.0))


def test_add_then_delete_hole_restores_ring_count() -> None:
    poly, active = add_hole(SQUARE)
    assert len(poly) == 2 and active == 1 and poly[1] == []
    restored, active = delete_hole(poly, 1)
    assert len(restored) == len(SQUARE)
    assert active == 0


def test_delete_hole_moves_active_ring_back_by_one() -> None:
    poly = deepcopy(SQUARE) + [[[1.0, 1.0], [2.0, 1.0], [2.0, 2.0]], [[3.0, 3.0], [3.5, 3.0], [3.5, 3.5]]]
    out, active = delete_hole(poly, 2)
    assert active == 1
    assert len(out) == 2


def test_exterior_ring_cannot_be_deleted() -> None:
    with pytest.raises(ValueError, match="exterior"):
        delete_hole(SQUARE, 0)
    with pytest.raises(ValueError):
        delete_hole(SQUARE, 3)


def test_delete_polygon_is_empty_ring_list() -> None:
    assert delete_polygon() == [[]]
