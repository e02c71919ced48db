from __future__ import annotations

import json
from copy import deepcopy
from typing import Any, List, Optional

import pytest
import requests

from floorgraph.core.errors import SimplifyFailed
from floorgraph.geometry.simplify import HttpSimplifier, simplify_polygon

POLY = [
    [[0.0, 0.0], [2.0, 0.0], [4.0, 0.0], [4.0, 4.0], [0.0, 4.0]],
    [[1.0, 1.0], [1.0, 2.0], [2.0, 2.0], [2.0, 1.5], [2.0, 1.0]],
]


class _DropMidpoints:
    def simplify(self, polygon):
        return [ring[::2] if len(ring) > 4 else ring for ring in polygon]


class _Broken:
    def simplify(self, polygon):
        raise RuntimeError("service down")


class _LosesHole:
    def simplify(self, polygon):
        return polygon[:1]


class _Response:
    def __init__(self, status: int, body: Any, raw: Optional[str] = None) -> None:
        self.status_code = status
        self.ok = 200 <= status < 300
        self._body = body
        self._raw = raw

    def json(self) -> Any:
        if self._raw is not None:
            return json.loads(self._raw)
        return self._body


class _Session:
    def __init__(self, response: Any = None, exc: Optional[Exception] = None) -> None:
        self.response = response
        self.exc = exc
        self.calls: List[dict] = []

    def post(self, url: str, **kwargs: Any) -> Any:
        self.calls.append({"url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response


def test_simplify_keeps_ring_count_and_input() -> None:
    before = deepcopy(POLY)
    out = simplify_polygon(POLY, _DropMidpoints())
    assert POLY == before
    assert len(out) == len(POLY)
    assert all(len(a) <= len(b) for a, b in zip(out, POLY))


def test_simplifier_errors_become_simplify_failed() -> None:
    with pytest.raises(SimplifyFailed):
        simplify_polygon(POLY, _Broken())
    with pytest.raises(SimplifyFailed, match="rings"):
        simplify_polygon(POLY, _LosesHole())


def test_http_simplifier_posts_geojson_and_reads_string_body() -> None:
    simplified = {"type": "Polygon", "coordinates": [[[0, 0], [4, 0], [4, 4]], [[1, 1], [2, 2], [2, 1]]]}
    session = _Session(_Response(200, json.dumps(simplified)))
    client = HttpSimplifier("https://geo.example/simplify-polygon", token_provider=lambda: "tok", session=session)
    out = simplify_polygon(POLY, client)
    assert out[0] == [[0.0, 0.0], [4.0, 0.0], [4.0, 4.0]]
    call = session.calls[0]
    assert call["json"]["polygon"]["type"] == "Polygon"
    assert call["json"]["polygon"]["coordinates"] == POLY
    assert call["headers"] == {"Authorization": "Bearer tok"}


def test_http_simplifier_error_status() -> None:
    client = HttpSimplifier("https://geo.example/simplify-polygon", session=_Session(_Response(500, {"error": "boom"})))
    with pytest.raises(SimplifyFailed, match="boom"):
        client.simplify(POLY)


def test_http_simplifier_network_failure() -> None:
    session = _Session(exc=requests.exceptions.ConnectionError("unreachable"))
    client = HttpSimplifier("https://geo.example/simplify-polygon", session=session)
    with pytest.raises(SimplifyFailed, match="request failed"):
        simplify_polygon(POLY, client)
    assert "headers" in session.calls[0] and session.calls[0]["headers"] == {}


def test_simplified_ring_may_not_gain_vertices() -> None:
    class _Densifies:
        def simplify(self, polygon):
            tri = [[0.0, 0.0], [2.0, 0.0], [2.0, 2.0]]
            return [tri + [[1.0, 0.0], [2.0, 1.0], [1.0, 1.0]]]

    tri = [[[0.0, 0.0], [2.0, 0.0], [2.0, 2.0]]]
    with pytest.raises(SimplifyFailed, match="vertices"):
        simplify_polygon(tri, _Densifies())


def test_ring_that_cannot_shrink_is_accepted_unchanged() -> None:
    class _Identity:
        def simplify(self, polygon):
            return deepcopy(polygon)

    tri = [[[0.0, 0.0], [2.0, 0.0], [2.0, 2.0]]]
    assert simplify_polygon(tri, _Identity()) == tri
