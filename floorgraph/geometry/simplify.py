from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, Protocol

import requests

from floorgraph.core.errors import SimplifyFailed
from floorgraph.core.settings import DEFAULT_HTTP_TIMEOUT_S
from floorgraph.project.schema import Polygon, polygon_from_data, polygon_to_geojson

logger = logging.getLogger(__name__)


class Simplifier(Protocol):
    def simplify(self, polygon: Polygon) -> Polygon: ...


class HttpSimplifier:
    """Client for the remote ``simplify-polygon`` endpoint.

    Request body is ``{"polygon": <GeoJSON Polygon>}``. A successful response
    carries the simplified GeoJSON polygon, either as an object or as a JSON
    encoded string; an error response carries ``{"error": ...}``.
    """

    def __init__(
        self,
        url: str,
        *,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_S,
    ) -> None:
        self.url = url
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = float(timeout)

    def _headers(self) -> dict:
        token = self.token_provider() if self.token_provider is not None else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    def simplify(self, polygon: Polygon) -> Polygon:
        try:
            response = self.session.post(
                self.url,
                json={"polygon": polygon_to_geojson(polygon)},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise SimplifyFailed(f"Simplification request failed: {exc}") from exc

        try:
            body: Any = response.json()
        except ValueError as exc:
            raise SimplifyFailed(f"Simplification service returned invalid JSON (HTTP {response.status_code})") from exc

        if not response.ok:
            detail = body.get("error") if isinstance(body, dict) else body
            raise SimplifyFailed(f"Simplification service error (HTTP {response.status_code}): {detail}")

        try:
            if isinstance(body, str):
                body = json.loads(body)
            return polygon_from_data(body)
        except (ValueError, TypeError, KeyError, IndexError) as exc:
            raise SimplifyFailed(f"Unreadable simplified polygon: {exc}") from exc


def simplify_polygon(polygon: Polygon, simplifier: Simplifier) -> Polygon:
    """Ask ``simplifier`` for a lighter polygon with the same rings.

    The result keeps the ring count and no ring gains vertices. Any failure,
    including a result breaking that contract, raises SimplifyFailed; the
    input polygon is left as it was.
    """
    try:
        out = simplifier.simplify([list(map(list, ring)) for ring in polygon])
    except SimplifyFailed:
        logger.error("polygon simplification failed", exc_info=True)
        raise
    except Exception as exc:
        logger.error("polygon simplification failed: %s", exc)
        raise SimplifyFailed(str(exc)) from exc
    try:
        out = polygon_from_data(out)
    except (ValueError, TypeError, KeyError, IndexError) as exc:
        raise SimplifyFailed(f"Unreadable simplified polygon: {exc}") from exc
    if len(out) != len(polygon):
        raise SimplifyFailed(f"Simplified polygon has {len(out)} rings, expected {len(polygon)}")
    for i, (ring, src) in enumerate(zip(out, polygon)):
        if len(ring) > len(src):
            raise SimplifyFailed(f"Simplified ring {i} has {len(ring)} vertices, input had {len(src)}")
    return out
