from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import requests

from floorgraph.core.errors import SaveFailed
from floorgraph.core.settings import ADD_DOORS_PATH, DEFAULT_HTTP_TIMEOUT_S
from floorgraph.project.saving import DEFAULT_SAVE_ERROR, Level
from floorgraph.project.schema import GraphDict, RoomsDict, normalize_graph, normalize_rooms

if TYPE_CHECKING:
    from floorgraph.project.store import DocumentStore

logger = logging.getLogger(__name__)


def _clean_path(path: str) -> str:
    p = str(path).strip("/")
    if not p or any(part in ("", ".", "..") for part in p.split("/")):
        raise SaveFailed(f"Invalid save path: {path!r}", path=str(path))
    return p


class JsonFileGateway:
    """Persistence gateway writing one JSON file per save path under ``root``.

    Saving ``room/update`` with ``{"roomId": "A-101", ...}`` writes
    ``root/room/update/A-101.json``; payloads without a ``roomId`` land in
    ``root/<path>.json``. A room payload whose ``roomData`` is None
    removes the room file.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def _target(self, path: str, payload: Dict[str, Any]) -> Path:
        rel = _clean_path(path)
        room_id = payload.get("roomId")
        if room_id:
            return self.root / rel / f"{_clean_path(str(room_id))}.json"
        return self.root / f"{rel}.json"

    def save(self, path: str, payload: Dict[str, Any]) -> None:
        target = self._target(path, payload)
        if payload.get("roomId") and "roomData" in payload and payload["roomData"] is None:
            # Room no longer in the document.
            try:
                target.unlink(missing_ok=True)
            except OSError as exc:
                raise SaveFailed(f"Failed to remove {target}: {exc}", path=path) from exc
            return
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp = target.with_suffix(".json.tmp")
            tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, target)
        except (OSError, TypeError, ValueError) as exc:
            raise SaveFailed(f"Failed to write {target}: {exc}", path=path) from exc
        logger.debug("saved %s", target)

    def load(self, path: str, room_id: Optional[str] = None) -> Dict[str, Any]:
        target = self._target(path, {"roomId": room_id} if room_id else {})
        return json.loads(target.read_text(encoding="utf-8"))


class HttpGateway:
    """Persistence gateway POSTing JSON payloads to ``base_url/<path>``."""

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_S,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = float(timeout)

    def save(self, path: str, payload: Dict[str, Any]) -> None:
        url = f"{self.base_url}/{_clean_path(path)}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise SaveFailed(f"Save request to {url} failed: {exc}", path=path) from exc
        if response.ok:
            return
        message = DEFAULT_SAVE_ERROR
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            if body.get("error"):
                logger.error("save to %s rejected: %s", url, body["error"])
            if body.get("errorMessage"):
                message = str(body["errorMessage"])
        raise SaveFailed(message, path=path, status=response.status_code)


class DoorInserter:
    """Asks the server to splice door nodes into a floor graph.

    The server answers with the whole updated graph under ``nodes``, which
    replaces the store's graph without an undo entry. A 500 response is only
    logged; any other error response is shown to the user.
    """

    def __init__(
        self,
        base_url: str,
        *,
        path: str = ADD_DOORS_PATH,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_S,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/{_clean_path(path)}"
        self.session = session or requests.Session()
        self.timeout = float(timeout)

    def add_doors(self, store: "DocumentStore", door_infos: List[Dict[str, Any]], door_type: str) -> bool:
        payload = {"floorCode": store.floor_code, "doorInfos": door_infos, "type": door_type}
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            logger.error("door insertion request to %s failed: %s", self.url, exc)
            store.notifier.notify(Level.ERROR, DEFAULT_SAVE_ERROR)
            return False
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}

        if not response.ok:
            if response.status_code == 500:
                logger.error("door insertion failed: %s", body.get("error"))
            else:
                store.notifier.notify(Level.ERROR, str(body.get("errorMessage") or DEFAULT_SAVE_ERROR))
            return False

        if not isinstance(body.get("nodes"), dict):
            logger.error("door insertion response from %s has no nodes", self.url)
            store.notifier.notify(Level.ERROR, DEFAULT_SAVE_ERROR)
            return False
        store.set_graph(body["nodes"])
        logger.info("inserted %d doors into %s", len(door_infos), store.floor_code)
        return True


def document_from_dict(data: Dict[str, Any]) -> Tuple[GraphDict, RoomsDict]:
    return normalize_graph(data.get("graph") or {}), normalize_rooms(data.get("rooms") or {})


def load_document(path: str | Path) -> Tuple[str, GraphDict, RoomsDict]:
    """Read ``{"floorCode", "graph", "rooms"}`` from a JSON file."""
    p = Path(path).expanduser()
    data = json.loads(p.read_text(encoding="utf-8"))
    graph, rooms = document_from_dict(data)
    return str(data.get("floorCode", "")), graph, rooms


def save_document(path: str | Path, floor_code: str, graph: GraphDict, rooms: RoomsDict) -> Path:
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps({"floorCode": floor_code, "graph": graph, "rooms": rooms}, indent=2), encoding="utf-8")
    return p
