from __future__ import annotations

import logging
from concurrent.futures import Future
from copy import deepcopy
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from floorgraph.core.errors import ApplyError, DocumentClosedError, NoOpError, RedoFailed, UndoFailed
from floorgraph.core.settings import EditorSettings
from floorgraph.ops.engine import PatchEngine
from floorgraph.ops.history import EditHistory, HistoryEntry
from floorgraph.ops.operation import Operation
from floorgraph.project.identity import extract_building_code
from floorgraph.project.saving import Level, NotificationLog, Notifier, PersistenceGateway, SaveDispatcher, SaveStatus
from floorgraph.project.schema import GraphDict, Node, RoomInfo, RoomsDict, normalize_graph, normalize_rooms

logger = logging.getLogger(__name__)

GRAPH_KEY = "graph"
ROOMS_KEY = "rooms"


class DocumentStore:
    """One open floor document: graph, rooms, edit history and pending saves.

    Operation paths are rooted at ``{"graph": ..., "rooms": ...}``, so a node
    field is ``("graph", node_id, "roomId")`` and a room is
    ``("rooms", room_id)``. Room edits share the undo history with graph
    edits.
    """

    def __init__(
        self,
        floor_code: str,
        graph: Optional[GraphDict] = None,
        rooms: Optional[RoomsDict] = None,
        *,
        gateway: Optional[PersistenceGateway] = None,
        notifier: Optional[Notifier] = None,
        settings: Optional[EditorSettings] = None,
        synchronous_saves: bool = False,
    ) -> None:
        self.floor_code = str(floor_code)
        self.building_code = extract_building_code(self.floor_code)
        self.settings = settings or EditorSettings()
        self.notifier: Notifier = notifier or NotificationLog()
        self._engine = PatchEngine({GRAPH_KEY: normalize_graph(graph or {}), ROOMS_KEY: normalize_rooms(rooms or {})})
        self._saver: Optional[SaveDispatcher] = None
        if gateway is not None:
            self._saver = SaveDispatcher(gateway, self.notifier, synchronous=synchronous_saves)
        self._closed = False

    @classmethod
    def open(cls, floor_code: str, graph: Optional[GraphDict] = None, rooms: Optional[RoomsDict] = None, **kwargs: Any) -> "DocumentStore":
        store = cls(floor_code, graph, rooms, **kwargs)
        logger.info("opened %s (%d nodes, %d rooms)", store.floor_code, len(store._graph), len(store._rooms))
        return store

    def close(self) -> None:
        if self._closed:
            return
        if self._saver is not None:
            self._saver.shutdown()
        self._closed = True
        logger.info("closed %s", self.floor_code)

    def __enter__(self) -> "DocumentStore":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise DocumentClosedError(f"Document {self.floor_code} is closed")

    # snapshots

    @property
    def _graph(self) -> GraphDict:
        return self._engine.document[GRAPH_KEY]

    @property
    def _rooms(self) -> RoomsDict:
        return self._engine.document[ROOMS_KEY]

    @property
    def graph(self) -> GraphDict:
        return deepcopy(self._graph)

    @property
    def rooms(self) -> RoomsDict:
        return deepcopy(self._rooms)

    def node(self, node_id: str) -> Node:
        return Node.from_dict(node_id, self._graph[node_id])

    def room(self, room_id: str) -> RoomInfo:
        return RoomInfo.from_dict(self._rooms[room_id])

    def has_node(self, node_id: str) -> bool:
        return node_id in self._graph

    def has_room(self, room_id: str) -> bool:
        return room_id in self._rooms

    @property
    def history(self) -> EditHistory:
        return self._engine.history

    @property
    def can_undo(self) -> bool:
        return self._engine.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._engine.history.can_redo

    # historied edits

    def apply_edit(
        self,
        ops: Iterable[Union[Operation, Dict[str, Any]]],
        *,
        label: str = "edit",
        persist: bool = True,
    ) -> HistoryEntry:
        self._check_open()
        try:
            entry = self._engine.apply_edit(ops, label=label)
        except ApplyError:
            self.notifier.notify(Level.ERROR, "Failed to apply change!")
            raise
        if persist:
            self._persist(entry.forward)
        return entry

    def undo(self) -> HistoryEntry:
        self._check_open()
        try:
            entry = self._engine.undo()
        except NoOpError:
            self.notifier.notify(Level.ERROR, "Can't undo anymore!")
            raise
        except UndoFailed:
            self.notifier.notify(Level.ERROR, "Failed to undo change!")
            raise
        self._persist(entry.inverse)
        return entry

    def redo(self) -> HistoryEntry:
        self._check_open()
        try:
            entry = self._engine.redo()
        except NoOpError:
            self.notifier.notify(Level.ERROR, "Can't redo anymore!")
            raise
        except RedoFailed:
            self.notifier.notify(Level.ERROR, "Failed to redo change!")
            raise
        self._persist(entry.forward)
        return entry

    # non-historied bulk replace

    def set_graph(self, graph: GraphDict) -> None:
        """Replace the graph wholesale, e.g. after the server inserted doors. Not undoable."""
        self._check_open()
        doc = dict(self._engine.document)
        doc[GRAPH_KEY] = normalize_graph(graph)
        self._engine.reset_document(doc)

    def set_rooms(self, rooms: RoomsDict) -> None:
        self._check_open()
        doc = dict(self._engine.document)
        doc[ROOMS_KEY] = normalize_rooms(rooms)
        self._engine.reset_document(doc)

    # persistence

    @property
    def save_status(self) -> SaveStatus:
        return self._saver.status if self._saver is not None else SaveStatus.IDLE

    def flush_saves(self, timeout: Optional[float] = None) -> bool:
        return self._saver.flush(timeout) if self._saver is not None else True

    def save_graph(self) -> Optional["Future[bool]"]:
        if self._saver is None:
            return None
        payload = {"floorCode": self.floor_code, "newGraph": self.graph}
        return self._saver.submit(self.settings.graph_save_path, payload)

    def save_room(self, room_id: str, *, create: bool = False) -> Optional["Future[bool]"]:
        """Dispatch one room; a room missing from the document is saved as deleted."""
        if self._saver is None:
            return None
        room = deepcopy(self._rooms.get(room_id))
        if create:
            payload = {"floorCode": self.floor_code, "roomId": room_id, "newRoomInfo": room}
            return self._saver.submit(self.settings.room_create_path, payload)
        payload = {"floorCode": self.floor_code, "roomId": room_id, "roomData": room}
        return self._saver.submit(self.settings.room_save_path, payload)

    def _persist(self, ops: Iterable[Operation]) -> List["Future[bool]"]:
        if self._saver is None:
            return []
        graph_touched = False
        room_ids: List[str] = []
        seen: Set[str] = set()
        for op in ops:
            for path in (op.path, op.from_path):
                if not path:
                    continue
                if path[0] == GRAPH_KEY:
                    graph_touched = True
                elif path[0] == ROOMS_KEY and len(path) > 1 and str(path[1]) not in seen:
                    seen.add(str(path[1]))
                    room_ids.append(str(path[1]))
        futures: List[Future] = []
        if graph_touched:
            fut = self.save_graph()
            if fut is not None:
                futures.append(fut)
        for room_id in room_ids:
            fut = self.save_room(room_id)
            if fut is not None:
                futures.append(fut)
        return futures
