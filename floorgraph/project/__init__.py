"""
Floor document handling.

Document schema, the per-session DocumentStore, persistence gateways and save dispatch.
"""

from floorgraph.project.identity import UuidAllocator, derive_room_id, extract_building_code
from floorgraph.project.io import DoorInserter, HttpGateway, JsonFileGateway, load_document, save_document
from floorgraph.project.saving import Level, Notification, NotificationLog, SaveDispatcher, SaveStatus
from floorgraph.project.schema import Edge, Node, RoomInfo
from floorgraph.project.store import DocumentStore

__all__ = [
    "UuidAllocator",
    "derive_room_id",
    "extract_building_code",
    "DoorInserter",
    "HttpGateway",
    "JsonFileGateway",
    "load_document",
    "save_document",
    "Level",
    "Notification",
    "NotificationLog",
    "SaveDispatcher",
    "SaveStatus",
    "Edge",
    "Node",
    "RoomInfo",
    "DocumentStore",
]
