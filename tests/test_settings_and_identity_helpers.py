from __future__ import annotations

import json
import uuid
from pathlib import Path

import pytest

from floorgraph.core.settings import EditorSettings, load_settings
from floorgraph.project.identity import (
    UuidAllocator,
    building_code_from_room_id,
    derive_room_id,
    extract_building_code,
    extract_floor_level,
    node_id_by_room_id,
    room_id_by_name,
    room_id_of_node,
    room_name_from_room_id,
)


def test_settings_defaults_and_overrides(tmp_path: Path) -> None:
    s = EditorSettings()
    assert s.graph_save_path == "graph/update"
    assert s.room_save_path == "room/update"
    assert s.dist_decimals == 2
    p = tmp_path / "editor.json"
    p.write_text(json.dumps({"simplify_url": "http://geo.local/simplify", "dist_decimals": 3}), encoding="utf-8")
    loaded = load_settings(p)
    assert loaded.simplify_url == "http://geo.local/simplify"
    assert loaded.dist_decimals == 3
    assert loaded.room_create_path == "room/create"


def test_settings_reject_unknown_and_invalid_values(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unknown"):
        EditorSettings.from_dict({"colour": "red"})
    with pytest.raises(ValueError):
        EditorSettings.from_dict({"dist_decimals": -1})
    p = tmp_path / "bad.json"
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(p)


def test_room_ids_derive_from_building_and_name() -> None:
    assert extract_building_code("GHC-4") == "GHC"
    assert derive_room_id("GHC", "4401") == "GHC-4401"
    assert building_code_from_room_id("GHC-4401") == "GHC"
    assert room_name_from_room_id("GHC-A-10") == "A-10"
    assert room_name_from_room_id("lonely") == ""


@pytest.mark.parametrize(
    "name,level",
    [("4401", "4"), ("A10", "A"), ("LL05", "LL"), ("EV1", "EV"), ("PH2", "PH"), ("M12", "M"), ("E3", "E"), ("Z9", "")],
)
def test_floor_level_prefix(name: str, level: str) -> None:
    assert extract_floor_level(name) == level


def test_lookups_over_graph_and_rooms() -> None:
    graph = {
        "n1": {"pos": {"x": 0.0, "y": 0.0}, "roomId": "A-1", "neighbors": {}},
        "n2": {"pos": {"x": 1.0, "y": 0.0}, "roomId": None, "neighbors": {}},
    }
    rooms = {"A-1": {"name": "1"}, "A-2": {"name": "2"}}
    assert room_id_by_name(rooms, "2") == "A-2"
    assert room_id_by_name(rooms, "3") is None
    assert node_id_by_room_id(graph, "A-1") == "n1"
    assert node_id_by_room_id(graph, None) is None
    assert room_id_of_node(graph, "n1") == "A-1"
    assert room_id_of_node(graph, "n2") is None
    assert room_id_of_node(graph, "ghost") is None


def test_uuid_allocator_returns_fresh_ids() -> None:
    alloc = UuidAllocator()
    a, b = alloc.allocate(), alloc.allocate()
    assert a != b
    assert uuid.UUID(a).version == 4
