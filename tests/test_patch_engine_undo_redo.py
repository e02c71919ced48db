from __future__ import annotations

from copy import deepcopy

import pytest

from floorgraph.core.errors import ApplyError, NoOpError, RedoFailed, UndoFailed
from floorgraph.core.hashing import batch_hash, document_hash
from floorgraph.ops.engine import PatchEngine
from floorgraph.ops.history import EditHistory, HistoryEntry
from floorgraph.ops.operation import Operation, OpKind, add, remove, replace


def _graph() -> dict:
    return {"n1": {"pos": {"x": 0.0, "y": 0.0}, "roomId": None, "neighbors": {}}}


def test_replace_room_id_undo_redo_scenario() -> None:
    eng = PatchEngine(_graph())
    eng.apply_edit([{"op": "replace", "path": ["n1", "roomId"], "value": "A-1"}])
    assert eng.document["n1"]["roomId"] == "A-1"
    eng.undo()
    assert eng.document["n1"]["roomId"] is None
    eng.redo()
    assert eng.document["n1"]["roomId"] == "A-1"


def test_k_edits_then_k_undos_restore_original() -> None:
    original = _graph()
    eng = PatchEngine(deepcopy(original))
    for i in range(10):
        eng.apply_edit([add((f"m{i}",), {"pos": {"x": float(i), "y": 0.0}, "roomId": None, "neighbors": {}})])
        eng.apply_edit([replace(("n1", "pos", "x"), float(i))])
    assert eng.cursor == 19
    for _ in range(20):
        eng.undo()
    assert eng.document == original
    assert eng.cursor == -1


def test_new_edit_after_undo_truncates_redo_branch() -> None:
    eng = PatchEngine(_graph())
    e0 = [replace(("n1", "roomId"), "A-0")]
    e1 = [replace(("n1", "roomId"), "A-1")]
    e2 = [replace(("n1", "roomId"), "A-2")]
    e3 = [replace(("n1", "roomId"), "A-3")]
    for batch in (e0, e1, e2):
        eng.apply_edit(batch)
    eng.undo()
    eng.undo()
    assert eng.cursor == 0
    eng.apply_edit(e3)
    assert eng.history.forward == (tuple(e0), tuple(e3))
    assert len(eng.history.forward) == len(eng.history.inverse) == 2
    assert eng.cursor == 1
    with pytest.raises(NoOpError):
        eng.redo()
    assert eng.document["n1"]["roomId"] == "A-3"


def test_undo_at_start_and_redo_at_tail_are_noops() -> None:
    eng = PatchEngine(_graph())
    with pytest.raises(NoOpError):
        eng.undo()
    assert eng.document == _graph()
    eng.apply_edit([replace(("n1", "roomId"), "A-1")])
    with pytest.raises(NoOpError):
        eng.redo()
    assert eng.document["n1"]["roomId"] == "A-1"
    assert eng.cursor == 0


def test_failed_batch_is_not_recorded_and_leaves_document() -> None:
    eng = PatchEngine(_graph())
    eng.apply_edit([replace(("n1", "roomId"), "A-1")])
    snapshot = deepcopy(eng.document)
    with pytest.raises(ApplyError):
        eng.apply_edit([replace(("n1", "roomId"), "A-2"), remove(("n1", "missing"))])
    assert eng.document == snapshot
    assert len(eng.history) == 1
    assert eng.cursor == 0


def test_empty_batch_is_rejected() -> None:
    eng = PatchEngine(_graph())
    with pytest.raises(ApplyError):
        eng.apply_edit([])
    assert len(eng.history) == 0


def test_undo_that_no_longer_applies_keeps_cursor() -> None:
    eng = PatchEngine(_graph())
    eng.apply_edit([add(("n2",), {"pos": {"x": 1.0, "y": 1.0}, "roomId": None, "neighbors": {}})])
    # Out-of-band replace removes what the inverse wants to remove.
    eng.reset_document(_graph())
    with pytest.raises(UndoFailed):
        eng.undo()
    assert eng.cursor == 0
    assert eng.document == _graph()


def test_redo_that_no_longer_applies_keeps_cursor() -> None:
    eng = PatchEngine(_graph())
    eng.apply_edit([remove(("n1",))])
    eng.undo()
    eng.reset_document({})
    with pytest.raises(RedoFailed):
        eng.redo()
    assert eng.cursor == -1
    assert eng.document == {}


def test_history_entries_carry_label_and_hashes() -> None:
    eng = PatchEngine(_graph())
    entry = eng.apply_edit([replace(("n1", "roomId"), "A-1")], label="assign")
    assert entry.label == "assign"
    assert entry.before_hash and entry.after_hash
    assert entry.before_hash != entry.after_hash
    assert entry.inverse == (Operation(OpKind.REPLACE, ("n1", "roomId"), None),)
    undone = eng.undo()
    assert undone is entry


def test_edit_history_record_and_step() -> None:
    h = EditHistory()
    assert h.cursor == -1 and not h.can_undo and not h.can_redo
    for i in range(3):
        h.record(HistoryEntry(forward=(replace(("a",), i),), inverse=(replace(("a",), i - 1),)))
    assert h.cursor == 2 and h.undo_depth == 3 and h.redo_depth == 0
    h.step_back()
    h.step_back()
    assert h.redo_depth == 2
    h.record(HistoryEntry(forward=(replace(("a",), 9),), inverse=(replace(("a",), 0),)))
    assert len(h) == 2
    assert h.cursor == 1
    h.step_back()
    h.step_back()
    with pytest.raises(IndexError):
        h.step_back()
    h.clear()
    assert len(h) == 0 and h.cursor == -1


def test_document_and_batch_hashes() -> None:
    a = {"n1": {"x": 1.0, "y": 2.0}, "n2": {"x": 0.1 + 0.2}}
    b = {"n2": {"x": 0.3}, "n1": {"y": 2.0, "x": 1.0}}
    assert document_hash(a) == document_hash(b)
    ops = [replace(("n1", "roomId"), "A-1"), remove(("n2",))]
    assert batch_hash(ops) == batch_hash([op.to_dict() for op in ops])
    assert batch_hash(ops) != batch_hash(list(reversed(ops)))
    entry = PatchEngine(_graph()).apply_edit([replace(("n1", "roomId"), "A-1")])
    assert entry.digest == batch_hash([replace(("n1", "roomId"), "A-1")])


def test_redo_replays_committed_value_after_caller_mutation() -> None:
    value = {"pos": {"x": 1.0, "y": 1.0}, "roomId": None, "neighbors": {}}
    eng = PatchEngine(_graph())
    eng.apply_edit([add(("n9",), value)])
    value["roomId"] = "changed later"
    value["pos"]["x"] = 99.0
    assert eng.document["n9"]["roomId"] is None
    eng.undo()
    eng.redo()
    assert eng.document["n9"] == {"pos": {"x": 1.0, "y": 1.0}, "roomId": None, "neighbors": {}}
    assert eng.history.forward[0][0].value["roomId"] is None


def test_non_finite_coordinate_is_rejected_as_apply_error() -> None:
    eng = PatchEngine(_graph())
    with pytest.raises(ApplyError):
        eng.apply_edit([replace(("n1", "pos", "x"), float("nan"))])
    assert eng.document == _graph()
    assert len(eng.history) == 0
