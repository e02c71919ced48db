from __future__ import annotations

from copy import deepcopy
from typing import Any, Iterable, List, Tuple, Union

from floorgraph.core.errors import ApplyError
from floorgraph.ops.operation import OpKind, Operation, Path, PathKey, coerce_ops, to_pointer

_MISSING = object()


def _list_index(container: list, key: PathKey, *, allow_end: bool, op_index: int) -> int:
    if key == "-":
        if allow_end:
            return len(container)
        raise ApplyError("'-' is only valid as an insertion index", op_index=op_index)
    if isinstance(key, bool):
        raise ApplyError(f"Invalid list index: {key!r}", op_index=op_index)
    if isinstance(key, int):
        idx = key
    elif isinstance(key, str) and key.isdigit() and (key == "0" or not key.startswith("0")):
        idx = int(key)
    else:
        raise ApplyError(f"Invalid list index: {key!r}", op_index=op_index)
    upper = len(container) if allow_end else len(container) - 1
    if idx < 0 or idx > upper:
        raise ApplyError(f"List index out of range: {idx}", op_index=op_index)
    return idx


class _Patcher:
    """Applies operations in place on a private copy and collects their inverses."""

    def __init__(self, root: Any) -> None:
        self.root = root
        self.undo: List[List[Operation]] = []

    def _container(self, path: Path, op_index: int) -> Any:
        node = self.root
        for depth, key in enumerate(path[:-1]):
            if isinstance(node, dict):
                k = str(key)
                if k not in node:
                    raise ApplyError(f"Path not found: {to_pointer(path[: depth + 1])}", op_index=op_index)
                node = node[k]
            elif isinstance(node, list):
                node = node[_list_index(node, key, allow_end=False, op_index=op_index)]
            else:
                raise ApplyError(f"Cannot traverse into {type(node).__name__} at {to_pointer(path[:depth])}", op_index=op_index)
        if not isinstance(node, (dict, list)):
            raise ApplyError(f"Parent of {to_pointer(path)} is not a container", op_index=op_index)
        return node

    def _get(self, path: Path, op_index: int) -> Any:
        if not path:
            return self.root
        parent = self._container(path, op_index)
        key = path[-1]
        if isinstance(parent, dict):
            if str(key) not in parent:
                raise ApplyError(f"Path not found: {to_pointer(path)}", op_index=op_index)
            return parent[str(key)]
        return parent[_list_index(parent, key, allow_end=False, op_index=op_index)]

    def _add(self, path: Path, value: Any, op_index: int) -> Tuple[Path, Any]:
        """Insert ``value``; returns the resolved path and the overwritten value (or _MISSING)."""
        if not path:
            old = self.root
            self.root = value
            return path, old
        parent = self._container(path, op_index)
        key = path[-1]
        if isinstance(parent, dict):
            k = str(key)
            old = parent.get(k, _MISSING)
            parent[k] = value
            return path[:-1] + (k,), old
        idx = _list_index(parent, key, allow_end=True, op_index=op_index)
        parent.insert(idx, value)
        return path[:-1] + (idx,), _MISSING

    def _remove(self, path: Path, op_index: int) -> Tuple[Path, Any]:
        parent = self._container(path, op_index)
        key = path[-1]
        if isinstance(parent, dict):
            k = str(key)
            if k not in parent:
                raise ApplyError(f"Path not found: {to_pointer(path)}", op_index=op_index)
            return path[:-1] + (k,), parent.pop(k)
        idx = _list_index(parent, key, allow_end=False, op_index=op_index)
        return path[:-1] + (idx,), parent.pop(idx)

    def apply(self, op: Operation, op_index: int) -> None:
        if op.kind is OpKind.ADD:
            resolved, old = self._add(op.path, deepcopy(op.value), op_index)
            if old is _MISSING:
                inverse = [Operation(OpKind.REMOVE, resolved)]
            else:
                inverse = [Operation(OpKind.REPLACE, resolved, old)]
        elif op.kind is OpKind.REMOVE:
            resolved, old = self._remove(op.path, op_index)
            inverse = [Operation(OpKind.ADD, resolved, old)]
        elif op.kind is OpKind.REPLACE:
            old = self._get(op.path, op_index)
            if op.path:
                parent = self._container(op.path, op_index)
                key = op.path[-1]
                if isinstance(parent, dict):
                    parent[str(key)] = deepcopy(op.value)
                else:
                    parent[_list_index(parent, key, allow_end=False, op_index=op_index)] = deepcopy(op.value)
            else:
                self.root = deepcopy(op.value)
            inverse = [Operation(OpKind.REPLACE, op.path, old)]
        elif op.kind is OpKind.MOVE:
            src = op.from_path
            if src is None:
                raise ApplyError("move operation has no source path", op_index=op_index)
            if len(op.path) > len(src) and tuple(str(k) for k in op.path[: len(src)]) == tuple(str(k) for k in src):
                raise ApplyError(f"Cannot move {to_pointer(src)} into its own child", op_index=op_index)
            src_resolved, value = self._remove(src, op_index)
            dst_resolved, old = self._add(op.path, value, op_index)
            inverse = [Operation(OpKind.MOVE, src_resolved, from_path=dst_resolved)]
            if old is not _MISSING:
                inverse.append(Operation(OpKind.ADD, dst_resolved, old))
        elif op.kind is OpKind.TEST:
            current = self._get(op.path, op_index)
            if current != op.value:
                raise ApplyError(f"Test failed at {to_pointer(op.path)}", op_index=op_index)
            inverse = []
        else:
            raise ApplyError(f"Unsupported operation kind: {op.kind!r}", op_index=op_index)
        self.undo.append(inverse)


def apply_with_inverse(document: Any, ops: Iterable[Union[Operation, dict]]) -> Tuple[Any, List[Operation]]:
    """Apply ``ops`` to a copy of ``document``.

    Returns the new document and the batch that restores ``document`` from it.
    The input is never mutated; any failing operation aborts the whole batch
    with ApplyError.
    """
    patcher = _Patcher(deepcopy(document))
    for i, op in enumerate(coerce_ops(ops)):
        patcher.apply(op, i)
    inverse: List[Operation] = []
    for step in reversed(patcher.undo):
        inverse.extend(step)
    return patcher.root, inverse


def apply_patch(document: Any, ops: Iterable[Union[Operation, dict]]) -> Any:
    return apply_with_inverse(document, ops)[0]


def invert(document: Any, ops: Iterable[Union[Operation, dict]]) -> List[Operation]:
    """Inverse of ``ops`` computed against the state they will be applied to."""
    return apply_with_inverse(document, ops)[1]
