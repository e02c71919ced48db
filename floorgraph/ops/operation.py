from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

PathKey = Union[str, int]
Path = Tuple[PathKey, ...]


class OpKind(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    TEST = "test"


def parse_pointer(pointer: str) -> Path:
    """Split a JSON pointer (``/a/b~1c``) into path keys."""
    if pointer == "":
        return ()
    if not pointer.startswith("/"):
        raise ValueError(f"JSON pointer must start with '/': {pointer!r}")
    return tuple(part.replace("~1", "/").replace("~0", "~") for part in pointer[1:].split("/"))


def to_pointer(path: Sequence[PathKey]) -> str:
    return "".join("/" + str(k).replace("~", "~0").replace("/", "~1") for k in path)


def as_path(path: Union[str, Sequence[PathKey]]) -> Path:
    if isinstance(path, str):
        return parse_pointer(path)
    return tuple(path)


@dataclass(frozen=True)
class Operation:
    kind: OpKind
    path: Path
    value: Any = None
    from_path: Optional[Path] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", OpKind(self.kind))
        object.__setattr__(self, "path", as_path(self.path))
        if self.from_path is not None:
            object.__setattr__(self, "from_path", as_path(self.from_path))
        if self.kind is OpKind.MOVE and self.from_path is None:
            raise ValueError("move operation requires from_path")
        if not self.path and self.kind in (OpKind.REMOVE, OpKind.MOVE):
            raise ValueError(f"{self.kind.value} operation cannot target the document root")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"op": self.kind.value, "path": to_pointer(self.path)}
        if self.kind in (OpKind.ADD, OpKind.REPLACE, OpKind.TEST):
            out["value"] = self.value
        if self.kind is OpKind.MOVE and self.from_path is not None:
            out["from"] = to_pointer(self.from_path)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Operation":
        if "op" not in data or "path" not in data:
            raise ValueError(f"Operation needs 'op' and 'path': {data!r}")
        kind = OpKind(str(data["op"]).lower())
        if kind in (OpKind.ADD, OpKind.REPLACE, OpKind.TEST) and "value" not in data:
            raise ValueError(f"{kind.value} operation needs a value")
        return cls(
            kind=kind,
            path=as_path(data["path"]),
            value=data.get("value"),
            from_path=as_path(data["from"]) if "from" in data else None,
        )


def add(path: Union[str, Sequence[PathKey]], value: Any) -> Operation:
    return Operation(OpKind.ADD, as_path(path), value)


def remove(path: Union[str, Sequence[PathKey]]) -> Operation:
    return Operation(OpKind.REMOVE, as_path(path))


def replace(path: Union[str, Sequence[PathKey]], value: Any) -> Operation:
    return Operation(OpKind.REPLACE, as_path(path), value)


def move(from_path: Union[str, Sequence[PathKey]], path: Union[str, Sequence[PathKey]]) -> Operation:
    return Operation(OpKind.MOVE, as_path(path), from_path=as_path(from_path))


def expect(path: Union[str, Sequence[PathKey]], value: Any) -> Operation:
    return Operation(OpKind.TEST, as_path(path), value)


def coerce_ops(ops: Iterable[Union[Operation, Dict[str, Any]]]) -> List[Operation]:
    out: List[Operation] = []
    for op in ops:
        out.append(op if isinstance(op, Operation) else Operation.from_dict(op))
    return out


def ops_to_dicts(ops: Iterable[Operation]) -> List[Dict[str, Any]]:
    return [op.to_dict() for op in ops]
