"""Primitive edit operations and the undo/redo records built from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from .text import GraphemeText


@dataclass(frozen=True, slots=True)
class Insert:
    pos: int
    content: str

    kind: ClassVar[str] = "insert"


@dataclass(frozen=True, slots=True)
class Delete:
    start: int
    end: int

    kind: ClassVar[str] = "delete"


@dataclass(frozen=True, slots=True)
class Replace:
    start: int
    end: int
    replacement: str

    kind: ClassVar[str] = "replace"


Operation = Union[Insert, Delete, Replace]


@dataclass(frozen=True, slots=True)
class UndoRedoRecord:
    """One reversible edit: ``redo`` re-applies it, ``undo`` reverses it."""

    undo: Operation
    redo: Operation


def apply_operation(text: GraphemeText, op: Operation) -> GraphemeText:
    """Return ``text`` with ``op`` applied. Positions are not validated here."""

    if isinstance(op, Insert):
        return text.splice(op.pos, op.pos, op.content)
    if isinstance(op, Delete):
        return text.splice(op.start, op.end, "")
    if isinstance(op, Replace):
        return text.splice(op.start, op.end, op.replacement)
    raise TypeError(f"Unsupported operation {op!r}")


def describe(op: Operation) -> dict[str, object]:
    """Flatten ``op`` into telemetry-friendly key/value pairs."""

    if isinstance(op, Insert):
        return {"op": op.kind, "pos": op.pos, "size": len(op.content)}
    if isinstance(op, Delete):
        return {"op": op.kind, "start": op.start, "end": op.end}
    if isinstance(op, Replace):
        return {
            "op": op.kind,
            "start": op.start,
            "end": op.end,
            "size": len(op.replacement),
        }
    raise TypeError(f"Unsupported operation {op!r}")


__all__ = [
    "Insert",
    "Delete",
    "Replace",
    "Operation",
    "UndoRedoRecord",
    "apply_operation",
    "describe",
]
