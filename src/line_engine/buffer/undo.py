"""Undo/redo stacks for buffer edits."""

from __future__ import annotations

from typing import Iterator, List, Optional

from .operations import UndoRedoRecord


class UndoHistory:
    """Linear undo/redo history.

    Records move between the two stacks as whole units. Starting a new edit
    discards the redo stack; there is no branching history.
    """

    def __init__(self) -> None:
        self._undo: List[UndoRedoRecord] = []
        self._redo: List[UndoRedoRecord] = []

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def push_undo(self, record: UndoRedoRecord) -> None:
        self._undo.append(record)

    def push_redo(self, record: UndoRedoRecord) -> None:
        self._redo.append(record)

    def pop_undo(self) -> Optional[UndoRedoRecord]:
        if not self._undo:
            return None
        return self._undo.pop()

    def pop_redo(self) -> Optional[UndoRedoRecord]:
        if not self._redo:
            return None
        return self._redo.pop()

    def new_redo_branch(self) -> None:
        self._redo.clear()

    def iter_undo(self) -> Iterator[UndoRedoRecord]:
        """Yield undo records oldest first."""

        yield from self._undo
