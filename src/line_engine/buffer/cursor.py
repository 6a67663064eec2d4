"""Cursors bound to a buffer and the registry that keeps them in place."""

from __future__ import annotations

import itertools
import threading
import weakref
from typing import Dict, Iterator, Optional

from line_engine.runtime.telemetry import span

from .buffer import TextBuffer
from .errors import InvalidCursor
from .operations import Delete, Insert, Operation, Replace


class Cursor:
    """A position in a buffer. Moves are clipped to ``[0, end()]`` silently."""

    def __init__(self, cursor_id: int, buffer: TextBuffer, position: int = 0) -> None:
        self.id = cursor_id
        self.position = position
        self._buffer = weakref.ref(buffer)

    def __repr__(self) -> str:
        return f"Cursor(id={self.id}, position={self.position})"

    @property
    def buffer(self) -> TextBuffer:
        buffer = self._buffer()
        if buffer is None:
            raise InvalidCursor("buffer no longer exists", cursor_id=self.id)
        return buffer

    def end(self) -> int:
        return len(self.buffer)

    def at_end(self) -> bool:
        return self.position == self.end()

    def move_to(self, position: int) -> int:
        self.position = max(0, min(position, self.end()))
        return self.position

    def move_rel(self, delta: int) -> int:
        return self.move_to(self.position + delta)


class CursorRegistry:
    """Owns the cursors of one buffer, keyed by a per-buffer id."""

    def __init__(self, buffer: TextBuffer, *, logger_name: Optional[str] = None) -> None:
        self._buffer = weakref.ref(buffer)
        self._cursors: Dict[int, Cursor] = {}
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()
        self._logger_name = logger_name

    def __len__(self) -> int:
        return len(self._cursors)

    def __contains__(self, cursor_id: object) -> bool:
        return cursor_id in self._cursors

    def __iter__(self) -> Iterator[Cursor]:
        return iter(list(self._cursors.values()))

    @property
    def buffer(self) -> TextBuffer:
        buffer = self._buffer()
        if buffer is None:
            raise InvalidCursor("buffer no longer exists")
        return buffer

    def next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def add_cursor(self, pos: int = 0) -> int:
        buffer = self.buffer
        with span(
            "cursor::add",
            logger_name=self._logger_name,
            component="cursors",
            metadata={"buffer": buffer.name, "pos": pos},
        ) as handle:
            pos = buffer.ensure_pos_valid(pos)
            cursor_id = self.next_id()
            self._cursors[cursor_id] = Cursor(cursor_id, buffer, pos)
            handle.add_metadata("cursor_id", cursor_id)
            return cursor_id

    def cursor(self, cursor_id: int) -> Cursor:
        try:
            return self._cursors[cursor_id]
        except KeyError as exc:
            raise InvalidCursor("no such cursor", cursor_id=cursor_id) from exc

    def delete_cursor(self, cursor_id: int) -> None:
        with span(
            "cursor::delete",
            logger_name=self._logger_name,
            component="cursors",
            metadata={"cursor_id": cursor_id},
        ):
            if self._cursors.pop(cursor_id, None) is None:
                raise InvalidCursor("no such cursor", cursor_id=cursor_id)

    def cursors(self) -> Iterator[Cursor]:
        return iter(self)

    def reposition(self, op: Operation, delta: int) -> None:
        """Move every cursor to account for ``op`` having been applied."""

        for cursor in self._cursors.values():
            cursor.move_to(shifted_position(cursor.position, op, delta))


def shifted_position(position: int, op: Operation, delta: int) -> int:
    """Where a cursor at ``position`` lands after ``op`` (length change ``delta``).

    Cursors before the edited span stay put and cursors at or after its end
    shift by the length change. A cursor strictly inside a replaced span lands
    at the end of the replacement; for deletions that is the span start.
    """

    if isinstance(op, Insert):
        return position + delta if position >= op.pos else position
    if isinstance(op, Delete):
        if position >= op.end:
            return position - (op.end - op.start)
        return op.start if position >= op.start else position
    if isinstance(op, Replace):
        if position >= op.end:
            return position + delta
        return op.end + delta if position > op.start else position
    raise TypeError(f"Unsupported operation {op!r}")


class CursorBuffer(TextBuffer):
    """``TextBuffer`` that keeps a registry of cursors consistent with edits."""

    def __init__(
        self,
        *,
        name: str = "default",
        logger_name: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(name=name, logger_name=logger_name, **kwargs)
        self.registry = CursorRegistry(self, logger_name=logger_name)

    def add_cursor(self, pos: int = 0) -> int:
        return self.registry.add_cursor(pos)

    def cursor(self, cursor_id: int) -> Cursor:
        return self.registry.cursor(cursor_id)

    def delete_cursor(self, cursor_id: int) -> None:
        self.registry.delete_cursor(cursor_id)

    def cursors(self) -> Iterator[Cursor]:
        return self.registry.cursors()

    def _on_applied(self, op: Operation, delta: int) -> None:
        self.registry.reposition(op, delta)

    def _cursor_positions(self) -> Dict[int, int]:
        return {cursor.id: cursor.position for cursor in self.registry}
