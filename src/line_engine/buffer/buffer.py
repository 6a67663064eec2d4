"""Single-line text buffer with grapheme-aware undo/redo records."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, ContextManager, Dict, Optional, Sequence, Tuple

from line_engine.runtime import telemetry

from .operations import (
    Delete,
    Insert,
    Operation,
    Replace,
    UndoRedoRecord,
    apply_operation,
    describe,
)
from .text import GraphemeText
from .undo import UndoHistory
from .validation import ensure_pos_valid, ensure_range_valid


@dataclass(slots=True)
class BufferView:
    text: str
    length: int
    undo_depth: int
    redo_depth: int
    cursors: Dict[int, int] = field(default_factory=dict)


class TextBuffer:
    """Owns the text of one line and its undo/redo history.

    Every edit command validates its positions, synthesizes an
    ``UndoRedoRecord``, applies the redo half and pushes the record onto the
    undo stack. Positions are grapheme-cluster offsets.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        history: Optional[UndoHistory] = None,
        logger_name: Optional[str] = None,
    ) -> None:
        self.name = name
        self.history = history or UndoHistory()
        self._text = GraphemeText()
        self._logger_name = logger_name

    def contents(self) -> Tuple[str, ...]:
        return self._text.clusters

    @property
    def text(self) -> str:
        return str(self._text)

    def __len__(self) -> int:
        return len(self._text)

    def ensure_pos_valid(self, pos: object, *, allow_end: bool = True) -> int:
        return ensure_pos_valid(self._text, pos, allow_end=allow_end)

    def get_text_range(self, start: int, end: int) -> str:
        start, end = ensure_range_valid(self._text, start, end)
        return self._text.slice(start, end)

    def snapshot(self) -> BufferView:
        return BufferView(
            text=self.text,
            length=len(self._text),
            undo_depth=self.history.undo_depth,
            redo_depth=self.history.redo_depth,
            cursors=self._cursor_positions(),
        )

    def insert(self, pos: int, content: str) -> UndoRedoRecord:
        with Transaction(self, "insert", metadata={"pos": pos}) as tx:
            pos = ensure_pos_valid(self._text, pos)
            return tx.commit(synthesize_record(self._text, pos, pos, content))

    def delete(self, start: int, end: int) -> UndoRedoRecord:
        with Transaction(self, "delete", metadata={"start": start, "end": end}) as tx:
            start, end = ensure_range_valid(self._text, start, end)
            return tx.commit(synthesize_record(self._text, start, end, ""))

    def replace(self, start: int, end: int, content: str) -> UndoRedoRecord:
        with Transaction(self, "replace", metadata={"start": start, "end": end}) as tx:
            start, end = ensure_range_valid(self._text, start, end)
            return tx.commit(synthesize_record(self._text, start, end, content))

    def undo(self) -> Optional[UndoRedoRecord]:
        record = self.history.pop_undo()
        if record is None:
            self._idle("undo")
            return None
        with self._span("undo", describe(record.undo)):
            self.do_undo_record(record)
        return record

    def redo(self) -> Optional[UndoRedoRecord]:
        record = self.history.pop_redo()
        if record is None:
            self._idle("redo")
            return None
        with self._span("redo", describe(record.redo)):
            self.do_redo_record(record)
        return record

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def do_redo_record(self, record: UndoRedoRecord) -> None:
        self._apply(record.redo)
        self.history.push_undo(record)

    def do_undo_record(self, record: UndoRedoRecord) -> None:
        self._apply(record.undo)
        self.history.push_redo(record)

    def _apply(self, op: Operation) -> None:
        before = len(self._text)
        self._text = apply_operation(self._text, op)
        self._on_applied(op, len(self._text) - before)

    def _on_applied(self, op: Operation, delta: int) -> None:
        """Hook run after ``op`` changed the length by ``delta`` clusters."""

    def _cursor_positions(self) -> Dict[int, int]:
        return {}

    def _span(
        self, label: str, metadata: Dict[str, Any]
    ) -> ContextManager[telemetry.SpanHandle]:
        return telemetry.span(
            f"buffer::{label}",
            logger_name=self._logger_name,
            component="buffer",
            metadata={"buffer": self.name, **metadata},
        )

    def _idle(self, label: str) -> None:
        telemetry.record_event(
            f"buffer::{label}_idle",
            level="debug",
            data={"buffer": self.name},
            logger_name=self._logger_name,
        )


class Transaction(AbstractContextManager["Transaction"]):
    """Wraps one edit command in a telemetry span and commits its record."""

    def __init__(
        self,
        buffer: TextBuffer,
        label: str,
        *,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.buffer = buffer
        self.label = label
        self.metadata = dict(metadata or {})
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._handle: Optional[telemetry.SpanHandle] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = self.buffer._span(self.label, self.metadata)
        self._handle = self._span_cm.__enter__()
        return self

    def commit(self, record: UndoRedoRecord) -> UndoRedoRecord:
        self.buffer.history.new_redo_branch()
        self.buffer.do_redo_record(record)
        if self._handle is not None:
            self._handle.add_metadata("redo", record.redo.kind)
            self._handle.add_metadata("length", len(self.buffer))
        return record

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


def synthesize_record(
    text: GraphemeText, start: int, end: int, content: str
) -> UndoRedoRecord:
    """Build the record replacing ``[start, end)`` of ``text`` with ``content``.

    Inserting after an existing cluster rewrites that cluster too, because the
    new material may fuse with it; the record then becomes a ``Replace`` over
    ``[pos - 1, pos)`` so undo restores the original cluster intact. Any
    further fusion with neighbouring clusters widens the span until the
    clusters around it are unchanged by the edit.
    """

    scratch = text.splice(start, end, content)
    combined = text.cluster_before(start) if start == end else ""
    lead = start - 1 if combined else start
    lead = min(lead, _common_prefix(text.clusters, scratch.clusters))
    tail = _common_suffix(text.clusters[end:], scratch.clusters[lead:])
    redo_end = len(text) - tail
    undo_end = len(scratch) - tail

    if lead == start and redo_end == end:
        if not content and undo_end == start:
            return UndoRedoRecord(
                undo=Insert(start, text.slice(start, end)),
                redo=Delete(start, end),
            )
        if start == end:
            return UndoRedoRecord(
                undo=Delete(start, undo_end),
                redo=Insert(start, content),
            )

    return UndoRedoRecord(
        undo=Replace(lead, undo_end, text.slice(lead, redo_end)),
        redo=Replace(lead, redo_end, scratch.slice(lead, undo_end)),
    )


def _common_prefix(left: Sequence[str], right: Sequence[str]) -> int:
    count = 0
    for a, b in zip(left, right):
        if a != b:
            break
        count += 1
    return count


def _common_suffix(left: Sequence[str], right: Sequence[str]) -> int:
    count = 0
    for a, b in zip(reversed(left), reversed(right)):
        if a != b:
            break
        count += 1
    return count
