"""Buffer, undo/redo and cursor primitives."""

from .buffer import BufferView, TextBuffer, Transaction, synthesize_record
from .cursor import Cursor, CursorBuffer, CursorRegistry, shifted_position
from .errors import EditError, InvalidCursor, InvalidPosition
from .operations import (
    Delete,
    Insert,
    Operation,
    Replace,
    UndoRedoRecord,
    apply_operation,
)
from .text import GraphemeText
from .undo import UndoHistory
from .validation import ensure_pos_valid, ensure_range_valid

__all__ = [
    "GraphemeText",
    "Insert",
    "Delete",
    "Replace",
    "Operation",
    "UndoRedoRecord",
    "apply_operation",
    "UndoHistory",
    "TextBuffer",
    "BufferView",
    "Transaction",
    "synthesize_record",
    "Cursor",
    "CursorRegistry",
    "CursorBuffer",
    "shifted_position",
    "EditError",
    "InvalidPosition",
    "InvalidCursor",
    "ensure_pos_valid",
    "ensure_range_valid",
]
