"""Grapheme-aware single-line editing buffer with undo/redo and cursors."""

__all__ = [
    "buffer",
    "runtime",
]

__version__ = "0.1.0"
