"""Contract violations raised by buffers and cursor registries."""

from __future__ import annotations


class EditError(RuntimeError):
    """Base class for rejected edit requests. The buffer is left untouched."""

    def __init__(self, message: str, *, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class InvalidPosition(EditError):
    """Raised when a position is missing, not an integer, or out of range."""

    def __init__(self, reason: str, *, position: object = None) -> None:
        super().__init__(f"Invalid position {position!r}: {reason}", reason=reason)
        self.position = position


class InvalidCursor(EditError):
    """Raised when a cursor id is not registered with the buffer."""

    def __init__(self, reason: str, *, cursor_id: object = None) -> None:
        super().__init__(f"Invalid cursor {cursor_id!r}: {reason}", reason=reason)
        self.cursor_id = cursor_id


__all__ = ["EditError", "InvalidPosition", "InvalidCursor"]
