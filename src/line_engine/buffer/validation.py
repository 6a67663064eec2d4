"""Validation helpers shared across buffer services."""

from __future__ import annotations

from typing import Tuple

from .errors import InvalidPosition
from .text import GraphemeText


def ensure_pos_valid(text: GraphemeText, pos: object, *, allow_end: bool = True) -> int:
    if pos is None:
        raise InvalidPosition("position is missing", position=pos)
    if isinstance(pos, bool) or not isinstance(pos, int):
        raise InvalidPosition("position must be an integer", position=pos)
    if pos < 0:
        raise InvalidPosition("position is negative", position=pos)
    limit = len(text) + (1 if allow_end else 0)
    if pos >= limit:
        raise InvalidPosition(
            f"position is past the end of the buffer (length {len(text)})",
            position=pos,
        )
    return pos


def ensure_range_valid(text: GraphemeText, start: object, end: object) -> Tuple[int, int]:
    start_pos = ensure_pos_valid(text, start)
    end_pos = ensure_pos_valid(text, end)
    if start_pos > end_pos:
        raise InvalidPosition(f"start is after end ({end_pos})", position=start_pos)
    return start_pos, end_pos
