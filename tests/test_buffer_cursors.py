from __future__ import annotations

import gc
import threading

import pytest

from line_engine.buffer import (
    CursorBuffer,
    Delete,
    Insert,
    InvalidCursor,
    InvalidPosition,
    Replace,
    UndoHistory,
    shifted_position,
)


def make_buffer(text: str = "") -> CursorBuffer:
    buffer = CursorBuffer(name="cursors")
    if text:
        buffer.insert(0, text)
        buffer.history = UndoHistory()
    return buffer


def positions(buffer: CursorBuffer, *cursor_ids: int) -> list[int]:
    return [buffer.cursor(cursor_id).position for cursor_id in cursor_ids]


def test_cursor_follows_insert_and_delete() -> None:
    buffer = make_buffer("abc")
    cursor_id = buffer.add_cursor(3)

    buffer.insert(0, "X")
    assert buffer.text == "Xabc"
    assert buffer.cursor(cursor_id).position == 4

    buffer.delete(0, 1)
    assert buffer.text == "abc"
    assert buffer.cursor(cursor_id).position == 3


def test_cursor_before_insert_point_stays() -> None:
    buffer = make_buffer("abcd")
    before, at, after = (buffer.add_cursor(p) for p in (1, 2, 3))

    buffer.insert(2, "XY")

    assert buffer.text == "abXYcd"
    assert positions(buffer, before, at, after) == [1, 4, 5]


def test_delete_collapses_cursors_inside_span() -> None:
    buffer = make_buffer("abcdef")
    ids = [buffer.add_cursor(p) for p in (1, 2, 3, 4, 6)]

    buffer.delete(2, 4)

    assert buffer.text == "abef"
    assert positions(buffer, *ids) == [1, 2, 2, 2, 4]


def test_replace_moves_inside_cursors_to_end_of_replacement() -> None:
    buffer = make_buffer("abcdef")
    ids = [buffer.add_cursor(p) for p in (2, 3, 5, 6)]

    buffer.replace(2, 5, "XY")

    assert buffer.text == "abXYf"
    assert positions(buffer, *ids) == [2, 4, 4, 5]


def test_undo_and_redo_reposition_cursors() -> None:
    buffer = make_buffer("abc")
    cursor_id = buffer.add_cursor(3)

    buffer.insert(0, "XX")
    assert buffer.cursor(cursor_id).position == 5
    buffer.undo()
    assert buffer.cursor(cursor_id).position == 3
    buffer.redo()
    assert buffer.cursor(cursor_id).position == 5


def test_cursor_after_combining_mark_keeps_cluster_offset() -> None:
    buffer = make_buffer("cafe")
    start_id = buffer.add_cursor(0)
    end_id = buffer.add_cursor(4)

    buffer.insert(4, "\u0301")

    assert len(buffer) == 4
    assert positions(buffer, start_id, end_id) == [0, 4]
    buffer.undo()
    assert positions(buffer, start_id, end_id) == [0, 4]


def test_shifted_position_rules() -> None:
    assert shifted_position(3, Insert(1, "ab"), 2) == 5
    assert shifted_position(0, Insert(1, "ab"), 2) == 0
    assert shifted_position(5, Delete(1, 3), -2) == 3
    assert shifted_position(2, Delete(1, 3), -2) == 1
    assert shifted_position(1, Replace(1, 3, "x"), -1) == 1
    assert shifted_position(2, Replace(1, 3, "x"), -1) == 2
    assert shifted_position(3, Replace(1, 3, "x"), -1) == 2
    with pytest.raises(TypeError):
        shifted_position(0, object(), 0)  # type: ignore[arg-type]


def test_cursor_moves_are_clipped() -> None:
    buffer = make_buffer("hello")
    cursor = buffer.cursor(buffer.add_cursor())

    assert cursor.position == 0
    assert cursor.move_to(10) == 5
    assert cursor.at_end()
    assert cursor.move_rel(-2) == 3
    assert cursor.move_rel(-10) == 0
    assert cursor.move_to(-3) == 0
    assert cursor.end() == 5
    assert not cursor.at_end()


def test_add_cursor_validates_position() -> None:
    buffer = make_buffer("abc")

    with pytest.raises(InvalidPosition):
        buffer.add_cursor(4)
    with pytest.raises(InvalidPosition):
        buffer.add_cursor(-1)
    assert len(buffer.registry) == 0


def test_unknown_cursor_ids_raise() -> None:
    buffer = make_buffer("abc")
    cursor_id = buffer.add_cursor(1)

    buffer.delete_cursor(cursor_id)

    assert cursor_id not in buffer.registry
    with pytest.raises(InvalidCursor) as excinfo:
        buffer.cursor(cursor_id)
    assert excinfo.value.cursor_id == cursor_id
    with pytest.raises(InvalidCursor):
        buffer.delete_cursor(cursor_id)


def test_cursor_ids_are_never_reused() -> None:
    buffer = make_buffer()
    first = buffer.add_cursor()
    buffer.delete_cursor(first)

    second = buffer.add_cursor()

    assert first == 1
    assert second == 2
    assert [cursor.id for cursor in buffer.cursors()] == [2]


def test_cursor_ids_are_scoped_per_buffer() -> None:
    left = make_buffer()
    right = make_buffer()

    assert left.add_cursor() == 1
    assert right.add_cursor() == 1


def test_concurrent_id_allocation_is_unique() -> None:
    registry = make_buffer().registry
    allocated: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        ids = [registry.next_id() for _ in range(500)]
        with lock:
            allocated.extend(ids)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(allocated) == 4000
    assert len(set(allocated)) == 4000


def test_snapshot_reports_cursor_positions() -> None:
    buffer = make_buffer("abc")
    first = buffer.add_cursor(1)
    second = buffer.add_cursor(3)

    view = buffer.snapshot()

    assert view.cursors == {first: 1, second: 3}


def test_cursor_does_not_keep_buffer_alive() -> None:
    buffer = make_buffer("abc")
    cursor = buffer.cursor(buffer.add_cursor(2))

    del buffer
    gc.collect()

    with pytest.raises(InvalidCursor):
        cursor.end()
