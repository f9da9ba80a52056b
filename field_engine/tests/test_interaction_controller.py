from __future__ import annotations

import math
from typing import Callable, List, Optional

from field_engine.editor import FieldEditor
from field_engine.field_kinds import FieldKind
from field_engine.geometry import Point, Rect, Size
from field_engine.interaction import FieldPart, GestureKind, control_size, delete_rect, handle_rect
from field_engine.session import PageGeometry
from field_engine.transform import to_document, to_screen

A4_PAGE = PageGeometry(page_size=Size(595.0, 842.0), surface_size=Size(892.5, 1263.0))


class FakeCapture:
    """Records listener attach/detach and lets tests drive pointer events."""

    def __init__(self) -> None:
        self.log: List[str] = []
        self._on_move: Optional[Callable[[Point], None]] = None
        self._on_release: Optional[Callable[[Optional[Point]], None]] = None

    @property
    def attached(self) -> bool:
        return self._on_move is not None

    def capture(self, on_move, on_release):
        self.log.append("attach")
        self._on_move = on_move
        self._on_release = on_release

        def _release() -> None:
            self.log.append("detach")
            self._on_move = None
            self._on_release = None

        return _release

    def move(self, x: float, y: float) -> None:
        assert self._on_move is not None
        self._on_move(Point(x, y))

    def release(self, point: Optional[Point] = None) -> None:
        assert self._on_release is not None
        self._on_release(point)


def _editor(container_width: float = 892.5) -> tuple[FieldEditor, FakeCapture, List[int]]:
    capture = FakeCapture()
    changes: List[int] = []
    editor = FieldEditor(capture, on_change=lambda: changes.append(1))
    editor.load_page(A4_PAGE, container_width)
    return editor, capture, changes


def _drop(editor: FieldEditor, kind: FieldKind, x: float, y: float):
    assert editor.controller.begin_create(kind)
    return editor.controller.drop(Point(x, y))


def test_drop_creates_field_with_default_size() -> None:
    editor, _capture, changes = _editor()
    created = _drop(editor, FieldKind.SIGNATURE, 100.0, 100.0)

    assert created is not None
    assert created.screen_rect == Rect(100.0, 100.0, 150.0, 50.0)
    assert editor.controller.state is GestureKind.IDLE
    assert changes


def test_drop_outside_surface_or_off_surface_is_noop() -> None:
    editor, _capture, _changes = _editor(container_width=446.25)
    assert _drop(editor, FieldKind.TEXT, 500.0, 10.0) is None
    assert _drop(editor, FieldKind.TEXT, -1.0, 10.0) is None
    editor.controller.begin_create(FieldKind.TEXT)
    assert editor.controller.drop(None) is None
    assert len(editor.store) == 0
    assert editor.controller.is_idle


def test_drop_without_document_is_noop() -> None:
    editor = FieldEditor(FakeCapture())
    editor.controller.begin_create(FieldKind.DATE)
    assert editor.controller.drop(Point(10.0, 10.0)) is None
    assert len(editor.store) == 0


def test_drop_without_create_gesture_is_ignored() -> None:
    editor, _capture, _changes = _editor()
    assert editor.controller.drop(Point(10.0, 10.0)) is None


def test_cancel_create_returns_to_idle() -> None:
    editor, _capture, _changes = _editor()
    editor.controller.begin_create(FieldKind.RADIO)
    assert editor.controller.state is GestureKind.CREATING
    editor.controller.cancel_create()
    assert editor.controller.is_idle


def test_move_gesture_keeps_pointer_offset() -> None:
    editor, capture, _changes = _editor()
    created = _drop(editor, FieldKind.TEXT, 100.0, 100.0)

    assert editor.controller.press_field(created.id, Point(130.0, 110.0))
    assert editor.controller.state is GestureKind.MOVING
    assert editor.context.selected_id == created.id

    capture.move(230.0, 310.0)
    assert created.screen_rect == Rect(200.0, 300.0, 150.0, 50.0)
    capture.move(140.5, 120.25)
    assert created.screen_rect.origin == Point(110.5, 110.25)
    assert created.document_rect == to_document(
        created.screen_rect, editor.scale, A4_PAGE.page_size, A4_PAGE.surface_size
    )

    capture.release(Point(140.5, 120.25))
    assert editor.controller.is_idle
    assert capture.log == ["attach", "detach"]


def test_release_outside_surface_still_detaches_and_commits() -> None:
    editor, capture, _changes = _editor()
    created = _drop(editor, FieldKind.TEXT, 100.0, 100.0)
    editor.controller.press_field(created.id, Point(100.0, 100.0))
    capture.move(2000.0, -40.0)

    capture.release(None)

    assert not capture.attached
    assert not editor.controller.listening
    assert created.screen_rect.origin == Point(2000.0, -40.0)


def test_resize_gesture_uses_start_size_and_clamps() -> None:
    editor, capture, _changes = _editor()
    created = _drop(editor, FieldKind.IMAGE, 100.0, 100.0)

    assert editor.controller.press_handle(created.id, Point(245.0, 145.0))
    assert editor.controller.state is GestureKind.RESIZING
    capture.move(295.0, 175.0)
    assert created.screen_rect.size == Size(200.0, 80.0)
    capture.move(0.0, 0.0)
    assert created.screen_rect.size == Size(50.0, 30.0)
    assert created.screen_rect.origin == Point(100.0, 100.0)
    capture.release()
    assert capture.log == ["attach", "detach"]


def test_only_one_gesture_at_a_time() -> None:
    editor, capture, _changes = _editor()
    first = _drop(editor, FieldKind.TEXT, 10.0, 10.0)
    second = _drop(editor, FieldKind.DATE, 300.0, 300.0)

    assert editor.controller.press_field(first.id, Point(20.0, 20.0))
    assert editor.controller.press_handle(second.id, Point(440.0, 340.0)) is False
    assert editor.controller.begin_create(FieldKind.RADIO) is False
    assert editor.context.selected_id == first.id
    assert capture.log == ["attach"]
    capture.release()


def test_press_on_empty_space_keeps_selection() -> None:
    editor, capture, _changes = _editor()
    created = _drop(editor, FieldKind.TEXT, 10.0, 10.0)
    editor.controller.press_field(created.id, Point(20.0, 20.0))
    capture.release()

    assert editor.controller.press(Point(600.0, 600.0)) is None
    assert editor.context.selected_id == created.id


def test_hit_test_prefers_topmost_and_control_parts() -> None:
    editor, _capture, _changes = _editor()
    lower = _drop(editor, FieldKind.TEXT, 100.0, 100.0)
    upper = _drop(editor, FieldKind.DATE, 120.0, 110.0)
    size = editor.context.limits.handle_size
    editor.context.select(upper.id)

    assert editor.controller.hit_test(Point(130.0, 130.0)) == (upper.id, FieldPart.BODY)
    assert editor.controller.hit_test(Point(105.0, 105.0)) == (lower.id, FieldPart.BODY)
    corner = handle_rect(upper.screen_rect, size)
    assert editor.controller.hit_test(Point(corner.x + 1, corner.y + 1)) == (upper.id, FieldPart.HANDLE)
    control = delete_rect(upper.screen_rect, size)
    assert editor.controller.hit_test(Point(control.x + 1, control.y + 1)) == (upper.id, FieldPart.DELETE)
    assert editor.controller.hit_test(Point(800.0, 800.0)) is None
    lower_corner = delete_rect(lower.screen_rect, size)
    assert editor.controller.hit_test(Point(lower_corner.x + 1, lower.screen_rect.y + 1)) == (lower.id, FieldPart.BODY)


def test_press_dispatches_to_resize_and_delete() -> None:
    editor, capture, _changes = _editor()
    created = _drop(editor, FieldKind.TEXT, 100.0, 100.0)
    editor.context.select(created.id)
    corner = handle_rect(created.screen_rect, editor.context.limits.handle_size)

    assert editor.controller.press(Point(corner.x + 2, corner.y + 2)) is FieldPart.HANDLE
    assert editor.controller.state is GestureKind.RESIZING
    capture.release()

    control = delete_rect(created.screen_rect, editor.context.limits.handle_size)
    assert editor.controller.press(Point(control.x + 2, control.y + 2)) is FieldPart.DELETE
    assert created.id not in editor.store
    assert editor.context.selected_id is None


def test_delete_other_field_does_not_interrupt_gesture() -> None:
    editor, capture, _changes = _editor()
    moving = _drop(editor, FieldKind.TEXT, 10.0, 10.0)
    other = _drop(editor, FieldKind.DATE, 300.0, 300.0)
    editor.controller.press_field(moving.id, Point(10.0, 10.0))

    assert editor.controller.delete_field(other.id) is True

    assert editor.controller.state is GestureKind.MOVING
    capture.move(50.0, 60.0)
    assert moving.screen_rect.origin == Point(50.0, 60.0)
    assert editor.context.selected_id == moving.id
    capture.release()


def test_delete_field_under_gesture_ends_gesture_first() -> None:
    editor, capture, _changes = _editor()
    created = _drop(editor, FieldKind.TEXT, 10.0, 10.0)
    editor.controller.press_field(created.id, Point(10.0, 10.0))

    assert editor.controller.delete_field(created.id) is True

    assert editor.controller.is_idle
    assert capture.log == ["attach", "detach"]
    assert editor.context.selected_id is None


def test_loading_new_document_releases_gesture_and_fields() -> None:
    editor, capture, _changes = _editor()
    created = _drop(editor, FieldKind.TEXT, 10.0, 10.0)
    editor.controller.press_field(created.id, Point(10.0, 10.0))

    editor.load_page(A4_PAGE, 446.25)

    assert capture.log == ["attach", "detach"]
    assert len(editor.store) == 0
    assert editor.selected_field() is None
    assert editor.scale == 0.5


def test_long_drag_does_not_accumulate_rounding() -> None:
    editor, capture, _changes = _editor(container_width=613.7)
    created = _drop(editor, FieldKind.SIGNATURE, 100.0, 100.0)
    start_document = created.document_rect
    editor.controller.press_field(created.id, Point(100.0, 100.0))

    for step in range(1, 1001):
        capture.move(100.0 + step * 0.37, 100.0 + step * 0.13)
        projected = to_screen(created.document_rect, editor.scale, A4_PAGE.page_size, A4_PAGE.surface_size)
        assert math.isclose(projected.x, created.screen_rect.x, abs_tol=1.0)
        assert math.isclose(projected.y, created.screen_rect.y, abs_tol=1.0)
    for step in range(999, -1, -1):
        capture.move(100.0 + step * 0.37, 100.0 + step * 0.13)
    capture.release()

    assert created.document_rect == start_document


def test_gesture_on_missing_field_is_ignored() -> None:
    editor, capture, _changes = _editor()
    assert editor.controller.press_field("field-404", Point(0.0, 0.0)) is False
    assert editor.controller.press_handle("field-404", Point(0.0, 0.0)) is False
    assert capture.log == []


def test_corner_of_unselected_field_moves_instead_of_deleting() -> None:
    editor, capture, _changes = _editor()
    first = _drop(editor, FieldKind.TEXT, 100.0, 100.0)
    second = _drop(editor, FieldKind.DATE, 400.0, 400.0)
    editor.context.select(second.id)

    assert editor.controller.press(Point(245.0, 103.0)) is FieldPart.BODY
    assert first.id in editor.store
    assert editor.context.selected_id == first.id
    assert editor.controller.state is GestureKind.MOVING
    capture.release()

    assert editor.controller.press(Point(245.0, 145.0)) is FieldPart.HANDLE
    capture.release()


def test_controls_stay_disjoint_at_quarter_scale() -> None:
    editor, capture, _changes = _editor()
    created = _drop(editor, FieldKind.SIGNATURE, 100.0, 100.0)
    editor.context.select(created.id)
    editor.container_resized(892.5 * 0.25)

    rect = editor.store.get(created.id).screen_rect
    size = editor.context.limits.handle_size
    handle = handle_rect(rect, size)
    control = delete_rect(rect, size)

    assert math.isclose(control_size(rect, size), rect.height / 2.0)
    assert control.bottom <= handle.y + 1e-9
    centre = Point(handle.x + handle.width / 2.0, handle.y + handle.height / 2.0)
    assert editor.controller.hit_test(centre) == (created.id, FieldPart.HANDLE)
    assert editor.controller.press(centre) is FieldPart.HANDLE
    assert created.id in editor.store
    capture.release()

    top = Point(control.x + control.width / 2.0, control.y + control.height / 2.0)
    assert editor.controller.press(top) is FieldPart.DELETE
    assert created.id not in editor.store


def test_control_size_caps_at_half_the_field() -> None:
    assert control_size(Rect(0.0, 0.0, 150.0, 50.0), 12.0) == 12.0
    assert control_size(Rect(0.0, 0.0, 10.0, 50.0), 12.0) == 5.0
    assert control_size(Rect(0.0, 0.0, 0.0, 0.0), 12.0) == 0.0
