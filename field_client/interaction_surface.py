"""Mouse and drag-and-drop routing from the Qt surface into the interaction controller."""
from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from PyQt6.QtCore import Qt

from field_engine.field_kinds import FieldKind, parse_kind
from field_engine.geometry import Point
from field_engine.interaction import FieldPart, GestureKind, MoveCallback, ReleaseCallback

LOGGER = logging.getLogger("FieldPlacer.Client")

FIELD_KIND_MIME = "application/x-field-placer-kind"

_PART_CURSORS = {
    FieldPart.BODY: Qt.CursorShape.SizeAllCursor,
    FieldPart.HANDLE: Qt.CursorShape.SizeFDiagCursor,
    FieldPart.DELETE: Qt.CursorShape.PointingHandCursor,
}


def cursor_for_part(part: Optional[FieldPart]) -> Qt.CursorShape:
    if part is None:
        return Qt.CursorShape.ArrowCursor
    return _PART_CURSORS.get(part, Qt.CursorShape.ArrowCursor)


def event_point(event) -> Point:
    pos = event.position()
    return Point(float(pos.x()), float(pos.y()))


def kind_from_mime(mime) -> Optional[FieldKind]:
    if mime is None or not mime.hasFormat(FIELD_KIND_MIME):
        return None
    raw = mime.data(FIELD_KIND_MIME).data().decode("utf-8", errors="ignore")
    return parse_kind(raw)


class InteractionSurfaceMixin:
    """Routes pointer input into ``self._editor.controller``.

    Also serves as the controller's pointer capture: while a move or resize
    gesture is active, every mouse move and the final release are forwarded to
    the registered callbacks. Qt keeps delivering those events to the pressed
    widget even when the pointer leaves it.
    """

    _capture_callbacks: Optional[Tuple[MoveCallback, ReleaseCallback]] = None

    # Pointer capture ------------------------------------------------------

    def capture(self, on_move: MoveCallback, on_release: ReleaseCallback) -> Callable[[], None]:
        self._capture_callbacks = (on_move, on_release)

        def _release() -> None:
            self._capture_callbacks = None

        return _release

    @property
    def capturing(self) -> bool:
        return self._capture_callbacks is not None

    def _abort_pointer_capture(self) -> None:
        """Commit the active gesture when the surface stops receiving input."""

        callbacks = self._capture_callbacks
        if callbacks is None:
            return
        LOGGER.debug("Pointer capture lost; committing active gesture")
        callbacks[1](None)

    # Mouse events ---------------------------------------------------------

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        part = self._editor.controller.press(event_point(event))
        if part is None:
            super().mousePressEvent(event)
            return
        event.accept()
        self.update()

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        callbacks = self._capture_callbacks
        if callbacks is not None:
            callbacks[0](event_point(event))
            event.accept()
            return
        hit = self._editor.controller.hit_test(event_point(event))
        self.setCursor(cursor_for_part(hit[1] if hit is not None else None))
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        callbacks = self._capture_callbacks
        if callbacks is not None and event.button() == Qt.MouseButton.LeftButton:
            callbacks[1](event_point(event))
            event.accept()
            self.update()
            return
        super().mouseReleaseEvent(event)

    # Drag and drop --------------------------------------------------------

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if self._editor.is_loaded and kind_from_mime(event.mimeData()) is not None:
            event.acceptProposedAction()
            return
        event.ignore()

    def dragMoveEvent(self, event) -> None:  # type: ignore[override]
        if self._editor.is_loaded and kind_from_mime(event.mimeData()) is not None:
            event.acceptProposedAction()
            return
        event.ignore()

    def dropEvent(self, event) -> None:  # type: ignore[override]
        kind = kind_from_mime(event.mimeData())
        if kind is None:
            event.ignore()
            return
        controller = self._editor.controller
        if controller.state is not GestureKind.CREATING:
            # Tokens dragged in from another window never passed through begin_create.
            controller.begin_create(kind)
        created = controller.drop(event_point(event))
        if created is None:
            event.ignore()
            return
        event.acceptProposedAction()
        self.update()
