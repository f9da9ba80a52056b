"""Draggable field-kind tokens."""
from __future__ import annotations

import logging
from typing import Dict, Optional

from PyQt6.QtCore import QMimeData, QPoint, Qt
from PyQt6.QtGui import QDrag
from PyQt6.QtWidgets import QApplication, QFrame, QLabel, QVBoxLayout, QWidget

from field_client.interaction_surface import FIELD_KIND_MIME
from field_engine.field_kinds import FIELD_KIND_INFO, FieldKind
from field_engine.interaction import InteractionController

_CLIENT_LOGGER = logging.getLogger("FieldPlacer.Client")


def build_token_mime(kind: FieldKind) -> QMimeData:
    mime = QMimeData()
    mime.setData(FIELD_KIND_MIME, kind.value.encode("utf-8"))
    mime.setText(FIELD_KIND_INFO[kind].label)
    return mime


class FieldToken(QLabel):
    """One palette entry; dragging it onto the surface creates a field."""

    def __init__(self, kind: FieldKind, controller: InteractionController, parent: Optional[QWidget] = None) -> None:
        info = FIELD_KIND_INFO[kind]
        super().__init__(info.label, parent)
        self._kind = kind
        self._controller = controller
        self._press_pos: Optional[QPoint] = None
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setCursor(Qt.CursorShape.OpenHandCursor)
        self.setStyleSheet(
            f"QLabel {{ border: 2px solid {info.color}; border-radius: 4px; padding: 6px; color: {info.color}; }}"
        )
        self.setToolTip(f"Drag onto the page to add a {info.label} field")

    @property
    def kind(self) -> FieldKind:
        return self._kind

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self._press_pos = event.position().toPoint()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if self._press_pos is None or not (event.buttons() & Qt.MouseButton.LeftButton):
            super().mouseMoveEvent(event)
            return
        travelled = (event.position().toPoint() - self._press_pos).manhattanLength()
        if travelled < QApplication.startDragDistance():
            return
        self._press_pos = None
        self._start_drag()

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        self._press_pos = None
        super().mouseReleaseEvent(event)

    def _start_drag(self) -> None:
        if not self._controller.begin_create(self._kind):
            return
        drag = QDrag(self)
        drag.setMimeData(build_token_mime(self._kind))
        drag.setPixmap(self.grab())
        try:
            result = drag.exec(Qt.DropAction.CopyAction)
            _CLIENT_LOGGER.debug("Drag of %s token finished with %s", self._kind.value, result)
        finally:
            # Released off-surface: the create gesture is still pending.
            self._controller.cancel_create()


class FieldPalette(QWidget):
    def __init__(self, controller: InteractionController, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)
        header = QLabel("Field Types", self)
        header.setStyleSheet("font-weight: bold;")
        layout.addWidget(header)
        self._tokens: Dict[FieldKind, FieldToken] = {}
        for kind in FieldKind:
            token = FieldToken(kind, controller, self)
            layout.addWidget(token)
            self._tokens[kind] = token
        layout.addStretch(1)

    def token(self, kind: FieldKind) -> FieldToken:
        return self._tokens[kind]
