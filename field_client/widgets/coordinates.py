"""Coordinate information panel for the selected field."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from PyQt6.QtGui import QFontDatabase
from PyQt6.QtWidgets import QGroupBox, QHBoxLayout, QLabel, QPlainTextEdit, QVBoxLayout, QWidget

from field_engine.field_store import Field


def screen_summary(field: Field) -> Dict[str, int]:
    rect = field.screen_rect
    return {
        "x": int(round(rect.x)),
        "y": int(round(rect.y)),
        "width": int(round(rect.width)),
        "height": int(round(rect.height)),
    }


def document_summary(field: Field) -> Dict[str, Any]:
    return field.document_rect.as_dict()


class CoordinatePanel(QGroupBox):
    """Shows screen (top-left origin) and document (bottom-left, 72 DPI) rectangles."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__("Coordinate Information", parent)
        fixed = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
        self._screen_view = QPlainTextEdit(self)
        self._document_view = QPlainTextEdit(self)
        for view in (self._screen_view, self._document_view):
            view.setReadOnly(True)
            view.setFont(fixed)
            view.setMaximumHeight(130)

        layout = QHBoxLayout(self)
        layout.addLayout(self._column("Screen Coordinates (Top-Left)", self._screen_view))
        layout.addLayout(self._column("PDF Coordinates (Bottom-Left, 72 DPI)", self._document_view))
        self.show_field(None)

    def _column(self, title: str, view: QPlainTextEdit) -> QVBoxLayout:
        column = QVBoxLayout()
        column.addWidget(QLabel(title, self))
        column.addWidget(view)
        return column

    def show_field(self, field: Optional[Field]) -> None:
        if field is None:
            self._screen_view.setPlainText("")
            self._document_view.setPlainText("")
            self.setVisible(False)
            return
        self._screen_view.setPlainText(json.dumps(screen_summary(field), indent=2))
        self._document_view.setPlainText(json.dumps(document_summary(field), indent=2))
        self.setVisible(True)
