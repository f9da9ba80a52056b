"""Painting mixin for the field surface: page raster plus placed fields."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QImage, QPainter, QPen

from field_engine.field_kinds import kind_info
from field_engine.field_store import Field
from field_engine.geometry import Rect
from field_engine.interaction import delete_rect, handle_rect

_CLIENT_LOGGER = logging.getLogger("FieldPlacer.Client")

_FILL_ALPHA = 40
_SELECTED_FILL_ALPHA = 70
_BORDER_WIDTH = 1.5
_SELECTED_BORDER_WIDTH = 2.5
_PLACEHOLDER_COLOR = "#e5e7eb"


def to_qrectf(rect: Rect) -> QRectF:
    return QRectF(rect.x, rect.y, rect.width, rect.height)


def field_colors(field: Field, selected: bool) -> Tuple[QColor, QColor]:
    """Return ``(border, fill)`` colours for a field."""

    border = QColor(kind_info(field.kind).color)
    fill = QColor(border)
    fill.setAlpha(_SELECTED_FILL_ALPHA if selected else _FILL_ALPHA)
    return border, fill


def field_caption(field: Field) -> str:
    label = kind_info(field.kind).label
    if field.value:
        return f"{label}: {field.value}"
    return label


class RenderSurfaceMixin:
    """Draws the page image at the current viewport scale and the fields over it."""

    _page_image: Optional[QImage] = None

    def _paint_surface(self, painter: QPainter) -> None:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        editor = self._editor
        if not editor.is_loaded:
            self._paint_placeholder(painter)
            return
        displayed = editor.context.displayed_size()
        target = QRectF(0.0, 0.0, displayed.width, displayed.height)
        if self._page_image is not None:
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
            painter.drawImage(target, self._page_image)
        else:
            painter.fillRect(target, QColor("white"))

        selected_id = editor.context.selected_id
        for item in editor.store:
            self._paint_field(painter, item, item.id == selected_id)

    def _paint_placeholder(self, painter: QPainter) -> None:
        painter.fillRect(QRectF(self.rect()), QColor(_PLACEHOLDER_COLOR))
        painter.setPen(QColor("#6b7280"))
        painter.drawText(QRectF(self.rect()), Qt.AlignmentFlag.AlignCenter, "Upload a PDF to start placing fields")

    def _paint_field(self, painter: QPainter, item: Field, selected: bool) -> None:
        border, fill = field_colors(item, selected)
        body = to_qrectf(item.screen_rect)
        painter.save()
        try:
            pen = QPen(border)
            pen.setWidthF(_SELECTED_BORDER_WIDTH if selected else _BORDER_WIDTH)
            if not selected:
                pen.setStyle(Qt.PenStyle.DashLine)
            painter.setPen(pen)
            painter.setBrush(QBrush(fill))
            painter.drawRect(body)

            font = QFont(painter.font())
            font.setPointSizeF(9.0)
            painter.setFont(font)
            painter.setPen(border.darker(140))
            painter.drawText(body.adjusted(4, 2, -4, -2), Qt.AlignmentFlag.AlignCenter, field_caption(item))

            if selected:
                handle_size = self._editor.context.limits.handle_size
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(QBrush(border))
                painter.drawRect(to_qrectf(handle_rect(item.screen_rect, handle_size)))
                close = to_qrectf(delete_rect(item.screen_rect, handle_size))
                painter.setBrush(QBrush(QColor("#ef4444")))
                painter.drawEllipse(close)
                painter.setPen(QColor("white"))
                painter.drawText(close, Qt.AlignmentFlag.AlignCenter, "×")
        finally:
            painter.restore()
