"""Placement surface widget: page raster, fields and pointer handling."""
from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QSize, pyqtSignal
from PyQt6.QtGui import QImage, QPainter
from PyQt6.QtWidgets import QSizePolicy, QWidget

from field_client.interaction_surface import InteractionSurfaceMixin
from field_client.page_rasterizer import RasterizedPage, to_qimage
from field_client.render_surface import RenderSurfaceMixin
from field_engine.editor import FieldEditor
from field_engine.session import EngineLimits

_CLIENT_LOGGER = logging.getLogger("FieldPlacer.Client")

_PLACEHOLDER_HEIGHT = 480


class FieldSurface(InteractionSurfaceMixin, RenderSurfaceMixin, QWidget):
    fields_changed = pyqtSignal()
    scale_changed = pyqtSignal(float)

    def __init__(self, limits: Optional[EngineLimits] = None, parent: Optional[QWidget] = None) -> None:
        QWidget.__init__(self, parent)
        self._capture_callbacks = None
        self._page_image: Optional[QImage] = None
        self._editor = FieldEditor(self, limits=limits, on_change=self._handle_engine_change)
        self.setAcceptDrops(True)
        self.setMouseTracking(True)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self.setMinimumHeight(_PLACEHOLDER_HEIGHT)

    @property
    def editor(self) -> FieldEditor:
        return self._editor

    def load_page(self, page: RasterizedPage) -> float:
        self._abort_pointer_capture()
        self._page_image = to_qimage(page)
        scale = self._editor.load_page(page.geometry, float(self.width()))
        self._sync_height()
        self.scale_changed.emit(self._editor.scale)
        self._handle_engine_change()
        return scale

    def sizeHint(self) -> QSize:  # type: ignore[override]
        if not self._editor.is_loaded:
            return QSize(640, _PLACEHOLDER_HEIGHT)
        surface = self._editor.context.surface_size
        return QSize(int(round(surface.width)), int(round(surface.height)))

    # Qt events ------------------------------------------------------------

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        try:
            self._paint_surface(painter)
        finally:
            painter.end()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        if self._editor.container_resized(float(event.size().width())):
            self._sync_height()
            self.scale_changed.emit(self._editor.scale)
            self.update()

    def hideEvent(self, event) -> None:  # type: ignore[override]
        self._abort_pointer_capture()
        super().hideEvent(event)

    # Internal helpers ----------------------------------------------------

    def _sync_height(self) -> None:
        if not self._editor.is_loaded:
            return
        displayed = self._editor.context.displayed_size()
        height = max(1, int(round(displayed.height)))
        if height != self.height():
            self.setFixedHeight(height)

    def _handle_engine_change(self) -> None:
        self.fields_changed.emit()
        self.update()
