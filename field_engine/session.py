"""Per-document session state shared by the store, controller and synchronizer."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from field_engine.geometry import Size
from field_engine.transform import displayed_size

LOGGER = logging.getLogger("FieldPlacer.Engine")


@dataclass(frozen=True)
class PageGeometry:
    """Page 1 sizes reported by the rasterizer.

    ``page_size`` is in document points; ``surface_size`` is the pixel size of
    the rasterized surface at the renderer's scale.
    """

    page_size: Size
    surface_size: Size


@dataclass(frozen=True)
class EngineLimits:
    default_size: Size = field(default_factory=lambda: Size(150.0, 50.0))
    minimum_size: Size = field(default_factory=lambda: Size(50.0, 30.0))
    handle_size: float = 12.0


@dataclass
class SessionContext:
    """Mutable UI state for one document session.

    Owned by the controlling layer and handed to the Field Store and the
    Viewport Synchronizer instead of living in module globals.
    """

    limits: EngineLimits = field(default_factory=EngineLimits)
    page: Optional[PageGeometry] = None
    scale: float = 1.0
    selected_id: Optional[str] = None

    @property
    def is_loaded(self) -> bool:
        return self.page is not None

    @property
    def page_size(self) -> Optional[Size]:
        return self.page.page_size if self.page is not None else None

    @property
    def surface_size(self) -> Optional[Size]:
        return self.page.surface_size if self.page is not None else None

    def displayed_size(self) -> Size:
        return displayed_size(self.surface_size, self.scale)

    def replace_page(self, page: Optional[PageGeometry]) -> None:
        self.page = page
        self.selected_id = None
        if page is None:
            LOGGER.debug("Session page cleared")
            return
        LOGGER.info(
            "Session page loaded: page=%.2fx%.2fpt surface=%.1fx%.1fpx",
            page.page_size.width,
            page.page_size.height,
            page.surface_size.width,
            page.surface_size.height,
        )

    def select(self, field_id: Optional[str]) -> None:
        self.selected_id = field_id

    def clear_selection_if(self, field_id: str) -> bool:
        if self.selected_id != field_id:
            return False
        self.selected_id = None
        return True
