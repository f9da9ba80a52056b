"""Keeps the session scale current and re-projects fields on rescale."""
from __future__ import annotations

import logging
import math
from typing import Optional

from field_engine.field_store import FieldStore
from field_engine.session import PageGeometry, SessionContext
from field_engine.transform import to_screen

LOGGER = logging.getLogger("FieldPlacer.Engine")


def compute_scale(container_width: float, surface_width: float) -> Optional[float]:
    """Return ``container_width / surface_width`` or None for degenerate input."""

    try:
        container = float(container_width)
        surface = float(surface_width)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(container) and math.isfinite(surface)):
        return None
    if container <= 0.0 or surface <= 0.0:
        return None
    return container / surface


class ViewportSynchronizer:
    """The only component allowed to rewrite ``screen_rect`` without a gesture."""

    def __init__(self, context: SessionContext, store: FieldStore) -> None:
        self._context = context
        self._store = store
        self._container_width: Optional[float] = None

    @property
    def container_width(self) -> Optional[float]:
        return self._container_width

    def page_loaded(self, page: PageGeometry, container_width: float) -> float:
        """Adopt a new page surface and derive the initial scale."""

        self._context.replace_page(page)
        self._apply_width(container_width, force=True)
        return self._context.scale

    def container_resized(self, container_width: float) -> bool:
        """Recompute scale after a container resize; True when it changed."""

        return self._apply_width(container_width, force=False)

    def resync(self) -> None:
        """Re-derive every field's screen rectangle from its document rectangle."""

        ctx = self._context
        if not ctx.is_loaded:
            return
        for item in self._store.all():
            screen_rect = to_screen(item.document_rect, ctx.scale, ctx.page_size, ctx.surface_size)
            self._store._replace_screen_rect(item.id, screen_rect)

    def _apply_width(self, container_width: float, *, force: bool) -> bool:
        ctx = self._context
        if not ctx.is_loaded:
            LOGGER.debug("Container resize to %s ignored: no document loaded", container_width)
            return False
        scale = compute_scale(container_width, ctx.surface_size.width)
        if scale is None:
            LOGGER.debug("Ignoring degenerate container width %r", container_width)
            return False
        self._container_width = float(container_width)
        changed = scale != ctx.scale
        ctx.scale = scale
        if changed or force:
            LOGGER.debug(
                "Viewport scale %.4f (container=%.1fpx surface=%.1fpx)",
                scale,
                self._container_width,
                ctx.surface_size.width,
            )
            self.resync()
        return changed
