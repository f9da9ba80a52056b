"""Wires the engine components for one document session."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from field_engine.field_store import Field, FieldStore, IdFactory
from field_engine.interaction import InteractionController, PointerCapture
from field_engine.session import EngineLimits, PageGeometry, SessionContext
from field_engine.viewport import ViewportSynchronizer

LOGGER = logging.getLogger("FieldPlacer.Engine")


class FieldEditor:
    """Owns the session context and hands it to store, controller and synchronizer."""

    def __init__(
        self,
        capture: PointerCapture,
        *,
        limits: Optional[EngineLimits] = None,
        on_change: Optional[Callable[[], None]] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self.context = SessionContext(limits=limits or EngineLimits())
        self.store = FieldStore(self.context, id_factory=id_factory)
        self.viewport = ViewportSynchronizer(self.context, self.store)
        self.controller = InteractionController(self.context, self.store, capture, on_change=on_change)

    @property
    def is_loaded(self) -> bool:
        return self.context.is_loaded

    @property
    def scale(self) -> float:
        return self.context.scale

    def selected_field(self) -> Optional[Field]:
        selected = self.context.selected_id
        return self.store.get(selected) if selected is not None else None

    def load_page(self, page: PageGeometry, container_width: float) -> float:
        """Start a new document session; fields of the previous one are dropped."""

        self.controller.end_gesture()
        dropped = len(self.store)
        self.store.clear()
        scale = self.viewport.page_loaded(page, container_width)
        if dropped:
            LOGGER.info("Discarded %d fields from the previous document", dropped)
        return scale

    def container_resized(self, container_width: float) -> bool:
        return self.viewport.container_resized(container_width)
