"""Authoritative store of placed fields for a document session."""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional

from field_engine.field_kinds import FieldKind
from field_engine.geometry import Point, Rect, Size
from field_engine.session import SessionContext
from field_engine.transform import to_document

LOGGER = logging.getLogger("FieldPlacer.Engine")

IdFactory = Callable[[], str]


@dataclass
class Field:
    id: str
    kind: FieldKind
    document_rect: Rect
    screen_rect: Rect
    value: str = ""


def _counter_ids(prefix: str = "field") -> IdFactory:
    counter = itertools.count(1)

    def _next() -> str:
        return f"{prefix}-{next(counter)}"

    return _next


class FieldStore:
    """Maps field id to :class:`Field`.

    ``document_rect`` is the source of truth. Every mutation computes it from
    the screen rectangle the caller supplies and stores that same screen
    rectangle, so the mutation source and the cached value never diverge.
    """

    def __init__(self, context: SessionContext, *, id_factory: Optional[IdFactory] = None) -> None:
        self._context = context
        self._fields: Dict[str, Field] = {}
        self._next_id = id_factory or _counter_ids()

    @property
    def context(self) -> SessionContext:
        return self._context

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._fields

    def __iter__(self) -> Iterator[Field]:
        return iter(list(self._fields.values()))

    def get(self, field_id: str) -> Optional[Field]:
        return self._fields.get(field_id)

    def all(self) -> List[Field]:
        """Fields in creation order (last entry is topmost)."""

        return list(self._fields.values())

    def first_of_kind(self, kind: FieldKind) -> Optional[Field]:
        for item in self._fields.values():
            if item.kind is kind:
                return item
        return None

    def _document_rect(self, screen_rect: Rect) -> Rect:
        ctx = self._context
        return to_document(screen_rect, ctx.scale, ctx.page_size, ctx.surface_size)

    # Mutations ---------------------------------------------------------

    def create(self, kind: FieldKind, screen_point: Point, default_size: Optional[Size] = None) -> Optional[Field]:
        if not self._context.is_loaded:
            LOGGER.debug("Ignoring create of %s field: no document loaded", kind.value)
            return None
        size = default_size or self._context.limits.default_size
        field_id = self._next_id()
        while field_id in self._fields:
            field_id = self._next_id()
        screen_rect = Rect.from_parts(screen_point, size)
        created = Field(
            id=field_id,
            kind=kind,
            document_rect=self._document_rect(screen_rect),
            screen_rect=screen_rect,
        )
        self._fields[field_id] = created
        LOGGER.debug(
            "Created %s field %s at screen=(%.1f,%.1f) document=%s",
            kind.value,
            field_id,
            screen_point.x,
            screen_point.y,
            created.document_rect,
        )
        return created

    def move_to(self, field_id: str, new_origin: Point) -> Optional[Field]:
        target = self._mutable(field_id, "move")
        if target is None:
            return None
        screen_rect = Rect.from_parts(new_origin, target.screen_rect.size)
        target.document_rect = self._document_rect(screen_rect)
        target.screen_rect = screen_rect
        return target

    def resize_to(self, field_id: str, new_size: Size) -> Optional[Field]:
        target = self._mutable(field_id, "resize")
        if target is None:
            return None
        size = new_size.clamped(self._context.limits.minimum_size)
        screen_rect = Rect.from_parts(target.screen_rect.origin, size)
        target.document_rect = self._document_rect(screen_rect)
        target.screen_rect = screen_rect
        return target

    def set_value(self, field_id: str, value: str) -> Optional[Field]:
        target = self._fields.get(field_id)
        if target is None:
            return None
        target.value = "" if value is None else str(value)
        return target

    def delete(self, field_id: str) -> bool:
        removed = self._fields.pop(field_id, None)
        if removed is None:
            return False
        cleared = self._context.clear_selection_if(field_id)
        LOGGER.debug("Deleted field %s (selection cleared=%s)", field_id, cleared)
        return True

    def clear(self) -> None:
        self._fields.clear()
        self._context.select(None)

    def _mutable(self, field_id: str, action: str) -> Optional[Field]:
        if not self._context.is_loaded:
            LOGGER.debug("Ignoring %s of %s: no document loaded", action, field_id)
            return None
        target = self._fields.get(field_id)
        if target is None:
            LOGGER.debug("Ignoring %s of unknown field %s", action, field_id)
        return target

    # Synchronizer hook -------------------------------------------------

    def _replace_screen_rect(self, field_id: str, screen_rect: Rect) -> None:
        target = self._fields.get(field_id)
        if target is not None:
            target.screen_rect = screen_rect
