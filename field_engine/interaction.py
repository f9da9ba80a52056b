"""Pointer-gesture state machine for creating, moving, resizing and deleting fields.

The controller is a per-gesture machine: fields carry no state beyond their
geometry, and at most one gesture is active because there is a single
pointing device. Pointer listeners are acquired from a :class:`PointerCapture`
when a move or resize begins and released when it ends, whatever the exit path.
"""
from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Tuple

from field_engine.field_kinds import FieldKind
from field_engine.field_store import Field, FieldStore
from field_engine.geometry import Point, Rect, Size
from field_engine.session import SessionContext

LOGGER = logging.getLogger("FieldPlacer.Engine")

MoveCallback = Callable[[Point], None]
ReleaseCallback = Callable[[Optional[Point]], None]


class GestureKind(Enum):
    IDLE = "idle"
    CREATING = "creating"
    MOVING = "moving"
    RESIZING = "resizing"


class FieldPart(str, Enum):
    BODY = "body"
    HANDLE = "handle"
    DELETE = "delete"


@dataclass
class Gesture:
    """State recorded when a gesture begins."""

    kind: GestureKind
    field_id: Optional[str] = None
    field_kind: Optional[FieldKind] = None
    offset: Point = Point(0.0, 0.0)
    start_pointer: Optional[Point] = None
    start_size: Optional[Size] = None
    move_events: int = 0


class PointerCapture(Protocol):
    """Source of pointer move/release events for the duration of a gesture.

    ``capture`` registers both callbacks and returns a function that
    deregisters them. Release must be reported even when the pointer is let go
    outside the placement surface (``None`` when no position is known).
    """

    def capture(self, on_move: MoveCallback, on_release: ReleaseCallback) -> Callable[[], None]:
        ...


def control_size(screen_rect: Rect, handle_size: float) -> float:
    """Side of the corner controls; at most half the field so handle and delete never overlap."""

    return max(0.0, min(handle_size, screen_rect.width / 2.0, screen_rect.height / 2.0))


def handle_rect(screen_rect: Rect, handle_size: float) -> Rect:
    """Resize handle square in the bottom-right corner of a field."""

    side = control_size(screen_rect, handle_size)
    return Rect(screen_rect.right - side, screen_rect.bottom - side, side, side)


def delete_rect(screen_rect: Rect, handle_size: float) -> Rect:
    """Delete control square in the top-right corner of a field."""

    side = control_size(screen_rect, handle_size)
    return Rect(screen_rect.right - side, screen_rect.y, side, side)


class InteractionController:
    def __init__(
        self,
        context: SessionContext,
        store: FieldStore,
        capture: PointerCapture,
        *,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._context = context
        self._store = store
        self._capture = capture
        self._on_change = on_change or (lambda: None)
        self._gesture: Optional[Gesture] = None
        self._listeners: Optional[ExitStack] = None

    # State ---------------------------------------------------------------

    @property
    def gesture(self) -> Optional[Gesture]:
        return self._gesture

    @property
    def state(self) -> GestureKind:
        return self._gesture.kind if self._gesture is not None else GestureKind.IDLE

    @property
    def is_idle(self) -> bool:
        return self._gesture is None

    @property
    def listening(self) -> bool:
        return self._listeners is not None

    # Creating ------------------------------------------------------------

    def begin_create(self, kind: FieldKind) -> bool:
        """A palette token was picked up."""

        if not self.is_idle:
            LOGGER.debug("Ignoring drag of %s token: %s gesture active", kind.value, self.state.value)
            return False
        self._gesture = Gesture(kind=GestureKind.CREATING, field_kind=kind)
        return True

    def cancel_create(self) -> None:
        if self.state is GestureKind.CREATING:
            self._gesture = None

    def drop(self, point: Optional[Point]) -> Optional[Field]:
        """Finish a create gesture; ``None`` means the token was released off-surface."""

        gesture = self._gesture
        if gesture is None or gesture.kind is not GestureKind.CREATING:
            return None
        self._gesture = None
        if point is None or not self._context.is_loaded:
            return None
        displayed = self._context.displayed_size()
        if not Rect(0.0, 0.0, displayed.width, displayed.height).contains(point):
            LOGGER.debug("Drop at (%.1f,%.1f) outside surface %s", point.x, point.y, displayed)
            return None
        created = self._store.create(gesture.field_kind, point, self._context.limits.default_size)
        if created is not None:
            self._on_change()
        return created

    # Hit testing ---------------------------------------------------------

    def hit_test(self, point: Point) -> Optional[Tuple[str, FieldPart]]:
        """Topmost field under ``point`` and the part hit.

        Only the selected field exposes its delete and resize controls; on any
        other field the whole rectangle is body.
        """

        handle_size = self._context.limits.handle_size
        selected_id = self._context.selected_id
        for item in reversed(self._store.all()):
            rect = item.screen_rect
            if not rect.contains(point):
                continue
            if item.id != selected_id:
                return item.id, FieldPart.BODY
            # Handle wins on the shared edge.
            if handle_rect(rect, handle_size).contains(point):
                return item.id, FieldPart.HANDLE
            if delete_rect(rect, handle_size).contains(point):
                return item.id, FieldPart.DELETE
            return item.id, FieldPart.BODY
        return None

    def press(self, point: Point) -> Optional[FieldPart]:
        """Dispatch a pointer-down on the surface to the field part under it."""

        if not self.is_idle:
            return None
        hit = self.hit_test(point)
        if hit is None:
            return None
        field_id, part = hit
        if part is FieldPart.DELETE:
            self.delete_field(field_id)
        elif part is FieldPart.HANDLE:
            self.press_handle(field_id, point)
        else:
            self.press_field(field_id, point)
        return part

    # Moving / resizing ---------------------------------------------------

    def press_field(self, field_id: str, pointer: Point) -> bool:
        target = self._pressable(field_id)
        if target is None:
            return False
        gesture = Gesture(
            kind=GestureKind.MOVING,
            field_id=field_id,
            offset=pointer - target.screen_rect.origin,
        )
        self._begin(gesture)
        return True

    def press_handle(self, field_id: str, pointer: Point) -> bool:
        target = self._pressable(field_id)
        if target is None:
            return False
        gesture = Gesture(
            kind=GestureKind.RESIZING,
            field_id=field_id,
            start_pointer=pointer,
            start_size=target.screen_rect.size,
        )
        self._begin(gesture)
        return True

    def pointer_moved(self, pointer: Point) -> None:
        gesture = self._gesture
        if gesture is None or gesture.field_id is None:
            return
        gesture.move_events += 1
        if gesture.kind is GestureKind.MOVING:
            self._store.move_to(gesture.field_id, pointer - gesture.offset)
        elif gesture.kind is GestureKind.RESIZING:
            delta = pointer - gesture.start_pointer
            minimum = self._context.limits.minimum_size
            new_size = Size(
                max(minimum.width, gesture.start_size.width + delta.x),
                max(minimum.height, gesture.start_size.height + delta.y),
            )
            self._store.resize_to(gesture.field_id, new_size)
        else:
            return
        self._on_change()

    def pointer_released(self, pointer: Optional[Point] = None) -> None:
        """Commit the last computed geometry; there is no revert path."""

        gesture = self._gesture
        if gesture is None or gesture.kind is GestureKind.CREATING:
            return
        self.end_gesture()

    def end_gesture(self) -> None:
        """Return to idle and release any gesture-scoped listeners."""

        gesture = self._gesture
        self._gesture = None
        listeners = self._listeners
        self._listeners = None
        if listeners is not None:
            listeners.close()
        if gesture is not None and gesture.field_id is not None:
            LOGGER.debug(
                "%s gesture on %s ended after %d move events",
                gesture.kind.value,
                gesture.field_id,
                gesture.move_events,
            )

    # Deletion ------------------------------------------------------------

    def delete_field(self, field_id: str) -> bool:
        gesture = self._gesture
        if gesture is not None and gesture.field_id == field_id:
            self.end_gesture()
        removed = self._store.delete(field_id)
        if removed:
            self._on_change()
        return removed

    # Internal helpers ----------------------------------------------------

    def _pressable(self, field_id: str) -> Optional[Field]:
        if not self.is_idle:
            LOGGER.debug("Ignoring press on %s: %s gesture active", field_id, self.state.value)
            return None
        if not self._context.is_loaded:
            return None
        target = self._store.get(field_id)
        if target is None:
            return None
        self._context.select(field_id)
        return target

    def _begin(self, gesture: Gesture) -> None:
        self._gesture = gesture
        stack = ExitStack()
        try:
            release = self._capture.capture(self.pointer_moved, self.pointer_released)
            stack.callback(release)
        except Exception:
            stack.close()
            self._gesture = None
            raise
        self._listeners = stack
        LOGGER.debug("%s gesture started on %s", gesture.kind.value, gesture.field_id)
        self._on_change()
