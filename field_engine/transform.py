"""Pure screen/document coordinate transforms (no Qt types).

Screen space is the pixel space of the placement surface, origin top-left.
Document space is the PDF point space (72 DPI), origin bottom-left.

``scale`` is the displayed-width ratio ``container_width / surface_width``:
a surface rendered at 892.5 px and shown 446.25 px wide has scale 0.5.
"""
from __future__ import annotations

import math
from typing import Optional

from field_engine.geometry import ZERO_RECT, Rect, Size

DOCUMENT_PRECISION = 2


def _usable(scale: float, page_size: Optional[Size], surface_size: Optional[Size]) -> bool:
    if surface_size is None or page_size is None:
        return False
    if not (isinstance(scale, (int, float)) and math.isfinite(scale) and scale > 0.0):
        return False
    return surface_size.is_valid() and page_size.is_valid()


def to_document(
    screen_rect: Rect,
    scale: float,
    page_size: Optional[Size],
    surface_size: Optional[Size],
) -> Rect:
    """Map a screen rectangle to document space, rounded to hundredths of a point."""

    if not _usable(scale, page_size, surface_size):
        return ZERO_RECT
    scale_x = page_size.width / surface_size.width
    scale_y = page_size.height / surface_size.height

    doc_x = screen_rect.x / scale * scale_x
    doc_width = screen_rect.width / scale * scale_x
    doc_height = screen_rect.height / scale * scale_y
    # Flip from top-left to bottom-left origin.
    doc_y = page_size.height - (screen_rect.y / scale * scale_y) - doc_height

    return Rect(
        round(doc_x, DOCUMENT_PRECISION),
        round(doc_y, DOCUMENT_PRECISION),
        round(doc_width, DOCUMENT_PRECISION),
        round(doc_height, DOCUMENT_PRECISION),
    )


def to_screen(
    document_rect: Rect,
    scale: float,
    page_size: Optional[Size],
    surface_size: Optional[Size],
) -> Rect:
    """Exact inverse of :func:`to_document`; screen values are not rounded."""

    if not _usable(scale, page_size, surface_size):
        return ZERO_RECT
    scale_x = surface_size.width / page_size.width
    scale_y = surface_size.height / page_size.height

    screen_x = document_rect.x * scale_x * scale
    screen_y = (page_size.height - document_rect.y - document_rect.height) * scale_y * scale
    width = document_rect.width * scale_x * scale
    height = document_rect.height * scale_y * scale
    return Rect(screen_x, screen_y, width, height)


def displayed_size(surface_size: Optional[Size], scale: float) -> Size:
    """On-screen size of the page surface at ``scale``; zero when unknown."""

    if surface_size is None or not surface_size.is_valid():
        return Size(0.0, 0.0)
    if not (isinstance(scale, (int, float)) and math.isfinite(scale) and scale > 0.0):
        return Size(0.0, 0.0)
    return Size(surface_size.width * scale, surface_size.height * scale)
