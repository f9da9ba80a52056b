"""Rasterize page 1 of a PDF with PyMuPDF and report its point-space size."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import fitz  # PyMuPDF

from field_engine.geometry import Size
from field_engine.session import PageGeometry

LOGGER = logging.getLogger("FieldPlacer.Client")

DEFAULT_RENDER_SCALE = 1.5

PdfSource = Union[str, Path, bytes]


class RasterizationError(RuntimeError):
    """The document could not be opened or has no pages."""


@dataclass(frozen=True)
class RasterizedPage:
    geometry: PageGeometry
    width: int
    height: int
    stride: int
    channels: int
    samples: bytes


def rasterize_first_page(source: PdfSource, render_scale: float = DEFAULT_RENDER_SCALE) -> RasterizedPage:
    """Render page 1 at ``render_scale`` pixels per point.

    ``page_size`` comes from the page's own rectangle (points, 72 DPI);
    ``surface_size`` is the pixel size of the rendered pixmap.
    """

    if not render_scale > 0:
        raise RasterizationError(f"Render scale must be positive, got {render_scale!r}")
    try:
        if isinstance(source, (bytes, bytearray)):
            doc = fitz.open(stream=bytes(source), filetype="pdf")
        else:
            doc = fitz.open(str(source))
    except Exception as exc:
        raise RasterizationError(f"Unable to open document: {exc}") from exc

    try:
        if doc.page_count < 1:
            raise RasterizationError("Document has no pages")
        page = doc[0]
        rect = page.rect
        pix = page.get_pixmap(matrix=fitz.Matrix(render_scale, render_scale), alpha=False)
        rendered = RasterizedPage(
            geometry=PageGeometry(
                page_size=Size(float(rect.width), float(rect.height)),
                surface_size=Size(float(pix.width), float(pix.height)),
            ),
            width=pix.width,
            height=pix.height,
            stride=pix.stride,
            channels=pix.n,
            samples=bytes(pix.samples),
        )
    finally:
        doc.close()

    LOGGER.debug(
        "Rasterized page 1: page=%.2fx%.2fpt surface=%dx%dpx scale=%.2f",
        rendered.geometry.page_size.width,
        rendered.geometry.page_size.height,
        rendered.width,
        rendered.height,
        render_scale,
    )
    return rendered


def to_qimage(page: RasterizedPage):
    """Convert the rendered samples into a detached ``QImage``."""

    from PyQt6.QtGui import QImage

    fmt = QImage.Format.Format_RGB888 if page.channels == 3 else QImage.Format.Format_RGBA8888
    image = QImage(page.samples, page.width, page.height, page.stride, fmt)
    return image.copy()
