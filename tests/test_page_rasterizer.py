from __future__ import annotations

from pathlib import Path

import fitz
import pytest

from field_client.page_rasterizer import RasterizationError, rasterize_first_page


def _pdf_bytes(width: float = 595.0, height: float = 842.0, pages: int = 1) -> bytes:
    doc = fitz.open()
    try:
        for _ in range(pages):
            doc.new_page(width=width, height=height)
        return doc.tobytes()
    finally:
        doc.close()


def test_first_page_geometry_at_unit_scale() -> None:
    page = rasterize_first_page(_pdf_bytes(), render_scale=1.0)

    assert page.geometry.page_size.width == 595.0
    assert page.geometry.page_size.height == 842.0
    assert (page.width, page.height) == (595, 842)
    assert page.geometry.surface_size.width == 595.0
    assert page.channels == 3
    assert len(page.samples) == page.stride * page.height


def test_render_scale_sets_surface_size_only() -> None:
    page = rasterize_first_page(_pdf_bytes(400.0, 600.0), render_scale=2.0)

    assert page.geometry.page_size.width == 400.0
    assert page.geometry.page_size.height == 600.0
    assert abs(page.geometry.surface_size.width - 800.0) <= 1.0
    assert abs(page.geometry.surface_size.height - 1200.0) <= 1.0


def test_only_first_page_is_rendered(tmp_path: Path) -> None:
    doc = fitz.open()
    doc.new_page(width=300.0, height=200.0)
    doc.new_page(width=900.0, height=900.0)
    path = tmp_path / "two-pages.pdf"
    doc.save(str(path))
    doc.close()

    page = rasterize_first_page(path, render_scale=1.0)

    assert page.geometry.page_size.width == 300.0
    assert page.geometry.page_size.height == 200.0


def test_unreadable_document_raises() -> None:
    with pytest.raises(RasterizationError):
        rasterize_first_page(b"this is not a pdf")


def test_non_positive_render_scale_raises() -> None:
    with pytest.raises(RasterizationError):
        rasterize_first_page(_pdf_bytes(), render_scale=0.0)
