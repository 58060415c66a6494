"""PDF export: plan snapshot plus the dimension table."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import fitz  # PyMuPDF

from src.logging import get_logger
from src.models.entities import ExportArtifact, ExportBundle
from .table import mm_to_pt, render_dimension_table

if TYPE_CHECKING:
    from src.surface.canvas import DrawingSurface

logger = get_logger(__name__)

PDF_FILENAME = "RoomPlanner.pdf"
PDF_MEDIA_TYPE = "application/pdf"

# A4 portrait, millimetres
PAGE_WIDTH_MM = 210
PAGE_HEIGHT_MM = 297

# Plan image box: x, y, width, height (mm)
IMAGE_BOX_MM = (10, 10, 180, 120)


def image_rect() -> fitz.Rect:
    """Page rectangle (points) the plan image is stretched into."""
    x, y, w, h = IMAGE_BOX_MM
    return fitz.Rect(mm_to_pt(x), mm_to_pt(y), mm_to_pt(x + w), mm_to_pt(y + h))


def render_document(png: bytes, bundle: ExportBundle) -> bytes:
    """Lay out the snapshot and the dimension table, returning PDF bytes."""
    doc = fitz.open()
    try:
        page = doc.new_page(width=mm_to_pt(PAGE_WIDTH_MM), height=mm_to_pt(PAGE_HEIGHT_MM))
        page.insert_image(image_rect(), stream=png, keep_proportion=False)
        last_y_mm = render_dimension_table(page, bundle)
        if last_y_mm > PAGE_HEIGHT_MM:
            logger.warning(
                "table_overflows_page",
                rows=bundle.row_count,
                last_row_y_mm=last_y_mm,
            )
        return doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()


async def build_document(surface: "DrawingSurface", bundle: ExportBundle) -> ExportArtifact:
    """
    Render RoomPlanner.pdf for a surface.

    The surface is rasterized as-is (no watermark, background untouched).
    """
    png = await asyncio.to_thread(surface.to_png)
    content = await asyncio.to_thread(render_document, png, bundle)

    logger.info(
        "document_rendered",
        rooms=len(bundle.rooms),
        images=len(bundle.images),
        size_bytes=len(content),
    )
    return ExportArtifact(filename=PDF_FILENAME, media_type=PDF_MEDIA_TYPE, content=content)
