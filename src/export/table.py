"""Dimension table rendering below the plan image.

Layout is defined in millimetres on an A4 page and converted to PDF points.
Rows past the bottom of the page are not moved to a new page.
"""

from __future__ import annotations

import fitz  # PyMuPDF

from src.models.entities import ExportBundle

MM_TO_PT = 72 / 25.4

TITLE = "Room and Image Details:"
TITLE_X_MM = 14
TITLE_Y_MM = 140
TITLE_FONT_SIZE = 12

TABLE_HEADERS = ("Item Name", "Width (m)", "Height (m)")
COLUMN_X_MM = (14, 74, 114)
HEADER_Y_MM = 150
ROW_PITCH_MM = 8
TABLE_FONT_SIZE = 11

REGULAR_FONT = "helv"
BOLD_FONT = "hebo"


def mm_to_pt(value: float) -> float:
    """Convert millimetres to PDF points."""
    return value * MM_TO_PT


def table_rows(bundle: ExportBundle) -> list[tuple[str, str, str]]:
    """Data rows in print order: rooms as discovered, then images as supplied."""
    rows = [
        (room.room_id_label, room.width, room.height)
        for room in bundle.rooms.values()
    ]
    rows.extend(
        (image.image_id, image.width_label, image.height_label)
        for image in bundle.images
    )
    return rows


def _write_row(page: fitz.Page, cells, y_mm: float, fontname: str) -> None:
    for x_mm, text in zip(COLUMN_X_MM, cells):
        page.insert_text(
            fitz.Point(mm_to_pt(x_mm), mm_to_pt(y_mm)),
            str(text),
            fontsize=TABLE_FONT_SIZE,
            fontname=fontname,
        )


def render_dimension_table(page: fitz.Page, bundle: ExportBundle) -> float:
    """
    Write the title, header and one row per room/image onto a page.

    Args:
        page: Page that already carries the plan image
        bundle: Room and image records

    Returns:
        Baseline (mm) where the next row would go
    """
    page.insert_text(
        fitz.Point(mm_to_pt(TITLE_X_MM), mm_to_pt(TITLE_Y_MM)),
        TITLE,
        fontsize=TITLE_FONT_SIZE,
        fontname=REGULAR_FONT,
    )

    y_mm = HEADER_Y_MM
    _write_row(page, TABLE_HEADERS, y_mm, BOLD_FONT)
    y_mm += ROW_PITCH_MM

    for row in table_rows(bundle):
        _write_row(page, row, y_mm, REGULAR_FONT)
        y_mm += ROW_PITCH_MM

    return y_mm
