"""Room planner export pipelines."""

from .errors import ExportError, RenderingContextError, AssetLoadError, AssetLoadTimeoutError
from .extractor import extract_rooms, build_export_bundle, pixels_to_meters
from .watermark import composite_watermark, watermark_placements
from .table import render_dimension_table, table_rows
from .document import build_document, render_document
from .service import ExportService

__all__ = [
    "ExportError",
    "RenderingContextError",
    "AssetLoadError",
    "AssetLoadTimeoutError",
    "extract_rooms",
    "build_export_bundle",
    "pixels_to_meters",
    "composite_watermark",
    "watermark_placements",
    "render_dimension_table",
    "table_rows",
    "build_document",
    "render_document",
    "ExportService",
]
