"""Data models for the room planner exporter."""

from .entities import (
    ShapeKind,
    RectangleShape,
    TextLabel,
    ImageShape,
    Drawable,
    RoomRecord,
    ImageRecord,
    ExportBundle,
    ExportArtifact,
)
from .schemas import (
    SCHEMA_VERSION,
    LabelRef,
    ImageDetail,
    CanvasPayload,
    SceneExportRequest,
    ExportBundleResponse,
    ErrorResponse,
)

__all__ = [
    "ShapeKind",
    "RectangleShape",
    "TextLabel",
    "ImageShape",
    "Drawable",
    "RoomRecord",
    "ImageRecord",
    "ExportBundle",
    "ExportArtifact",
    "SCHEMA_VERSION",
    "LabelRef",
    "ImageDetail",
    "CanvasPayload",
    "SceneExportRequest",
    "ExportBundleResponse",
    "ErrorResponse",
]
