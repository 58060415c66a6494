"""API request/response schemas with complete OpenAPI documentation."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from .entities import ImageRecord, RoomRecord

SCHEMA_VERSION: str = "1.0"


# =============================================================================
# Request Schemas
# =============================================================================

class LabelRef(BaseModel):
    """A label object as the editor hands it over; only its text is used."""
    text: Optional[str] = None

    model_config = {"extra": "ignore"}


class ImageDetail(BaseModel):
    """
    Dimension descriptor for a freestanding image.

    Example:
        {
            "imageId": "Sofa",
            "widthLabel": {"text": "2.10m"},
            "heightLabel": {"text": "0.90m"}
        }
    """
    image_id: str = Field(alias="imageId", description="Name shown in the table")
    width_label: Optional[LabelRef] = Field(default=None, alias="widthLabel")
    height_label: Optional[LabelRef] = Field(default=None, alias="heightLabel")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class CanvasPayload(BaseModel):
    """
    Serialized drawing surface.

    `objects` is kept loosely typed on purpose: every entry is parsed into a
    drawable variant by the surface adapter, and unknown entries are dropped there.

    Example:
        {
            "width": 800,
            "height": 600,
            "background": "#ffffff",
            "objects": [
                {"type": "rect", "id": "Room-1", "width": 100, "height": 200,
                 "scaleX": 1, "scaleY": 1},
                {"type": "text", "id": "Room-1-widthLabel", "text": "2m"}
            ],
            "snapshot": "data:image/png;base64,..."
        }
    """
    width: int = Field(gt=0, description="Surface width in pixels")
    height: int = Field(gt=0, description="Surface height in pixels")
    background: Optional[str] = Field(default=None, description="Current background colour")
    objects: list[dict[str, Any]] = Field(default_factory=list)
    snapshot: Optional[str] = Field(
        default=None,
        description="Client-rendered PNG data URL; rasterized server-side when absent",
    )


class SceneExportRequest(BaseModel):
    """Request body shared by all export endpoints."""
    canvas: Optional[CanvasPayload] = Field(
        default=None,
        description="Drawing surface; null means there is nothing to export",
    )
    image_details: list[ImageDetail] = Field(default_factory=list, alias="imageDetails")

    model_config = {"populate_by_name": True}


# =============================================================================
# Response Schemas
# =============================================================================

class ExportBundleResponse(BaseModel):
    """
    Extracted table data.

    Example:
        {
            "schema_version": "1.0",
            "rooms": {
                "Room-1": {"id": "Room-1", "width": "1.00", "height": "2.00",
                           "widthLabel": "2m", "heightLabel": "4m",
                           "roomIdLabel": "Room-1"}
            },
            "images": []
        }
    """
    schema_version: str = Field(default=SCHEMA_VERSION)
    rooms: dict[str, RoomRecord] = Field(default_factory=dict)
    images: list[ImageRecord] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """
    Standard error response.

    Example:
        {
            "schema_version": "1.0",
            "error_code": "ASSET_LOAD_TIMEOUT",
            "message": "Timed out after 10.0s loading export assets",
            "details": {"timeout_seconds": 10.0}
        }
    """
    schema_version: str = Field(default=SCHEMA_VERSION)
    error_code: str = Field(
        description="Machine-readable error code",
        examples=["MISSING_RENDERING_CONTEXT", "ASSET_LOAD_FAILED", "ASSET_LOAD_TIMEOUT"]
    )
    message: str = Field(description="Human-readable error message")
    details: Optional[dict] = Field(
        default=None,
        description="Additional error context"
    )
