"""Domain models for drawing-surface objects and export records."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class ShapeKind(str, Enum):
    """Drawable variants understood by the exporter."""
    RECTANGLE = "rect"
    TEXT = "text"
    IMAGE = "image"


# =============================================================================
# Drawable variants
# =============================================================================

class DrawableBase(BaseModel):
    """Geometry shared by every drawable on the surface.

    Field aliases follow the camelCase names the drawing surface serializes.
    """
    id: Optional[str] = Field(default=None, description="Externally assigned identifier")
    left: float = Field(default=0.0, description="X of the top-left corner in surface pixels")
    top: float = Field(default=0.0, description="Y of the top-left corner in surface pixels")
    width: float = Field(default=0.0, description="Unscaled width in pixels")
    height: float = Field(default=0.0, description="Unscaled height in pixels")
    scale_x: float = Field(default=1.0, alias="scaleX")
    scale_y: float = Field(default=1.0, alias="scaleY")

    model_config = {"populate_by_name": True, "extra": "ignore", "allow_inf_nan": False}

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value):
        if value is None:
            return None
        value = str(value)
        return value or None

    @field_validator("scale_x", "scale_y", mode="before")
    @classmethod
    def _default_scale(cls, value):
        return 1.0 if value is None else value

    @property
    def scaled_width(self) -> float:
        return self.width * self.scale_x

    @property
    def scaled_height(self) -> float:
        return self.height * self.scale_y


class RectangleShape(DrawableBase):
    """A rectangle; room candidates are rectangles named Room-<n>."""
    kind: Literal[ShapeKind.RECTANGLE] = ShapeKind.RECTANGLE
    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: float = Field(default=1.0, alias="strokeWidth")


class TextLabel(DrawableBase):
    """A text-bearing drawable (caption, width label, height label)."""
    kind: Literal[ShapeKind.TEXT] = ShapeKind.TEXT
    text: str = ""
    font_size: float = Field(default=40.0, alias="fontSize")
    fill: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return "" if value is None else str(value)


class ImageShape(DrawableBase):
    """A freestanding image placed on the surface."""
    kind: Literal[ShapeKind.IMAGE] = ShapeKind.IMAGE
    src: Optional[str] = Field(default=None, description="Image source, usually a data URL")


Drawable = Annotated[
    Union[RectangleShape, TextLabel, ImageShape],
    Field(discriminator="kind"),
]


# =============================================================================
# Export records
# =============================================================================

class RoomRecord(BaseModel):
    """Dimensions of one room rectangle, derived on every export."""
    id: str
    width: str = Field(description="Width in meters, two decimals")
    height: str = Field(description="Height in meters, two decimals")
    width_label: str = Field(default="", alias="widthLabel")
    height_label: str = Field(default="", alias="heightLabel")
    room_id_label: str = Field(alias="roomIdLabel", description="Caption text or the identifier")

    model_config = {"populate_by_name": True}


class ImageRecord(BaseModel):
    """Caller-supplied dimensions of a freestanding image."""
    image_id: str = Field(alias="imageId")
    width_label: str = Field(default="", alias="widthLabel")
    height_label: str = Field(default="", alias="heightLabel")

    model_config = {"populate_by_name": True}


class ExportBundle(BaseModel):
    """Room and image records feeding the dimension table."""
    rooms: dict[str, RoomRecord] = Field(default_factory=dict)
    images: list[ImageRecord] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rooms) + len(self.images)


class ExportArtifact(BaseModel):
    """A rendered file ready for delivery."""
    filename: str
    media_type: str
    content: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.content)
