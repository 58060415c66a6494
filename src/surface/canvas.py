"""Drawing surface abstraction and its in-process implementation."""

from __future__ import annotations

import base64
import binascii
import io
from typing import Iterable, Optional, Protocol

from PIL import Image, ImageColor, ImageDraw, ImageFont, UnidentifiedImageError

from src.config import get_settings
from src.export.errors import AssetLoadError, RenderingContextError
from src.logging import get_logger
from src.models.entities import Drawable, ImageShape, RectangleShape, TextLabel
from src.models.schemas import CanvasPayload
from src.surface.adapter import parse_drawables

logger = get_logger(__name__)

DEFAULT_OUTLINE = "#333333"
DEFAULT_TEXT_COLOR = "#000000"
FONT_FILE = "DejaVuSans.ttf"


class DrawingSurface(Protocol):
    """What the export pipelines need from a drawing surface."""

    def get_width(self) -> int: ...

    def get_height(self) -> int: ...

    def set_background_color(self, color: str) -> None: ...

    def get_objects(self) -> list[Drawable]: ...

    def to_png(self) -> bytes: ...


def decode_data_url(value: str) -> bytes:
    """Decode a base64 `data:` URL (or bare base64) into raw bytes.

    Raises:
        AssetLoadError: If the value is not valid base64 data
    """
    data = value
    if value.startswith("data:"):
        header, sep, data = value.partition(",")
        if not sep or ";base64" not in header:
            raise AssetLoadError(
                "Only base64 data URLs are supported",
                details={"header": header[:64]},
            )
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AssetLoadError(f"Invalid base64 image data: {e}")


def _color(value: Optional[str]):
    """Resolve a CSS-ish colour, or None when it is empty or unknown to Pillow."""
    if not value or value == "transparent":
        return None
    try:
        return ImageColor.getcolor(value, "RGBA")
    except ValueError:
        return None


def _load_font(size: float):
    try:
        return ImageFont.truetype(FONT_FILE, size=max(1, int(round(size))))
    except OSError:
        return ImageFont.load_default()


class SceneCanvas:
    """
    A drawing surface reconstructed from its serialized form.

    When the editor supplied its own rendering (`snapshot`), that rendering is
    what `to_png` exports; otherwise the parsed objects are rasterized here.
    """

    def __init__(
        self,
        width: int,
        height: int,
        objects: Iterable[Drawable] = (),
        background: Optional[str] = None,
        snapshot: Optional[bytes] = None,
    ):
        self.width = width
        self.height = height
        self.background = background
        self.snapshot = snapshot
        self._objects = list(objects)

    @classmethod
    def from_payload(cls, payload: CanvasPayload) -> "SceneCanvas":
        """Build a surface from an API payload, validating the snapshot size."""
        snapshot = None
        if payload.snapshot:
            snapshot = decode_data_url(payload.snapshot)
            max_bytes = get_settings().max_snapshot_bytes
            if len(snapshot) > max_bytes:
                raise AssetLoadError(
                    f"Snapshot too large: {len(snapshot)} bytes. Maximum is {max_bytes} bytes.",
                    details={"size_bytes": len(snapshot), "max_bytes": max_bytes},
                )

        objects = parse_drawables(payload.objects)
        logger.debug(
            "surface_parsed",
            width=payload.width,
            height=payload.height,
            received=len(payload.objects),
            parsed=len(objects),
            has_snapshot=snapshot is not None,
        )
        return cls(
            width=payload.width,
            height=payload.height,
            objects=objects,
            background=payload.background,
            snapshot=snapshot,
        )

    def get_width(self) -> int:
        return self.width

    def get_height(self) -> int:
        return self.height

    def set_background_color(self, color: str) -> None:
        self.background = color

    def get_objects(self) -> list[Drawable]:
        return list(self._objects)

    def render(self) -> Image.Image:
        """Render the surface into an RGBA image of exactly its pixel size."""
        if self.width <= 0 or self.height <= 0:
            raise RenderingContextError(
                f"Cannot render a {self.width}x{self.height} surface",
                details={"width": self.width, "height": self.height},
            )

        background = _color(self.background) or (0, 0, 0, 0)
        image = Image.new("RGBA", (self.width, self.height), background)

        if self.snapshot is not None:
            layer = self._open_snapshot()
            if layer.size != image.size:
                layer = layer.resize(image.size, Image.Resampling.LANCZOS)
            return Image.alpha_composite(image, layer)

        draw = ImageDraw.Draw(image)
        for obj in self._objects:
            if isinstance(obj, RectangleShape):
                self._draw_rectangle(draw, obj)
            elif isinstance(obj, TextLabel):
                self._draw_text(draw, obj)
            elif isinstance(obj, ImageShape):
                self._draw_image(image, obj)
        return image

    def export_raster(self, fmt: str = "png", quality: float = 1.0) -> bytes:
        """Encode the rendered surface as PNG or JPEG.

        Args:
            fmt: "png" or "jpeg"
            quality: 0.0-1.0, only meaningful for JPEG
        """
        image = self.render()
        buffer = io.BytesIO()
        if fmt.lower() in ("jpeg", "jpg"):
            flat = Image.new("RGB", image.size, (255, 255, 255))
            flat.paste(image, mask=image.getchannel("A"))
            flat.save(buffer, format="JPEG", quality=max(1, min(95, int(quality * 100))))
        elif fmt.lower() == "png":
            image.save(buffer, format="PNG")
        else:
            raise ValueError(f"Unsupported raster format: {fmt}")
        return buffer.getvalue()

    def to_png(self) -> bytes:
        return self.export_raster("png")

    def _open_snapshot(self) -> Image.Image:
        try:
            with Image.open(io.BytesIO(self.snapshot)) as img:
                return img.convert("RGBA")
        except (UnidentifiedImageError, OSError) as e:
            raise AssetLoadError(f"Snapshot is not a readable image: {e}")

    @staticmethod
    def _draw_rectangle(draw: ImageDraw.ImageDraw, rect: RectangleShape) -> None:
        x0, y0 = rect.left, rect.top
        x1, y1 = x0 + rect.scaled_width, y0 + rect.scaled_height
        if x1 <= x0 or y1 <= y0:
            return
        fill = _color(rect.fill)
        outline = _color(rect.stroke)
        if fill is None and outline is None:
            outline = _color(DEFAULT_OUTLINE)
        draw.rectangle(
            (x0, y0, x1, y1),
            fill=fill,
            outline=outline,
            width=max(1, int(round(rect.stroke_width))),
        )

    @staticmethod
    def _draw_text(draw: ImageDraw.ImageDraw, label: TextLabel) -> None:
        if not label.text:
            return
        font = _load_font(label.font_size * label.scale_y)
        draw.text(
            (label.left, label.top),
            label.text,
            fill=_color(label.fill) or _color(DEFAULT_TEXT_COLOR),
            font=font,
        )

    @staticmethod
    def _draw_image(canvas: Image.Image, shape: ImageShape) -> None:
        if not shape.src or not shape.src.startswith("data:"):
            logger.debug("image_not_rendered", object_id=shape.id, reason="no_inline_source")
            return
        try:
            with Image.open(io.BytesIO(decode_data_url(shape.src))) as img:
                picture = img.convert("RGBA")
        except (AssetLoadError, UnidentifiedImageError, OSError):
            logger.debug("image_not_rendered", object_id=shape.id, reason="undecodable_source")
            return

        width = int(round(shape.scaled_width)) or picture.width
        height = int(round(shape.scaled_height)) or picture.height
        if width <= 0 or height <= 0:
            return
        if picture.size != (width, height):
            picture = picture.resize((width, height), Image.Resampling.LANCZOS)
        canvas.paste(picture, (int(round(shape.left)), int(round(shape.top))), picture)
