"""Watermarked PNG snapshot of a drawing surface.

Layout for a W x H surface: the logo is scaled to (0.15 W, 0.15 H) and drawn
at 25% opacity five times, in this order:

    upper-left, upper-right, lower-left, lower-right   (inset 10 px)
    center                                              (centered on W/2, H/2)
"""

from __future__ import annotations

import asyncio
import io
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from PIL import Image, UnidentifiedImageError

from src.config import get_settings
from src.export.errors import AssetLoadError, AssetLoadTimeoutError, RenderingContextError
from src.logging import get_logger
from src.models.entities import ExportArtifact

if TYPE_CHECKING:
    from src.surface.canvas import DrawingSurface

logger = get_logger(__name__)

WATERMARK_PATH = Path(__file__).resolve().parent.parent / "assets" / "infinitech.png"
PNG_FILENAME = "RoomPlanner.png"
PNG_MEDIA_TYPE = "image/png"

WATERMARK_SCALE = 0.15
WATERMARK_OPACITY = 0.25
WATERMARK_INSET = 10


class StampPosition(str, Enum):
    """Where a watermark stamp sits on the snapshot."""
    UPPER_LEFT = "upper_left"
    UPPER_RIGHT = "upper_right"
    LOWER_LEFT = "lower_left"
    LOWER_RIGHT = "lower_right"
    CENTER = "center"


@dataclass(frozen=True)
class StampPlacement:
    """Top-left corner and size of one stamp, in surface pixels."""
    position: StampPosition
    x: float
    y: float
    width: float
    height: float


def watermark_placements(width: float, height: float) -> list[StampPlacement]:
    """Compute the five stamp placements for a surface of the given size."""
    stamp_w = width * WATERMARK_SCALE
    stamp_h = height * WATERMARK_SCALE
    right = width - stamp_w - WATERMARK_INSET
    bottom = height - stamp_h - WATERMARK_INSET

    return [
        StampPlacement(StampPosition.UPPER_LEFT, WATERMARK_INSET, WATERMARK_INSET, stamp_w, stamp_h),
        StampPlacement(StampPosition.UPPER_RIGHT, right, WATERMARK_INSET, stamp_w, stamp_h),
        StampPlacement(StampPosition.LOWER_LEFT, WATERMARK_INSET, bottom, stamp_w, stamp_h),
        StampPlacement(StampPosition.LOWER_RIGHT, right, bottom, stamp_w, stamp_h),
        StampPlacement(
            StampPosition.CENTER,
            width / 2 - stamp_w / 2,
            height / 2 - stamp_h / 2,
            stamp_w,
            stamp_h,
        ),
    ]


def _acquire_offscreen(width: int, height: int) -> Image.Image:
    if width <= 0 or height <= 0:
        raise RenderingContextError(
            f"Cannot create a {width}x{height} offscreen surface",
            details={"width": width, "height": height},
        )
    try:
        return Image.new("RGBA", (width, height), (255, 255, 255, 255))
    except (ValueError, MemoryError) as e:
        raise RenderingContextError(
            f"Failed to create offscreen surface: {e}",
            details={"width": width, "height": height},
        )


def _decode_image(content: bytes, asset: str) -> Image.Image:
    try:
        with Image.open(io.BytesIO(content)) as img:
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as e:
        raise AssetLoadError(f"Failed to load {asset} image: {e}", details={"asset": asset})


def _read_watermark(path: Path) -> Image.Image:
    try:
        content = path.read_bytes()
    except OSError as e:
        raise AssetLoadError(
            f"Watermark asset not readable: {e}",
            details={"asset": "watermark", "path": str(path)},
        )
    return _decode_image(content, "watermark")


async def _load_snapshot(surface: "DrawingSurface") -> Image.Image:
    content = await asyncio.to_thread(surface.to_png)
    return await asyncio.to_thread(_decode_image, content, "snapshot")


async def _load_watermark(path: Path) -> Image.Image:
    return await asyncio.to_thread(_read_watermark, path)


async def load_assets(
    surface: "DrawingSurface",
    watermark_path: Path,
    timeout: float,
) -> tuple[Image.Image, Image.Image]:
    """
    Load the surface snapshot and the watermark concurrently.

    Both loads must finish before compositing; whichever fails first fails the
    pair, and the other load is cancelled.

    Raises:
        AssetLoadTimeoutError: If both loads did not finish within `timeout` seconds
        AssetLoadError: If either image could not be decoded
    """
    snapshot_task = asyncio.create_task(_load_snapshot(surface))
    watermark_task = asyncio.create_task(_load_watermark(watermark_path))
    try:
        snapshot, watermark = await asyncio.wait_for(
            asyncio.gather(snapshot_task, watermark_task),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "asset_load_timeout",
            timeout_seconds=timeout,
            snapshot_done=snapshot_task.done(),
            watermark_done=watermark_task.done(),
        )
        raise AssetLoadTimeoutError(
            f"Timed out after {timeout}s loading export assets",
            details={"timeout_seconds": timeout},
        )
    finally:
        for task in (snapshot_task, watermark_task):
            if not task.done():
                task.cancel()
    return snapshot, watermark


def _draw(canvas: Image.Image, image: Image.Image, x: int, y: int) -> Image.Image:
    """Alpha-composite `image` onto `canvas` with its top-left at (x, y)."""
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    layer.paste(image, (x, y))
    return Image.alpha_composite(canvas, layer)


def make_stamp(watermark: Image.Image, width: float, height: float) -> Image.Image:
    """Scale the logo to the stamp size and apply the stamp opacity."""
    size = (max(1, int(round(width))), max(1, int(round(height))))
    stamp = watermark.resize(size, Image.Resampling.LANCZOS)
    alpha = stamp.getchannel("A").point(lambda a: int(round(a * WATERMARK_OPACITY)))
    stamp.putalpha(alpha)
    return stamp


def compose(snapshot: Image.Image, watermark: Image.Image, canvas: Image.Image) -> Image.Image:
    """Draw the snapshot at the origin, then the five stamps in fixed order."""
    canvas = _draw(canvas, snapshot, 0, 0)
    placements = watermark_placements(canvas.width, canvas.height)
    stamp = make_stamp(watermark, placements[0].width, placements[0].height)
    for placement in placements:
        canvas = _draw(canvas, stamp, int(round(placement.x)), int(round(placement.y)))
    return canvas


async def composite_watermark(
    surface: "DrawingSurface",
    watermark_path: Optional[Union[str, Path]] = None,
    timeout: Optional[float] = None,
) -> ExportArtifact:
    """
    Produce the watermarked PNG snapshot of a surface.

    Args:
        surface: The drawing surface; its background is set to white first
        watermark_path: Logo to stamp, defaults to the bundled asset
        timeout: Seconds allowed for the asset loads, defaults to settings

    Returns:
        ExportArtifact named RoomPlanner.png

    Raises:
        RenderingContextError: If the offscreen surface cannot be created
        AssetLoadError: If the snapshot or watermark cannot be decoded
        AssetLoadTimeoutError: If the asset loads do not finish in time
    """
    surface.set_background_color("white")
    width, height = surface.get_width(), surface.get_height()
    canvas = _acquire_offscreen(width, height)

    path = Path(watermark_path) if watermark_path else WATERMARK_PATH
    if timeout is None:
        timeout = get_settings().asset_load_timeout_seconds

    snapshot, watermark = await load_assets(surface, path, timeout)
    composed = await asyncio.to_thread(compose, snapshot, watermark, canvas)

    buffer = io.BytesIO()
    composed.save(buffer, format="PNG")
    content = buffer.getvalue()

    logger.info(
        "watermark_composited",
        width=width,
        height=height,
        stamps=len(StampPosition),
        size_bytes=len(content),
    )
    return ExportArtifact(filename=PNG_FILENAME, media_type=PNG_MEDIA_TYPE, content=content)
