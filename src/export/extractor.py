"""Room dimension extraction from drawing-surface objects.

Rooms are rectangles named `Room-<n>`. Their labels are separate text objects
related by identifier suffix:

    Room-3                -> the rectangle (and optionally a caption text object)
    Room-3-widthLabel     -> text shown along the width
    Room-3-heightLabel    -> text shown along the height

Missing labels fall back to "" (width/height) or to the identifier (caption).
Nothing in here raises on malformed input; non-matching objects are skipped.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from src.logging import get_logger
from src.models.entities import (
    Drawable,
    ExportBundle,
    ImageRecord,
    RectangleShape,
    RoomRecord,
    TextLabel,
)
from src.models.schemas import ImageDetail

logger = get_logger(__name__)

# ASCII digits only, matched against the whole identifier
ROOM_ID_PATTERN = re.compile(r"Room-[0-9]+")

WIDTH_LABEL_SUFFIX = "-widthLabel"
HEIGHT_LABEL_SUFFIX = "-heightLabel"

# Grid convention: one 50 px box is half a meter
PIXELS_PER_BOX = 50
METERS_PER_BOX = 0.5


def pixels_to_meters(pixels: float, scale: float = 1.0) -> float:
    """Convert a scaled pixel length to meters."""
    return (pixels * scale / PIXELS_PER_BOX) * METERS_PER_BOX


def format_meters(meters: float) -> str:
    """Format meters with two fixed decimals.

    Rounds the exact binary value half-up, so 1.125 gives "1.13" while 1.005
    (stored as 1.00499...) gives "1.00".
    """
    if meters == 0:
        # Negative zero prints as "0.00"
        meters = 0.0
    return str(Decimal(meters).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def is_room_candidate(obj: Drawable) -> bool:
    """Check whether an object is a room rectangle.

    The suffix checks are implied by the pattern; they stay so a looser
    pattern can never let a label identifier through.
    """
    if not isinstance(obj, RectangleShape) or not obj.id:
        return False
    if not ROOM_ID_PATTERN.fullmatch(obj.id):
        return False
    return WIDTH_LABEL_SUFFIX not in obj.id and HEIGHT_LABEL_SUFFIX not in obj.id


def index_by_id(objects: Iterable[Drawable]) -> dict[str, Drawable]:
    """Index objects by identifier; the first object with an identifier wins."""
    index: dict[str, Drawable] = {}
    for obj in objects:
        if obj.id and obj.id not in index:
            index[obj.id] = obj
    return index


def _label_text(obj: Optional[Drawable]) -> str:
    if isinstance(obj, TextLabel):
        return obj.text
    return ""


def _caption_index(objects: Iterable[Drawable]) -> dict[str, str]:
    """First non-empty text per identifier, from text objects only."""
    captions: dict[str, str] = {}
    for obj in objects:
        if isinstance(obj, TextLabel) and obj.id and obj.text and obj.id not in captions:
            captions[obj.id] = obj.text
    return captions


def build_room_record(
    room: RectangleShape,
    index: dict[str, Drawable],
    captions: dict[str, str],
) -> RoomRecord:
    """Build the record for one room rectangle."""
    width_m = pixels_to_meters(room.width, room.scale_x)
    height_m = pixels_to_meters(room.height, room.scale_y)

    return RoomRecord(
        id=room.id,
        width=format_meters(width_m),
        height=format_meters(height_m),
        width_label=_label_text(index.get(f"{room.id}{WIDTH_LABEL_SUFFIX}")),
        height_label=_label_text(index.get(f"{room.id}{HEIGHT_LABEL_SUFFIX}")),
        room_id_label=captions.get(room.id, room.id),
    )


def extract_rooms(objects: Iterable[Drawable]) -> dict[str, RoomRecord]:
    """
    Extract room records from all objects on a surface.

    Args:
        objects: Drawables in surface order

    Returns:
        Mapping of room identifier to RoomRecord, in discovery order
    """
    objects = list(objects)
    index = index_by_id(objects)
    captions = _caption_index(objects)

    rooms: dict[str, RoomRecord] = {}
    for obj in objects:
        if not is_room_candidate(obj):
            continue
        width_m = pixels_to_meters(obj.width, obj.scale_x)
        height_m = pixels_to_meters(obj.height, obj.scale_y)
        if not (math.isfinite(width_m) and math.isfinite(height_m)):
            logger.debug("room_skipped", room_id=obj.id, reason="non_finite_size")
            continue
        # A repeated identifier keeps its first position but takes the later geometry
        rooms[obj.id] = build_room_record(obj, index, captions)

    return rooms


def image_records(image_details: Iterable[ImageDetail]) -> list[ImageRecord]:
    """Convert caller-supplied image descriptors, keeping their order."""
    records = []
    for detail in image_details:
        records.append(ImageRecord(
            image_id=detail.image_id,
            width_label=(detail.width_label.text if detail.width_label else None) or "",
            height_label=(detail.height_label.text if detail.height_label else None) or "",
        ))
    return records


def build_export_bundle(
    objects: Iterable[Drawable],
    image_details: Iterable[ImageDetail] = (),
) -> ExportBundle:
    """Combine extracted rooms and supplied images for the dimension table."""
    bundle = ExportBundle(
        rooms=extract_rooms(objects),
        images=image_records(image_details),
    )
    logger.debug(
        "export_bundle_built",
        room_count=len(bundle.rooms),
        image_count=len(bundle.images),
        room_ids=list(bundle.rooms),
    )
    return bundle
