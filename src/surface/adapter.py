"""Typed adapter for serialized drawing-surface objects.

The editor hands over its objects as loose dictionaries. They are parsed once,
here, into one of the drawable variants; everything downstream works on the
strict model only. Entries that cannot be parsed are dropped, never raised.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from src.logging import get_logger
from src.models.entities import Drawable, ImageShape, RectangleShape, TextLabel

logger = get_logger(__name__)

# Serialized type names mapped to the variant that represents them
VARIANT_BY_TYPE: dict[str, type] = {
    "rect": RectangleShape,
    "text": TextLabel,
    "i-text": TextLabel,
    "itext": TextLabel,
    "textbox": TextLabel,
    "image": ImageShape,
}


def parse_drawable(raw: Any) -> Optional[Drawable]:
    """Parse one serialized object into a drawable variant.

    Args:
        raw: A single entry of the surface's object list

    Returns:
        The parsed variant, or None when the entry is unsupported or malformed
    """
    if not isinstance(raw, Mapping):
        logger.debug("drawable_skipped", reason="not_a_mapping")
        return None

    shape_type = str(raw.get("type") or "").lower()
    variant = VARIANT_BY_TYPE.get(shape_type)
    if variant is None:
        logger.debug(
            "drawable_skipped",
            reason="unsupported_type",
            shape_type=shape_type or None,
            object_id=raw.get("id"),
        )
        return None

    payload = {k: v for k, v in raw.items() if k not in ("type", "kind")}
    try:
        return variant.model_validate(payload)
    except ValidationError as e:
        logger.debug(
            "drawable_skipped",
            reason="invalid_payload",
            shape_type=shape_type,
            object_id=raw.get("id"),
            error_count=e.error_count(),
        )
        return None


def parse_drawables(raw_objects: Iterable[Any]) -> list[Drawable]:
    """Parse a surface's object list, keeping surface order."""
    drawables = []
    for raw in raw_objects:
        drawable = parse_drawable(raw)
        if drawable is not None:
            drawables.append(drawable)
    return drawables
