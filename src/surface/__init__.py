"""Drawing-surface boundary: typed adapter and surface implementation."""

from .adapter import parse_drawable, parse_drawables
from .canvas import DrawingSurface, SceneCanvas, decode_data_url

__all__ = [
    "parse_drawable",
    "parse_drawables",
    "DrawingSurface",
    "SceneCanvas",
    "decode_data_url",
]
