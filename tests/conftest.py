"""Pytest fixtures for Room Planner Export tests."""

import base64
import io
import os
import tempfile
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from PIL import Image

from src.api.app import create_app
from src.api.dependencies import get_export_service
from src.export import ExportService
from src.models.entities import Drawable
from src.storage import ExportStorage
from src.surface.adapter import parse_drawables


# Set test environment
os.environ["LOG_LEVEL"] = "DEBUG"


def create_test_png(
    size: tuple[int, int] = (100, 100),
    color=(255, 255, 255, 255),
) -> bytes:
    """Create a solid-colour PNG image for testing."""
    img = Image.new("RGBA", size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(content: bytes, media_type: str = "image/png") -> str:
    return f"data:{media_type};base64,{base64.b64encode(content).decode('ascii')}"


class StaticSurface:
    """Drawing surface stub whose rendering is a fixed PNG."""

    def __init__(
        self,
        width: int,
        height: int,
        png: Optional[bytes] = None,
        objects: Optional[list[Drawable]] = None,
    ):
        self.width = width
        self.height = height
        self.png = png if png is not None else create_test_png((width, height))
        self.objects = objects or []
        self.background = None
        self.to_png_calls = 0

    def get_width(self) -> int:
        return self.width

    def get_height(self) -> int:
        return self.height

    def set_background_color(self, color: str) -> None:
        self.background = color

    def get_objects(self) -> list[Drawable]:
        return list(self.objects)

    def to_png(self) -> bytes:
        self.to_png_calls += 1
        return self.png


def room_scene_objects() -> list[dict]:
    """Serialized objects for one labelled room plus unrelated shapes."""
    return [
        {"type": "rect", "id": "Room-1", "left": 20, "top": 20,
         "width": 100, "height": 200, "scaleX": 1, "scaleY": 1,
         "fill": "transparent", "stroke": "#1e3a8a"},
        {"type": "text", "id": "Room-1-widthLabel", "text": "2m", "left": 50, "top": 5},
        {"type": "text", "id": "Room-1-heightLabel", "text": "4m", "left": 125, "top": 100},
        {"type": "line", "id": "wall-7", "x1": 0, "y1": 0, "x2": 10, "y2": 10},
        {"type": "rect", "id": "Sofa", "width": 40, "height": 20},
    ]


@pytest.fixture
def scene_objects() -> list[dict]:
    return room_scene_objects()


@pytest.fixture
def drawables(scene_objects: list[dict]) -> list[Drawable]:
    return parse_drawables(scene_objects)


@pytest.fixture
def watermark_path(tmp_path) -> str:
    """Opaque red watermark written to disk."""
    path = tmp_path / "watermark.png"
    path.write_bytes(create_test_png((20, 20), (255, 0, 0, 255)))
    return str(path)


@pytest.fixture
def test_export_dir() -> str:
    """Create a temporary export directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def test_export_storage(test_export_dir: str) -> ExportStorage:
    return ExportStorage(base_dir=test_export_dir)


@pytest.fixture
def test_export_service(test_export_storage: ExportStorage) -> ExportService:
    return ExportService(storage=test_export_storage, persist=True)


@pytest_asyncio.fixture
async def app(test_export_service: ExportService) -> FastAPI:
    """Create test application with overridden dependencies."""
    app = create_app()
    app.dependency_overrides[get_export_service] = lambda: test_export_service
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
