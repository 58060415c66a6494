"""Tests for the watermarked snapshot pipeline."""

import asyncio
import io
import time

import pytest
from PIL import Image

from src.export.errors import AssetLoadError, AssetLoadTimeoutError, RenderingContextError
from src.export.watermark import (
    PNG_FILENAME,
    WATERMARK_INSET,
    WATERMARK_OPACITY,
    WATERMARK_PATH,
    StampPosition,
    composite_watermark,
    compose,
    load_assets,
    make_stamp,
    watermark_placements,
)
from src.surface.canvas import SceneCanvas

from tests.conftest import StaticSurface, create_test_png

BLUE = (0, 0, 255, 255)


class SlowSurface(StaticSurface):
    """Surface whose rendering takes longer than the test timeout."""

    def to_png(self) -> bytes:
        time.sleep(0.5)
        return super().to_png()


def open_png(content: bytes) -> Image.Image:
    return Image.open(io.BytesIO(content)).convert("RGBA")


def blended(over, under, alpha=WATERMARK_OPACITY):
    return tuple(round(o * alpha + u * (1 - alpha)) for o, u in zip(over[:3], under[:3]))


def assert_close(actual, expected, tolerance=2):
    assert all(abs(a - e) <= tolerance for a, e in zip(actual, expected)), (actual, expected)


class TestPlacements:
    """Stamp geometry for a W x H surface."""

    def test_fixed_order(self):
        positions = [p.position for p in watermark_placements(800, 600)]
        assert positions == [
            StampPosition.UPPER_LEFT,
            StampPosition.UPPER_RIGHT,
            StampPosition.LOWER_LEFT,
            StampPosition.LOWER_RIGHT,
            StampPosition.CENTER,
        ]

    def test_stamp_size_follows_each_axis(self):
        for p in watermark_placements(800, 400):
            assert p.width == pytest.approx(120)
            assert p.height == pytest.approx(60)

    def test_corner_insets(self):
        ul, ur, ll, lr, _ = watermark_placements(800, 600)
        assert (ul.x, ul.y) == (WATERMARK_INSET, WATERMARK_INSET)
        assert ur.x + ur.width == pytest.approx(800 - WATERMARK_INSET)
        assert ur.y == WATERMARK_INSET
        assert ll.x == WATERMARK_INSET
        assert ll.y + ll.height == pytest.approx(600 - WATERMARK_INSET)
        assert lr.x + lr.width == pytest.approx(800 - WATERMARK_INSET)
        assert lr.y + lr.height == pytest.approx(600 - WATERMARK_INSET)

    def test_center_stamp_is_centered(self):
        center = watermark_placements(800, 600)[-1]
        assert center.x + center.width / 2 == pytest.approx(400)
        assert center.y + center.height / 2 == pytest.approx(300)

    def test_stamps_do_not_overlap_on_regular_canvas(self):
        placements = watermark_placements(800, 600)
        boxes = [(p.x, p.y, p.x + p.width, p.y + p.height) for p in placements]
        for i, a in enumerate(boxes):
            for b in boxes[i + 1:]:
                assert a[2] <= b[0] or b[2] <= a[0] or a[3] <= b[1] or b[3] <= a[1]


class TestStamp:
    """Logo scaling and opacity."""

    def test_stamp_size_and_opacity(self):
        logo = Image.new("RGBA", (20, 20), (255, 0, 0, 255))
        stamp = make_stamp(logo, 120, 60)
        assert stamp.size == (120, 60)
        assert stamp.getpixel((60, 30))[3] == round(255 * WATERMARK_OPACITY)

    def test_transparent_logo_pixels_stay_transparent(self):
        logo = Image.new("RGBA", (20, 20), (255, 0, 0, 0))
        assert make_stamp(logo, 10, 10).getpixel((5, 5))[3] == 0

    def test_bundled_asset_is_readable(self):
        with Image.open(WATERMARK_PATH) as img:
            assert img.format == "PNG"


class TestCompose:
    """Snapshot first, then the five stamps."""

    def test_pixels_inside_and_outside_stamps(self):
        snapshot = Image.new("RGBA", (200, 100), BLUE)
        logo = Image.new("RGBA", (10, 10), (255, 0, 0, 255))
        canvas = Image.new("RGBA", (200, 100), (255, 255, 255, 255))

        result = compose(snapshot, logo, canvas)

        stamped = blended((255, 0, 0), BLUE)
        for placement in watermark_placements(200, 100):
            cx = int(placement.x + placement.width / 2)
            cy = int(placement.y + placement.height / 2)
            assert_close(result.getpixel((cx, cy)), stamped)

        # Between the upper stamps
        assert result.getpixel((60, 12)) == BLUE
        # Inside the 10 px inset
        assert result.getpixel((5, 5)) == BLUE

    def test_result_is_opaque(self):
        snapshot = Image.new("RGBA", (50, 50), (0, 0, 0, 0))
        logo = Image.new("RGBA", (10, 10), (255, 0, 0, 255))
        canvas = Image.new("RGBA", (50, 50), (255, 255, 255, 255))
        result = compose(snapshot, logo, canvas)
        assert result.getextrema()[3] == (255, 255)


class TestCompositeWatermark:
    """End-to-end snapshot export."""

    @pytest.mark.asyncio
    async def test_produces_png_artifact(self, watermark_path):
        surface = StaticSurface(200, 100, create_test_png((200, 100), BLUE))

        artifact = await composite_watermark(surface, watermark_path, timeout=5)

        assert artifact.filename == PNG_FILENAME == "RoomPlanner.png"
        assert artifact.media_type == "image/png"
        img = open_png(artifact.content)
        assert img.size == (200, 100)
        assert_close(img.getpixel((100, 50)), blended((255, 0, 0), BLUE))
        assert img.getpixel((60, 12)) == BLUE

    @pytest.mark.asyncio
    async def test_background_forced_white(self, watermark_path):
        surface = SceneCanvas(60, 40)
        artifact = await composite_watermark(surface, watermark_path, timeout=5)
        assert surface.background == "white"
        assert open_png(artifact.content).getpixel((30, 2)) == (255, 255, 255, 255)

    @pytest.mark.asyncio
    async def test_default_watermark_asset(self):
        surface = StaticSurface(100, 100)
        artifact = await composite_watermark(surface, timeout=5)
        assert open_png(artifact.content).size == (100, 100)

    @pytest.mark.asyncio
    async def test_repeated_exports_are_identical(self, watermark_path):
        surface = StaticSurface(120, 80, create_test_png((120, 80), BLUE))
        first = await composite_watermark(surface, watermark_path, timeout=5)
        second = await composite_watermark(surface, watermark_path, timeout=5)
        assert first.content == second.content

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [(0, 100), (100, 0), (-5, 10)])
    async def test_empty_surface_has_no_rendering_context(self, size, watermark_path):
        surface = StaticSurface(*size, png=b"")
        with pytest.raises(RenderingContextError) as exc_info:
            await composite_watermark(surface, watermark_path, timeout=5)
        assert exc_info.value.error_code == "MISSING_RENDERING_CONTEXT"
        assert surface.to_png_calls == 0

    @pytest.mark.asyncio
    async def test_missing_watermark_is_reported(self, tmp_path):
        surface = StaticSurface(50, 50)
        with pytest.raises(AssetLoadError) as exc_info:
            await composite_watermark(surface, tmp_path / "missing.png", timeout=5)
        assert exc_info.value.details["asset"] == "watermark"

    @pytest.mark.asyncio
    async def test_unreadable_snapshot_is_reported(self, watermark_path):
        surface = StaticSurface(50, 50, png=b"\x89PNG broken")
        with pytest.raises(AssetLoadError) as exc_info:
            await composite_watermark(surface, watermark_path, timeout=5)
        assert exc_info.value.details["asset"] == "snapshot"

    @pytest.mark.asyncio
    async def test_stalled_load_times_out(self, watermark_path):
        surface = SlowSurface(50, 50)
        with pytest.raises(AssetLoadTimeoutError) as exc_info:
            await composite_watermark(surface, watermark_path, timeout=0.05)
        assert exc_info.value.error_code == "ASSET_LOAD_TIMEOUT"
        assert exc_info.value.details == {"timeout_seconds": 0.05}


class TestLoadAssets:
    """Both loads are joined before compositing."""

    @pytest.mark.asyncio
    async def test_returns_both_images(self, watermark_path):
        from pathlib import Path

        snapshot, watermark = await load_assets(StaticSurface(30, 20), Path(watermark_path), 5)
        assert snapshot.size == (30, 20)
        assert watermark.size == (20, 20)

    @pytest.mark.asyncio
    async def test_no_tasks_left_running_after_timeout(self, watermark_path):
        from pathlib import Path

        with pytest.raises(AssetLoadTimeoutError):
            await load_assets(SlowSurface(10, 10), Path(watermark_path), 0.05)
        await asyncio.sleep(0.01)
        pending = [
            t for t in asyncio.all_tasks()
            if t is not asyncio.current_task() and not t.done()
        ]
        assert pending == []
