"""Tests for export orchestration."""

import pytest

from src.export import ExportService, RenderingContextError
from src.models.schemas import ImageDetail

from tests.conftest import StaticSurface


class TestMissingSurface:
    """No surface means no export and no error."""

    @pytest.mark.asyncio
    async def test_snapshot_skipped(self, test_export_service: ExportService):
        assert await test_export_service.export_snapshot(None) is None

    @pytest.mark.asyncio
    async def test_document_skipped(self, test_export_service: ExportService):
        assert await test_export_service.export_document(None, [ImageDetail(image_id="Sofa")]) is None

    @pytest.mark.asyncio
    async def test_nothing_persisted(self, test_export_service: ExportService):
        await test_export_service.export_snapshot(None)
        await test_export_service.export_document(None)
        assert test_export_service.storage.get_storage_stats()["total_files"] == 0


class TestExportSnapshot:

    @pytest.mark.asyncio
    async def test_persisted_copy_matches_delivery(self, test_export_service: ExportService):
        artifact = await test_export_service.export_snapshot(StaticSurface(60, 40))

        storage = test_export_service.storage
        saved = list(storage.base_dir.glob("*/RoomPlanner.png"))
        assert len(saved) == 1
        assert saved[0].read_bytes() == artifact.content

    @pytest.mark.asyncio
    async def test_not_persisted_by_default(self, test_export_storage):
        service = ExportService(storage=test_export_storage, persist=False)
        await service.export_snapshot(StaticSurface(60, 40))
        assert test_export_storage.get_storage_stats()["total_files"] == 0

    @pytest.mark.asyncio
    async def test_without_storage(self):
        service = ExportService(storage=None, persist=True)
        artifact = await service.export_snapshot(StaticSurface(60, 40))
        assert artifact.filename == "RoomPlanner.png"

    @pytest.mark.asyncio
    async def test_failure_is_reraised(self, test_export_service: ExportService):
        with pytest.raises(RenderingContextError):
            await test_export_service.export_snapshot(StaticSurface(0, 0, png=b""))
        assert test_export_service.storage.get_storage_stats()["total_files"] == 0


class TestExportDocument:

    @pytest.mark.asyncio
    async def test_document_persisted(self, test_export_service: ExportService, drawables):
        surface = StaticSurface(80, 60, objects=drawables)

        artifact = await test_export_service.export_document(surface)

        assert artifact.filename == "RoomPlanner.pdf"
        saved = list(test_export_service.storage.base_dir.glob("*/RoomPlanner.pdf"))
        assert len(saved) == 1

    def test_collect_bundle(self, test_export_service: ExportService, drawables):
        surface = StaticSurface(80, 60, objects=drawables)
        bundle = test_export_service.collect_bundle(surface, [ImageDetail(image_id="Sofa")])
        assert list(bundle.rooms) == ["Room-1"]
        assert [i.image_id for i in bundle.images] == ["Sofa"]
