"""Export orchestration for both pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from src.config import get_settings
from src.logging import analytics, get_logger
from src.models.entities import ExportArtifact, ExportBundle
from src.models.schemas import ImageDetail
from src.storage.file_storage import ExportStorage
from .document import build_document
from .errors import ExportError
from .extractor import build_export_bundle
from .watermark import composite_watermark

if TYPE_CHECKING:
    from src.surface.canvas import DrawingSurface

logger = get_logger(__name__)


class ExportService:
    """
    Runs the snapshot and document pipelines.

    A missing surface is not an error: the export is skipped, logged, and
    None is returned. Every invocation works on its own images and bundle.
    """

    def __init__(
        self,
        storage: Optional[ExportStorage] = None,
        persist: Optional[bool] = None,
    ):
        self.storage = storage
        self.persist = get_settings().persist_exports if persist is None else persist

    async def export_snapshot(
        self,
        surface: Optional["DrawingSurface"],
    ) -> Optional[ExportArtifact]:
        """Watermarked PNG of the surface, or None without a surface."""
        if surface is None:
            logger.warning("export_skipped", pipeline="png", reason="canvas_not_available")
            return None

        try:
            artifact = await composite_watermark(surface)
        except ExportError as e:
            analytics.export_failed("png", e.error_code, str(e))
            raise

        analytics.png_exported(
            artifact.filename,
            surface.get_width(),
            surface.get_height(),
            artifact.size_bytes,
        )
        await self._deliver(artifact)
        return artifact

    def collect_bundle(
        self,
        surface: "DrawingSurface",
        image_details: Iterable[ImageDetail] = (),
    ) -> ExportBundle:
        """Room and image records for a surface."""
        return build_export_bundle(surface.get_objects(), image_details)

    async def export_document(
        self,
        surface: Optional["DrawingSurface"],
        image_details: Iterable[ImageDetail] = (),
    ) -> Optional[ExportArtifact]:
        """PDF with the snapshot and dimension table, or None without a surface."""
        if surface is None:
            logger.warning("export_skipped", pipeline="pdf", reason="canvas_not_available")
            return None

        bundle = self.collect_bundle(surface, image_details)
        try:
            artifact = await build_document(surface, bundle)
        except ExportError as e:
            analytics.export_failed("pdf", e.error_code, str(e))
            raise

        analytics.pdf_exported(
            artifact.filename,
            len(bundle.rooms),
            len(bundle.images),
            artifact.size_bytes,
        )
        await self._deliver(artifact)
        return artifact

    async def _deliver(self, artifact: ExportArtifact) -> None:
        if self.persist and self.storage is not None:
            await self.storage.save_artifact(artifact)
