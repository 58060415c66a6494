"""File storage for delivered export artifacts."""

from __future__ import annotations

import aiofiles
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
from uuid import uuid4

from src.config import get_settings
from src.logging import get_logger
from src.models.entities import ExportArtifact

logger = get_logger(__name__)


class FileStorageError(Exception):
    """File storage operation error."""

    def __init__(self, message: str, error_code: str = "STORAGE_FAILURE"):
        super().__init__(message)
        self.error_code = error_code


class ExportStorage:
    """
    Keeps a copy of every delivered export.

    Storage structure:
        {base_dir}/
            {export_uuid}/
                RoomPlanner.png | RoomPlanner.pdf

    Each export gets its own directory so the delivered filename is kept as-is.
    """

    def __init__(self, base_dir: Optional[str] = None):
        settings = get_settings()
        self.base_dir = Path(base_dir or settings.export_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    async def save_artifact(self, artifact: ExportArtifact) -> Path:
        """
        Write an artifact to a fresh export directory.

        Returns:
            Path of the written file, relative to base_dir

        Raises:
            FileStorageError: If the file cannot be written
        """
        export_dir = self.base_dir / str(uuid4())
        file_path = export_dir / artifact.filename

        try:
            export_dir.mkdir(parents=True, exist_ok=False)
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(artifact.content)
        except OSError as e:
            logger.error(
                "artifact_save_failed",
                filename=artifact.filename,
                error=str(e),
            )
            raise FileStorageError(f"Failed to save export: {e}")

        relative = file_path.relative_to(self.base_dir)
        logger.info(
            "artifact_saved",
            path=str(relative),
            media_type=artifact.media_type,
            size_bytes=artifact.size_bytes,
        )
        return relative

    async def cleanup_old_exports(self, max_age_days: int = 30) -> int:
        """
        Remove export directories older than max_age_days.

        Returns the number of directories removed.
        """
        cutoff = datetime.now() - timedelta(days=max_age_days)
        cleaned = 0

        for export_dir in self.base_dir.iterdir():
            if not export_dir.is_dir():
                continue

            mtime = datetime.fromtimestamp(export_dir.stat().st_mtime)
            if mtime < cutoff:
                shutil.rmtree(export_dir)
                cleaned += 1
                logger.info(
                    "old_export_cleaned",
                    export_dir=str(export_dir),
                    age_days=(datetime.now() - mtime).days,
                )

        return cleaned

    def get_storage_stats(self) -> dict:
        """Get storage statistics."""
        total_files = 0
        total_size = 0

        for export_dir in self.base_dir.iterdir():
            if not export_dir.is_dir():
                continue
            for file_path in export_dir.iterdir():
                if file_path.is_file():
                    total_files += 1
                    total_size += file_path.stat().st_size

        return {
            "total_files": total_files,
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
        }
