"""FastAPI dependencies for dependency injection."""

from src.config import get_settings
from src.export import ExportService
from src.storage import ExportStorage


def get_export_storage() -> ExportStorage:
    """Dependency to get export storage instance."""
    return ExportStorage()


def get_export_service() -> ExportService:
    """
    Dependency to get the export service.

    Storage is only touched when exports are persisted.
    """
    settings = get_settings()
    storage = get_export_storage() if settings.persist_exports else None
    return ExportService(storage=storage, persist=settings.persist_exports)
