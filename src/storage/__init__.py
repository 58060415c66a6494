"""Storage layer for delivered exports."""

from .file_storage import ExportStorage, FileStorageError

__all__ = [
    "ExportStorage",
    "FileStorageError",
]
