"""Errors raised by the export pipelines."""

from __future__ import annotations

from typing import Optional


class ExportError(Exception):
    """Export operation error."""

    def __init__(
        self,
        message: str,
        error_code: str = "EXPORT_FAILURE",
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.details = details


class RenderingContextError(ExportError):
    """The offscreen raster for compositing could not be created."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, error_code="MISSING_RENDERING_CONTEXT", details=details)


class AssetLoadError(ExportError):
    """A snapshot or watermark image could not be decoded."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, error_code="ASSET_LOAD_FAILED", details=details)


class AssetLoadTimeoutError(ExportError):
    """The snapshot and watermark loads did not both finish in time."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, error_code="ASSET_LOAD_TIMEOUT", details=details)
