"""API routes."""

from .exports import router as exports_router

__all__ = ["exports_router"]
