"""HTTP interface for the room planner exporter."""

from .app import create_app

__all__ = ["create_app"]
