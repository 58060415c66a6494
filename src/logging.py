"""Structured logging configuration."""

import logging
from datetime import datetime

import structlog

from src.config import get_settings


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)


def configure_logging() -> None:
    """Configure structured logging for the application."""
    settings = get_settings()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.log_level.upper() == "DEBUG":
        # Pretty console output for development
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ExportAnalytics:
    """Logger for export outcome events."""

    def __init__(self):
        self.logger = get_logger("analytics")

    def png_exported(self, filename: str, width: int, height: int, size_bytes: int) -> None:
        """Log a delivered watermarked snapshot."""
        self.logger.info(
            "png_exported",
            filename=filename,
            width=width,
            height=height,
            size_bytes=size_bytes,
            timestamp=datetime.utcnow().isoformat(),
        )

    def pdf_exported(
        self,
        filename: str,
        room_count: int,
        image_count: int,
        size_bytes: int,
    ) -> None:
        """Log a delivered dimension document."""
        self.logger.info(
            "pdf_exported",
            filename=filename,
            room_count=room_count,
            image_count=image_count,
            size_bytes=size_bytes,
            timestamp=datetime.utcnow().isoformat(),
        )

    def export_failed(self, pipeline: str, error_code: str, error_message: str) -> None:
        """Log an export that raised."""
        self.logger.error(
            "export_failed",
            pipeline=pipeline,
            error_code=error_code,
            error_message=error_message,
            timestamp=datetime.utcnow().isoformat(),
        )


# Global analytics logger instance
analytics = ExportAnalytics()
