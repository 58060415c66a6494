"""Export endpoints: watermarked PNG, dimension PDF and raw table data."""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_export_service
from src.config import get_settings
from src.export import ExportError, ExportService
from src.logging import get_logger
from src.models.entities import ExportArtifact
from src.models.schemas import ErrorResponse, ExportBundleResponse, SceneExportRequest
from src.surface import SceneCanvas

logger = get_logger(__name__)

router = APIRouter(prefix="/exports", tags=["exports"])

ERROR_RESPONSES = {
    422: {"model": ErrorResponse, "description": "Invalid canvas or unreadable snapshot"},
    500: {"model": ErrorResponse, "description": "Offscreen surface could not be created"},
    504: {"model": ErrorResponse, "description": "Snapshot or watermark load timed out"},
}


def surface_from_request(body: SceneExportRequest) -> Optional[SceneCanvas]:
    """Build the drawing surface for a request, or None when no canvas was sent."""
    if body.canvas is None:
        return None

    max_dimension = get_settings().max_canvas_dimension
    if body.canvas.width > max_dimension or body.canvas.height > max_dimension:
        raise ExportError(
            f"Canvas dimensions too large: {body.canvas.width}x{body.canvas.height}. "
            f"Maximum dimension is {max_dimension}px.",
            error_code="CANVAS_TOO_LARGE",
            details={"max_dimension": max_dimension},
        )
    return SceneCanvas.from_payload(body.canvas)


def attachment(artifact: ExportArtifact) -> Response:
    """Deliver an artifact as a file download."""
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.post(
    "/png",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "RoomPlanner.png download"},
        204: {"description": "No canvas, nothing exported"},
        **ERROR_RESPONSES,
    },
)
async def export_png(
    body: SceneExportRequest,
    service: ExportService = Depends(get_export_service),
) -> Response:
    """
    Download the canvas as a PNG stamped with the watermark.

    The watermark is drawn at 25% opacity in the four corners and the center.
    """
    artifact = await service.export_snapshot(surface_from_request(body))
    if artifact is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return attachment(artifact)


@router.post(
    "/pdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "RoomPlanner.pdf download"},
        204: {"description": "No canvas, nothing exported"},
        **ERROR_RESPONSES,
    },
)
async def export_pdf(
    body: SceneExportRequest,
    service: ExportService = Depends(get_export_service),
) -> Response:
    """
    Download a PDF with the canvas image and a table of room and image dimensions.

    Rooms are rectangles named `Room-<n>`; `imageDetails` rows follow them.
    """
    artifact = await service.export_document(surface_from_request(body), body.image_details)
    if artifact is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return attachment(artifact)


@router.post(
    "/rooms",
    response_model=ExportBundleResponse,
    responses={
        204: {"description": "No canvas, nothing exported"},
        **ERROR_RESPONSES,
    },
)
async def export_rooms(
    body: SceneExportRequest,
    service: ExportService = Depends(get_export_service),
):
    """Return the table data (room and image records) without rendering anything."""
    surface = surface_from_request(body)
    if surface is None:
        logger.warning("export_skipped", pipeline="rooms", reason="canvas_not_available")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    bundle = service.collect_bundle(surface, body.image_details)
    return ExportBundleResponse(rooms=bundle.rooms, images=bundle.images)
