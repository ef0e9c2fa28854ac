"""Export and preview endpoints.

Text formats preview synchronously. A pdf preview renders in the
background of the request and comes back as an in-memory handle that the
caller must release before asking for more than a few new ones.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ValidationError

from tripdoc.api.routes.sessions import Repository, require_session
from tripdoc.errors import DocumentRenderError, NotFoundError, PreviewHandleLimitError
from tripdoc.export.service import MEDIA_TYPES, ExportRequest, export_trip, preview_trip
from tripdoc.models.common import ExportFormat
from tripdoc.models.scope import Scope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["exports"])


class PdfPreviewResponse(BaseModel):
    """Response for a pdf preview: a handle to the rendered bytes."""

    handle_id: str
    sequence: int
    size: int
    page_count: int | None
    latest: bool


def build_request(
    format: Annotated[ExportFormat, Query()] = ExportFormat.pdf,
    scope: Annotated[str | None, Query(description="'full' or comma-separated sections")] = None,
    template: Annotated[str | None, Query()] = None,
    items_per_page: Annotated[int | None, Query(ge=1)] = None,
) -> ExportRequest:
    """Turn query parameters into an export request."""
    try:
        parsed_scope = Scope.parse(scope)
    except (ValueError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid scope {scope!r}",
        ) from e
    return ExportRequest(
        format=format, scope=parsed_scope, template=template, items_per_page=items_per_page
    )


def render_failed(error: DocumentRenderError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"section": error.section, "page": error.page, "message": error.message},
    )


@router.get("/sessions/{session_id}/preview", response_model=None)
async def preview(
    session_id: str,
    request: Annotated[ExportRequest, Depends(build_request)],
    repository: Repository,
) -> PlainTextResponse | PdfPreviewResponse:
    """Preview an export of the current working copy.

    Returns:
        The encoded text for json, text and ical; a preview handle for pdf

    Raises:
        HTTPException: 404 unknown session or one closed while rendering,
            409 too many unreleased handles, 502 if rendering failed
    """
    session = require_session(repository, session_id)

    if request.format != ExportFormat.pdf:
        body = preview_trip(session.store, request, session_id=session_id)
        return PlainTextResponse(body, media_type=MEDIA_TYPES[request.format])

    previews = repository.previews
    try:
        previews.ensure_capacity(session_id)
    except PreviewHandleLimitError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    sequence = previews.next_sequence(session_id)
    try:
        artifact = await export_trip(session.store, request, session_id=session_id)
    except DocumentRenderError as e:
        raise render_failed(e) from e

    # The session may have been closed while the document rendered
    try:
        if repository.get(session_id) is None:
            raise NotFoundError(f"Session {session_id} not found")
        handle = previews.issue(session_id, sequence, artifact.content, artifact.media_type)
    except NotFoundError as e:
        logger.info("Discarded preview %d for closed session %s", sequence, session_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except PreviewHandleLimitError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return PdfPreviewResponse(
        handle_id=handle.handle_id,
        sequence=handle.sequence,
        size=handle.size,
        page_count=artifact.page_count,
        latest=previews.is_latest(session_id, sequence),
    )


@router.get("/sessions/{session_id}/export")
async def export(
    session_id: str,
    request: Annotated[ExportRequest, Depends(build_request)],
    repository: Repository,
) -> Response:
    """Download an export of the current working copy.

    A failed export leaves the working copy untouched; retrying is safe.
    """
    session = require_session(repository, session_id)
    try:
        artifact = await export_trip(session.store, request, session_id=session_id)
    except DocumentRenderError as e:
        raise render_failed(e) from e

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get("/previews/{handle_id}")
async def get_preview(
    handle_id: str,
    repository: Repository,
) -> Response:
    """Serve the bytes behind a preview handle."""
    handle = repository.previews.get(handle_id)
    if handle is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Preview {handle_id} not found",
        )
    return Response(content=handle.content, media_type=handle.media_type)


@router.delete("/previews/{handle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def release_preview(handle_id: str, repository: Repository) -> Response:
    """Release a preview handle. Releasing twice is harmless."""
    if repository.previews.release(handle_id):
        logger.debug("Released preview %s", handle_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
