"""Export session endpoints - open a working copy, edit it, take snapshots."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, ValidationError

from tripdoc.errors import NotFoundError
from tripdoc.models.common import SectionKey
from tripdoc.models.item import ItemPatch, ItineraryItem
from tripdoc.models.trip import TripSnapshot, TripSource
from tripdoc.store.sessions import (
    ExportSession,
    InMemorySessionRepository,
    get_session_repository,
)
from tripdoc.store.working_copy import ENTRY_TYPES, WorkingCopyStore

router = APIRouter(prefix="/sessions", tags=["sessions"])

Repository = Annotated[InMemorySessionRepository, Depends(get_session_repository)]


class ItemView(BaseModel):
    """An itinerary item together with its stable id."""

    stable_id: str
    item: ItineraryItem


class SessionResponse(BaseModel):
    """Response for session endpoints."""

    session_id: str
    revision: int
    days: dict[str, list[ItemView]]


class AddItemRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/items."""

    date: str = Field(..., description="ISO date of the target day")
    item: ItineraryItem


class AddItemResponse(BaseModel):
    """Response for POST /sessions/{session_id}/items."""

    stable_id: str
    revision: int


class ReorderRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/items/reorder."""

    date: str
    from_index: int
    to_index: int


class AutofillResponse(BaseModel):
    """Response for POST /sessions/{session_id}/autofill."""

    changed: int
    revision: int


class AppendEntryResponse(BaseModel):
    """Response for POST /sessions/{session_id}/lists/{section}."""

    index: int
    revision: int


def require_session(repository: InMemorySessionRepository, session_id: str) -> ExportSession:
    """Look up a session or fail with 404."""
    session = repository.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return session


def session_response(session: ExportSession) -> SessionResponse:
    store = session.store
    return SessionResponse(
        session_id=session.session_id,
        revision=store.revision,
        days={
            date: [ItemView(stable_id=item.stable_id, item=item) for item in store.items_for(date)]
            for date in store.dates()
        },
    )


def _aux_section(section: SectionKey) -> SectionKey:
    if section not in ENTRY_TYPES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{section.value} is not an auxiliary list",
        )
    return section


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def open_session(source: TripSource, repository: Repository) -> SessionResponse:
    """Open an export session on a fresh working copy of ``source``.

    The payload is copied; nothing done in the session touches it.
    """
    return session_response(repository.open(source))


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, repository: Repository) -> SessionResponse:
    """Current state of a session's working copy."""
    return session_response(require_session(repository, session_id))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: str, repository: Repository) -> Response:
    """Discard the working copy and release its preview handles."""
    if not repository.close(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{session_id}/snapshot", response_model=TripSnapshot)
async def get_snapshot(session_id: str, repository: Repository) -> TripSnapshot:
    """Detached copy of the working copy, for committing edits back."""
    return require_session(repository, session_id).store.snapshot_for_export()


# Itinerary items


@router.post(
    "/{session_id}/items", response_model=AddItemResponse, status_code=status.HTTP_201_CREATED
)
async def add_item(
    session_id: str, request: AddItemRequest, repository: Repository
) -> AddItemResponse:
    """Append an item to a day. The server always mints the stable id."""
    store = require_session(repository, session_id).store
    item = request.item.model_copy()
    item.stable_id = None
    try:
        stable_id = store.add_item(request.date, item)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return AddItemResponse(stable_id=stable_id, revision=store.revision)


@router.post("/{session_id}/items/reorder", response_model=SessionResponse)
async def reorder_items(
    session_id: str, request: ReorderRequest, repository: Repository
) -> SessionResponse:
    """Move an item within its day. Out-of-range indices change nothing."""
    session = require_session(repository, session_id)
    session.store.reorder(request.date, request.from_index, request.to_index)
    return session_response(session)


@router.patch("/{session_id}/items/{stable_id}", response_model=ItemView)
async def update_item(
    session_id: str, stable_id: str, patch: ItemPatch, repository: Repository
) -> ItemView:
    """Merge a partial update into one item.

    Raises:
        HTTPException: 404 if the item was removed, 422 if the merge is invalid
    """
    store = require_session(repository, session_id).store
    try:
        updated = store.update_item(stable_id, patch)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e
    return ItemView(stable_id=stable_id, item=updated)


@router.delete("/{session_id}/items/{stable_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item(session_id: str, stable_id: str, repository: Repository) -> Response:
    """Remove an item. Removing an absent item is not an error."""
    require_session(repository, session_id).store.remove_item(stable_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/autofill", response_model=AutofillResponse)
async def autofill(session_id: str, repository: Repository) -> AutofillResponse:
    """Backfill missing destinations and arrival times on transport items."""
    store: WorkingCopyStore = require_session(repository, session_id).store
    changed = store.auto_fill_transport_fields()
    return AutofillResponse(changed=changed, revision=store.revision)


# Auxiliary lists


@router.post(
    "/{session_id}/lists/{section}",
    response_model=AppendEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def append_entry(
    session_id: str,
    section: SectionKey,
    entry: Annotated[dict[str, Any], Body()],
    repository: Repository,
) -> AppendEntryResponse:
    """Append an entry to shopping, budget, packing or emergency."""
    store = require_session(repository, session_id).store
    try:
        index = store.append_entry(_aux_section(section), entry)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e
    return AppendEntryResponse(index=index, revision=store.revision)


@router.patch("/{session_id}/lists/{section}/{index}")
async def update_entry(
    session_id: str,
    section: SectionKey,
    index: int,
    patch: Annotated[dict[str, Any], Body()],
    repository: Repository,
) -> dict[str, Any]:
    """Merge a partial update into one list entry."""
    store = require_session(repository, session_id).store
    try:
        updated = store.update_entry(_aux_section(section), index, patch)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e
    return updated.model_dump(mode="json")


@router.delete("/{session_id}/lists/{section}/{index}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_entry(
    session_id: str, section: SectionKey, index: int, repository: Repository
) -> Response:
    """Remove one list entry. Out-of-range indices are ignored."""
    require_session(repository, session_id).store.remove_entry(_aux_section(section), index)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
