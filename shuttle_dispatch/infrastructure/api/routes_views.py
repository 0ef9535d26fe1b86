"""Saved view endpoints — list, save, delete.

Views are stored per operator (``X-Operator-Id``). Only the operator who owns
the live dispatch session changes that session's view list; everyone else
reads and writes their own views without touching it.
"""

from __future__ import annotations

import logging
import re
import uuid

from fastapi import APIRouter, Depends, HTTPException

from shuttle_dispatch.application.ports.saved_view_repo import SavedViewRepository
from shuttle_dispatch.domain.entities.booking_view import BookingView
from shuttle_dispatch.domain.policies.queue_filters import compose_views, is_default_view
from shuttle_dispatch.infrastructure.api.dependencies import (
    DispatchState,
    get_dispatch_state,
    get_owner_id,
    get_saved_view_repo,
)
from shuttle_dispatch.infrastructure.api.schemas import SaveViewRequest, serialize_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/views", tags=["views"])


def _slug(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"{slug[:40] or 'view'}-{uuid.uuid4().hex[:6]}"


def _active_for(owner_id: str, state: DispatchState, views: list[BookingView]) -> str:
    session = state.session
    if owner_id == session.owner_id and any(v.id == session.active_view.id for v in views):
        return session.active_view.id
    return views[0].id


async def _sync_session(owner_id: str, repo: SavedViewRepository, state: DispatchState) -> None:
    if owner_id == state.session.owner_id:
        state.session.set_saved_views(await repo.get_all(owner_id))


@router.get("")
async def list_views(
    owner_id: str = Depends(get_owner_id),
    repo: SavedViewRepository = Depends(get_saved_view_repo),
    state: DispatchState = Depends(get_dispatch_state),
):
    """Built-in views followed by the operator's saved views."""
    views = compose_views(await repo.get_all(owner_id))
    return {
        "active": _active_for(owner_id, state, views),
        "views": [serialize_view(v) for v in views],
    }


@router.post("")
async def save_view(
    payload: SaveViewRequest,
    owner_id: str = Depends(get_owner_id),
    repo: SavedViewRepository = Depends(get_saved_view_repo),
    state: DispatchState = Depends(get_dispatch_state),
):
    view_id = payload.id or _slug(payload.name)
    if is_default_view(view_id):
        raise HTTPException(status_code=422, detail="Built-in views cannot be overwritten")
    saved = await repo.save(
        owner_id,
        BookingView(
            id=view_id,
            name=payload.name.strip(),
            scope=payload.scope,
            status=payload.status,
            driver=payload.driver,
            payment=payload.payment,
        ),
    )
    logger.info("Saved view %s for %s", saved.id, owner_id)
    await _sync_session(owner_id, repo, state)
    return serialize_view(saved)


@router.delete("/{view_id}")
async def delete_view(
    view_id: str,
    owner_id: str = Depends(get_owner_id),
    repo: SavedViewRepository = Depends(get_saved_view_repo),
    state: DispatchState = Depends(get_dispatch_state),
):
    if is_default_view(view_id):
        raise HTTPException(status_code=422, detail="Built-in views cannot be deleted")
    if not await repo.delete(owner_id, view_id):
        raise HTTPException(status_code=404, detail="View not found")
    logger.info("Deleted view %s for %s", view_id, owner_id)
    await _sync_session(owner_id, repo, state)
    views = compose_views(await repo.get_all(owner_id))
    return {"deleted": view_id, "active": _active_for(owner_id, state, views)}
