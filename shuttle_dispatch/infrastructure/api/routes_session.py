"""Session endpoints — day, filters, view, search and selection."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from shuttle_dispatch.domain.value_objects.day_window import DayWindow
from shuttle_dispatch.infrastructure.api.dependencies import DispatchState, get_dispatch_state
from shuttle_dispatch.infrastructure.api.schemas import (
    DayRequest,
    FiltersRequest,
    SearchRequest,
    SelectionRequest,
    ViewRequest,
    serialize_view,
)

router = APIRouter(prefix="/session", tags=["session"])


@router.put("/day")
async def set_day(payload: DayRequest, state: DispatchState = Depends(get_dispatch_state)):
    session = state.session
    if payload.day is not None:
        session.set_day(DayWindow.for_date(payload.day, session.tz))
    elif payload.move == "previous":
        session.previous_day()
    elif payload.move == "next":
        session.next_day()
    elif payload.move == "today":
        session.today()
    return {"day": session.day.day.isoformat()}


@router.put("/filters")
async def set_filters(payload: FiltersRequest, state: DispatchState = Depends(get_dispatch_state)):
    state.session.set_filters(payload.to_domain())
    return payload.model_dump(mode="json")


@router.put("/view")
async def set_view(payload: ViewRequest, state: DispatchState = Depends(get_dispatch_state)):
    view = state.session.set_view(payload.view_id)
    return {"view": serialize_view(view), "selection": []}


@router.put("/search")
async def set_search(payload: SearchRequest, state: DispatchState = Depends(get_dispatch_state)):
    state.session.set_search(payload.search)
    return {"search": state.session.search}


@router.post("/selection")
async def update_selection(payload: SelectionRequest, state: DispatchState = Depends(get_dispatch_state)):
    if payload.mode == "clear":
        state.session.clear_selection()
    else:
        state.session.select(payload.booking_ids, mode=payload.mode)
    return {"selection": sorted(state.session.selection)}


@router.get("/reason-required")
async def reason_required(status: str, state: DispatchState = Depends(get_dispatch_state)):
    """Whether moving the current selection to ``status`` needs a reason code."""
    return {"status": status, "reason_required": state.session.reason_required_for(status)}
