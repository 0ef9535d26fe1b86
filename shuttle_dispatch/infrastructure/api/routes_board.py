"""Board endpoints — the live board and a stateless compute."""

from __future__ import annotations

import logging
from datetime import timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException

from shuttle_dispatch.adapters.functions_api.record_mapper import (
    bookings_from_records,
    drivers_from_records,
)
from shuttle_dispatch.config import settings
from shuttle_dispatch.domain.entities.booking_view import BookingView
from shuttle_dispatch.domain.policies.board import compute_board
from shuttle_dispatch.domain.value_objects.day_window import DayWindow
from shuttle_dispatch.infrastructure.api.dependencies import DispatchState, get_dispatch_state
from shuttle_dispatch.infrastructure.api.schemas import (
    ComputeBoardRequest,
    serialize_board,
    serialize_view,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/board", tags=["board"])


@router.get("")
async def get_board(state: DispatchState = Depends(get_dispatch_state)):
    """Board for the operator's current day, filters, view and search."""
    session = state.session
    return {
        "day": session.day.day.isoformat(),
        "view": serialize_view(session.active_view),
        "loading": session.loading,
        "error": session.feed_error,
        "selection": sorted(session.selection),
        "undo_depth": len(state.assignments.undo_stack),
        "board": serialize_board(session.board()),
    }


@router.post("/compute")
async def compute(payload: ComputeBoardRequest):
    """Compute a board from inline records without touching the live session."""
    if payload.timezone and payload.timezone.upper() != "UTC":
        try:
            tz = ZoneInfo(payload.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise HTTPException(status_code=422, detail=f"Unknown timezone: {payload.timezone}")
    elif payload.timezone:
        tz = timezone.utc
    else:
        tz = settings.tz

    view = None
    if payload.view is not None:
        view = BookingView(
            id=payload.view.id or "inline",
            name=payload.view.name,
            scope=payload.view.scope,
            status=payload.view.status,
            driver=payload.view.driver,
            payment=payload.view.payment,
        )

    board = compute_board(
        bookings_from_records(payload.bookings),
        drivers_from_records(payload.drivers),
        DayWindow.for_date(payload.day, tz),
        payload.filters.to_domain(),
        view,
        search=payload.search,
        now_ms=payload.now_ms,
    )
    return serialize_board(board)
