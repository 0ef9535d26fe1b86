"""Command endpoints — assign, unassign, undo, status, pricing and SMS."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shuttle_dispatch.application.use_cases.command_result import CommandResult
from shuttle_dispatch.application.use_cases.dispatch_session import DispatchSession
from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.errors import MutationFailure, UndoFailure, ValidationError
from shuttle_dispatch.domain.policies.pricing import PricingForm
from shuttle_dispatch.infrastructure.api.dependencies import DispatchState, get_dispatch_state
from shuttle_dispatch.infrastructure.api.schemas import (
    AssignRequest,
    PricingRequest,
    SmsRequest,
    StatusRequest,
    UnassignRequest,
    serialize_result,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/commands", tags=["commands"])


def _respond(result: CommandResult) -> JSONResponse:
    """200 for success and no-op warnings, 422 for rejected input, 502 for upstream failures."""
    if isinstance(result.error, ValidationError):
        status_code = 422
    elif isinstance(result.error, (MutationFailure, UndoFailure)):
        status_code = 502
    else:
        status_code = 200
    return JSONResponse(status_code=status_code, content=serialize_result(result))


def _targets(session: DispatchSession, booking_ids: list[str] | None) -> list[Booking]:
    if booking_ids is None:
        return session.selected_bookings()
    return session.bookings_by_ids(booking_ids)


def _resolve_driver(session: DispatchSession, payload: AssignRequest) -> Driver:
    known = session.driver(payload.driver_id.strip())
    if known is None:
        return Driver(
            id=payload.driver_id.strip(),
            name=payload.driver_name or payload.driver_id.strip(),
            phone=payload.driver_phone,
            email=payload.driver_email,
        )
    return Driver(
        id=known.id,
        name=payload.driver_name or known.name,
        phone=payload.driver_phone or known.phone,
        email=payload.driver_email or known.email,
        vehicle=known.vehicle,
    )


@router.post("/assign")
async def assign(payload: AssignRequest, state: DispatchState = Depends(get_dispatch_state)):
    session = state.session
    result = await state.assignments.assign(
        _targets(session, payload.booking_ids),
        _resolve_driver(session, payload),
        payload.notify.to_domain(),
    )
    if result.ok:
        session.clear_selection()
    return _respond(result)


@router.post("/unassign")
async def unassign(payload: UnassignRequest, state: DispatchState = Depends(get_dispatch_state)):
    session = state.session
    result = await state.assignments.unassign(
        _targets(session, payload.booking_ids), payload.notify.to_domain()
    )
    if result.ok:
        session.clear_selection()
    return _respond(result)


@router.post("/undo")
async def undo(state: DispatchState = Depends(get_dispatch_state)):
    result = await state.assignments.undo(state.session.booking)
    return _respond(result)


@router.post("/status")
async def apply_status(payload: StatusRequest, state: DispatchState = Depends(get_dispatch_state)):
    result = await state.commands.apply_status(
        _targets(state.session, payload.booking_ids),
        payload.status,
        payload.reason_code,
        payload.note,
    )
    return _respond(result)


@router.post("/pricing")
async def apply_pricing(payload: PricingRequest, state: DispatchState = Depends(get_dispatch_state)):
    form = PricingForm(
        base=payload.base,
        gst=payload.gst,
        total=payload.total,
        tip=payload.tip,
        reason_code=payload.reason_code,
        reason_note=payload.reason_note,
        require_second_approval=payload.require_second_approval,
    )
    result = await state.commands.apply_pricing(_targets(state.session, payload.booking_ids), form)
    return _respond(result)


@router.post("/sms")
async def send_sms(payload: SmsRequest, state: DispatchState = Depends(get_dispatch_state)):
    result = await state.commands.send_sms(
        _targets(state.session, payload.booking_ids), payload.message, payload.recipient
    )
    return _respond(result)
