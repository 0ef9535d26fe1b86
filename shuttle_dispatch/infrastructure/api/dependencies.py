"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle_dispatch.adapters.feed.polling_feed import PollingBookingFeed
from shuttle_dispatch.adapters.functions_api.client import FunctionsClient
from shuttle_dispatch.adapters.functions_api.http_mutation_api import HttpMutationApi
from shuttle_dispatch.adapters.persistence.database import get_session
from shuttle_dispatch.adapters.persistence.repositories import SqlSavedViewRepository
from shuttle_dispatch.application.booking_locks import BookingLocks
from shuttle_dispatch.application.ports.booking_feed import BookingFeed
from shuttle_dispatch.application.ports.mutation_api import MutationApi
from shuttle_dispatch.application.use_cases.assignment_commands import AssignmentCommandProcessor
from shuttle_dispatch.application.use_cases.booking_commands import BookingCommandProcessor
from shuttle_dispatch.application.use_cases.dispatch_session import DispatchSession
from shuttle_dispatch.config import settings


@dataclass
class DispatchState:
    """Everything the console keeps between requests, one per app instance."""

    session: DispatchSession
    feed: BookingFeed
    assignments: AssignmentCommandProcessor
    commands: BookingCommandProcessor


def build_dispatch_state(
    mutation_api: MutationApi | None = None,
    feed: BookingFeed | None = None,
) -> DispatchState:
    client = FunctionsClient()
    mutation_api = mutation_api or HttpMutationApi(client)
    feed = feed or PollingBookingFeed(client)
    locks = BookingLocks()
    return DispatchState(
        session=DispatchSession(
            tz=settings.tz, feed_limit=settings.feed_limit, owner_id=settings.operator_id
        ),
        feed=feed,
        assignments=AssignmentCommandProcessor(
            mutation_api, feed, history_depth=settings.undo_history_depth, locks=locks
        ),
        commands=BookingCommandProcessor(mutation_api, feed, locks=locks),
    )


def get_dispatch_state(request: Request) -> DispatchState:
    return request.app.state.dispatch


def get_owner_id(x_operator_id: str | None = Header(default=None)) -> str:
    return (x_operator_id or "").strip() or settings.operator_id


def get_saved_view_repo(session: AsyncSession = Depends(get_session)) -> SqlSavedViewRepository:
    return SqlSavedViewRepository(session)
