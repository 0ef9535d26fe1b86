"""Shuttle Dispatch Console — FastAPI application factory."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shuttle_dispatch.adapters.persistence.database import async_session_factory, engine
from shuttle_dispatch.adapters.persistence.repositories import SqlSavedViewRepository
from shuttle_dispatch.config import settings
from shuttle_dispatch.infrastructure.api.dependencies import DispatchState, build_dispatch_state
from shuttle_dispatch.infrastructure.api.routes_board import router as board_router
from shuttle_dispatch.infrastructure.api.routes_commands import router as commands_router
from shuttle_dispatch.infrastructure.api.routes_health import router as health_router
from shuttle_dispatch.infrastructure.api.routes_session import router as session_router
from shuttle_dispatch.infrastructure.api.routes_views import router as views_router

logger = logging.getLogger(__name__)


async def _load_saved_views(state: DispatchState) -> None:
    try:
        async with async_session_factory() as session:
            views = await SqlSavedViewRepository(session).get_all(state.session.owner_id)
        state.session.set_saved_views(views)
        logger.info("Loaded %d saved view(s)", len(views))
    except Exception as e:
        logger.warning("Saved views not available on startup: %s", e)


def create_app(dispatch_state: DispatchState | None = None, start_feed: bool | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        state = dispatch_state or build_dispatch_state()
        app.state.dispatch = state
        await _load_saved_views(state)

        feed_task = None
        if settings.feed_enabled if start_feed is None else start_feed:
            feed_task = asyncio.create_task(state.session.follow(state.feed))
            logger.info("Live feed started (poll every %.0fs)", settings.feed_poll_seconds)
        yield
        if feed_task is not None:
            feed_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await feed_task
        await engine.dispose()

    app = FastAPI(
        title="Shuttle Dispatch Console",
        description="Day board, driver timelines, assignment with undo, and bulk booking actions",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(board_router, prefix="/api")
    app.include_router(session_router, prefix="/api")
    app.include_router(commands_router, prefix="/api")
    app.include_router(views_router, prefix="/api")

    return app


app = create_app()
