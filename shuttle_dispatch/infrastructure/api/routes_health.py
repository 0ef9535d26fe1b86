"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle_dispatch.adapters.persistence.database import get_session
from shuttle_dispatch.infrastructure.api.dependencies import DispatchState, get_dispatch_state

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    session: AsyncSession = Depends(get_session),
    state: DispatchState = Depends(get_dispatch_state),
):
    """Check database connectivity and the live feed."""
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {e}"

    dispatch = state.session
    if dispatch.feed_error:
        feed_status = f"error: {dispatch.feed_error}"
    elif dispatch.loading:
        feed_status = "loading"
    else:
        feed_status = "live"

    healthy = db_status == "connected" and feed_status == "live"
    return {
        "status": "ok" if healthy else "degraded",
        "database": db_status,
        "feed": feed_status,
        "bookings": len(dispatch.bookings),
        "service": "Shuttle Dispatch Console",
    }
