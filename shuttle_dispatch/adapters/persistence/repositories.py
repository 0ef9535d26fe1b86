"""SQLAlchemy repository implementations."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle_dispatch.adapters.persistence.models import SavedViewModel
from shuttle_dispatch.application.ports.saved_view_repo import SavedViewRepository
from shuttle_dispatch.domain.entities.booking_view import BookingView
from shuttle_dispatch.domain.value_objects.enums import BookingScope

# ─── Mappers ─────────────────────────────────────────────────────────


def _to_ms(value: datetime | None) -> int | None:
    if value is None:
        return None
    return int(value.timestamp() * 1000)


def _view_to_domain(m: SavedViewModel) -> BookingView:
    try:
        scope = BookingScope(m.scope)
    except ValueError:
        scope = BookingScope.UPCOMING
    return BookingView(
        id=m.view_id,
        name=m.name,
        scope=scope,
        status=m.status,
        driver=m.driver,
        payment=m.payment,
        created_at=_to_ms(m.created_at),
        updated_at=_to_ms(m.updated_at),
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlSavedViewRepository(SavedViewRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, owner_id: str, view: BookingView) -> BookingView:
        stmt = select(SavedViewModel).where(
            SavedViewModel.owner_id == owner_id, SavedViewModel.view_id == view.id
        )
        model = (await self._session.execute(stmt)).scalar_one_or_none()
        if model is None:
            model = SavedViewModel(owner_id=owner_id, view_id=view.id)
            self._session.add(model)
        model.name = view.name
        model.scope = view.scope.value
        model.status = view.status
        model.driver = view.driver
        model.payment = view.payment
        await self._session.commit()
        await self._session.refresh(model)
        return _view_to_domain(model)

    async def get_all(self, owner_id: str) -> list[BookingView]:
        stmt = (
            select(SavedViewModel)
            .where(SavedViewModel.owner_id == owner_id)
            .order_by(SavedViewModel.created_at, SavedViewModel.id)
        )
        result = await self._session.execute(stmt)
        return [_view_to_domain(m) for m in result.scalars().all()]

    async def delete(self, owner_id: str, view_id: str) -> bool:
        stmt = delete(SavedViewModel).where(
            SavedViewModel.owner_id == owner_id, SavedViewModel.view_id == view_id
        )
        result = await self._session.execute(stmt)
        await self._session.commit()
        return (result.rowcount or 0) > 0
