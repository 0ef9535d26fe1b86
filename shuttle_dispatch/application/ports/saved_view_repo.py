"""Port interface for saved booking view persistence."""

from abc import ABC, abstractmethod

from shuttle_dispatch.domain.entities.booking_view import BookingView


class SavedViewRepository(ABC):
    @abstractmethod
    async def save(self, owner_id: str, view: BookingView) -> BookingView:
        ...

    @abstractmethod
    async def get_all(self, owner_id: str) -> list[BookingView]:
        """Saved views of one operator, oldest first."""
        ...

    @abstractmethod
    async def delete(self, owner_id: str, view_id: str) -> bool:
        ...
