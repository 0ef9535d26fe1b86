"""Port interface for the booking mutation API (assign, status, pricing, sms)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from shuttle_dispatch.domain.policies.pricing import PricingAdjustment
from shuttle_dispatch.domain.value_objects.enums import SmsRecipient


@dataclass(frozen=True)
class NotifyOptions:
    sms: bool = False
    email: bool = False
    push: bool = False


@dataclass(frozen=True)
class AssignDriverRequest:
    """An empty ``driver_id`` clears the assignment."""

    booking_ids: tuple[str, ...]
    driver_id: str
    driver_name: str | None = None
    driver_phone: str | None = None
    driver_email: str | None = None
    notify: NotifyOptions = field(default_factory=NotifyOptions)


@dataclass(frozen=True)
class StatusUpdateRequest:
    booking_id: str
    status: str
    reason_code: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class PricingUpdateRequest:
    booking_id: str
    adjustment: PricingAdjustment


@dataclass(frozen=True)
class BulkSmsRequest:
    booking_ids: tuple[str, ...]
    message: str
    recipient: SmsRecipient = SmsRecipient.PASSENGER


class MutationApi(ABC):
    """Every call is fallible and raises MutationFailure on error."""

    @abstractmethod
    async def assign_driver(self, request: AssignDriverRequest) -> None:
        ...

    @abstractmethod
    async def update_booking_status(self, request: StatusUpdateRequest) -> None:
        ...

    @abstractmethod
    async def update_booking_pricing(self, request: PricingUpdateRequest) -> None:
        ...

    @abstractmethod
    async def send_bulk_sms(self, request: BulkSmsRequest) -> int:
        """Queue an SMS per booking and return the number of recipients."""
        ...
