"""Cloud-functions mutation adapter — implements MutationApi."""

from __future__ import annotations

import logging

from shuttle_dispatch.adapters.functions_api.client import FunctionsCallError, FunctionsClient
from shuttle_dispatch.application.ports.mutation_api import (
    AssignDriverRequest,
    BulkSmsRequest,
    MutationApi,
    PricingUpdateRequest,
    StatusUpdateRequest,
)
from shuttle_dispatch.domain.errors import MutationFailure

logger = logging.getLogger(__name__)


class HttpMutationApi(MutationApi):
    def __init__(self, client: FunctionsClient | None = None):
        self._client = client or FunctionsClient()

    async def _post(self, endpoint: str, body: dict) -> dict:
        try:
            return await self._client.call(endpoint, json=body)
        except FunctionsCallError as exc:
            raise MutationFailure(str(exc), status_code=exc.status_code, payload=exc.payload) from exc

    async def assign_driver(self, request: AssignDriverRequest) -> None:
        await self._post(
            "assignDriver",
            {
                "bookingIds": list(request.booking_ids),
                "driverId": request.driver_id,
                "driverName": request.driver_name,
                "driverContact": {"phone": request.driver_phone, "email": request.driver_email},
                "notify": {
                    "sms": request.notify.sms,
                    "email": request.notify.email,
                    "push": request.notify.push,
                },
            },
        )

    async def update_booking_status(self, request: StatusUpdateRequest) -> None:
        body: dict = {"bookingId": request.booking_id, "status": request.status}
        if request.reason_code:
            body["reasonCode"] = request.reason_code
        if request.note:
            body["note"] = request.note
        await self._post("updateBookingStatus", body)

    async def update_booking_pricing(self, request: PricingUpdateRequest) -> None:
        adjustment = request.adjustment
        body: dict = {
            "bookingId": request.booking_id,
            "baseCents": adjustment.base_cents,
            "gstCents": adjustment.gst_cents,
            "tipCents": adjustment.tip_cents,
            "totalCents": adjustment.total_cents,
            "reasonCode": adjustment.reason_code,
            "requireSecondApproval": adjustment.require_second_approval,
        }
        if adjustment.reason_note:
            body["reasonNote"] = adjustment.reason_note
        await self._post("updateBookingPricing", body)

    async def send_bulk_sms(self, request: BulkSmsRequest) -> int:
        response = await self._post(
            "sendBulkBookingSms",
            {
                "bookingIds": list(request.booking_ids),
                "message": request.message,
                "recipient": request.recipient.value,
            },
        )
        total = response.get("totalRecipients")
        if isinstance(total, int) and not isinstance(total, bool):
            return total
        logger.warning("sendBulkBookingSms returned no totalRecipients; assuming one per booking")
        return len(request.booking_ids)
