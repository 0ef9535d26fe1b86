"""BookingCommandProcessor — bulk status, pricing and SMS actions on selected bookings."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from shuttle_dispatch.application.booking_locks import BookingLocks
from shuttle_dispatch.application.ports.booking_feed import BookingFeed
from shuttle_dispatch.application.ports.mutation_api import (
    BulkSmsRequest,
    MutationApi,
    PricingUpdateRequest,
    StatusUpdateRequest,
)
from shuttle_dispatch.application.use_cases.command_result import (
    CommandResult,
    as_mutation_failure,
    plural_bookings,
)
from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.errors import MutationFailure, ValidationError
from shuttle_dispatch.domain.policies.pricing import PricingForm, build_adjustment
from shuttle_dispatch.domain.policies.status_transitions import (
    bulk_requires_reason,
    status_label,
    validate_transition,
)
from shuttle_dispatch.domain.value_objects.enums import SmsRecipient, Tone
from shuttle_dispatch.domain.value_objects.toast import Toast

logger = logging.getLogger(__name__)


class BookingCommandProcessor:
    def __init__(
        self,
        mutation_api: MutationApi,
        feed: BookingFeed | None = None,
        locks: BookingLocks | None = None,
    ):
        self._api = mutation_api
        self._feed = feed
        self._locks = locks or BookingLocks()

    async def apply_status(
        self,
        bookings: Sequence[Booking],
        status: str,
        reason_code: str = "",
        note: str = "",
    ) -> CommandResult:
        """Move every selected booking to ``status``.

        Validation covers the whole batch before the first request: an invalid
        transition on any booking, or a missing reason when any booking needs
        one, rejects the batch.
        """
        booking_ids = [b.id for b in bookings]
        try:
            if not bookings:
                raise ValidationError("Choose at least one booking to update.", title="Select bookings")
            reason_required = bulk_requires_reason((b.current_status() for b in bookings), status)
            for booking in bookings:
                validate_transition(
                    booking.current_status(), status, reason_code, reason_required=reason_required
                )
        except ValidationError as exc:
            logger.warning("Status change to %s rejected: %s", status, exc)
            return CommandResult.rejected(exc, booking_ids)

        requests = [
            StatusUpdateRequest(
                booking_id=booking.id,
                status=status,
                reason_code=reason_code.strip() or None,
                note=note.strip() or None,
            )
            for booking in bookings
        ]
        failures = await self._run_each(
            requests, lambda request: self._guarded(request.booking_id, self._api.update_booking_status(request))
        )
        label = status_label(status)
        if failures:
            return await self._partial_failure("Unable to update status", failures, len(requests), booking_ids)

        logger.info("Status %s applied to %s", status, ", ".join(booking_ids))
        await self._refresh()
        return CommandResult.success(
            "Statuses updated", f"Applied {label} to {plural_bookings(len(requests))}.", booking_ids
        )

    async def apply_pricing(self, bookings: Sequence[Booking], form: PricingForm) -> CommandResult:
        booking_ids = [b.id for b in bookings]
        try:
            if not bookings:
                raise ValidationError(
                    "Choose at least one booking before adjusting pricing.", title="Select bookings"
                )
            adjustment = build_adjustment(form)
        except ValidationError as exc:
            logger.warning("Pricing adjustment rejected: %s", exc)
            return CommandResult.rejected(exc, booking_ids)

        requests = [PricingUpdateRequest(booking_id=b.id, adjustment=adjustment) for b in bookings]
        failures = await self._run_each(
            requests, lambda request: self._guarded(request.booking_id, self._api.update_booking_pricing(request))
        )
        if failures:
            return await self._partial_failure("Pricing update failed", failures, len(requests), booking_ids)

        logger.info(
            "Pricing (total=%d, reason=%s) applied to %s",
            adjustment.total_cents, adjustment.reason_code, ", ".join(booking_ids),
        )
        await self._refresh()
        return CommandResult.success(
            "Pricing updated", f"Applied adjustments to {plural_bookings(len(requests))}.", booking_ids
        )

    async def send_sms(
        self,
        bookings: Sequence[Booking],
        message: str,
        recipient: SmsRecipient = SmsRecipient.PASSENGER,
    ) -> CommandResult:
        booking_ids = tuple(b.id for b in bookings)
        if not bookings:
            return CommandResult.rejected(
                ValidationError("Choose at least one booking to message.", title="Select bookings")
            )
        if not message.strip():
            return CommandResult.rejected(
                ValidationError("Enter a short SMS update before sending.", title="Message required"),
                booking_ids,
            )

        request = BulkSmsRequest(booking_ids=booking_ids, message=message.strip(), recipient=recipient)
        try:
            total = await self._api.send_bulk_sms(request)
        except Exception as exc:
            logger.exception("Bulk SMS to %d booking(s) failed", len(booking_ids))
            return CommandResult.failed("SMS failed", as_mutation_failure(exc), booking_ids)

        total = total if total is not None else len(booking_ids)
        logger.info("Bulk SMS queued: %d recipient(s) for %d booking(s)", total, len(booking_ids))
        return CommandResult.success(
            "SMS sent", f"Queued {total} message(s).", booking_ids, total_recipients=total
        )

    async def _guarded(self, booking_id: str, call: Awaitable[None]) -> None:
        async with self._locks.hold([booking_id]):
            await call

    @staticmethod
    async def _run_each(requests, send: Callable) -> list[tuple[str, MutationFailure]]:
        outcomes = await asyncio.gather(*(send(request) for request in requests), return_exceptions=True)
        failures = []
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error("Mutation for booking %s failed: %s", request.booking_id, outcome)
                failures.append((request.booking_id, as_mutation_failure(outcome)))
        return failures

    async def _partial_failure(
        self,
        title: str,
        failures: list[tuple[str, MutationFailure]],
        attempted: int,
        booking_ids: list[str],
    ) -> CommandResult:
        first_error = failures[0][1]
        if len(failures) == attempted:
            return CommandResult.failed(title, first_error, booking_ids)
        # Some went through; the feed will show them once it reconciles.
        await self._refresh()
        description = f"{len(failures)} of {plural_bookings(attempted)} failed: {first_error}"
        return CommandResult(
            ok=False,
            toast=Toast(title, description, Tone.DANGER),
            booking_ids=tuple(booking_ids),
            error=first_error,
        )

    async def _refresh(self) -> None:
        if self._feed is None:
            return
        try:
            await self._feed.refresh()
        except Exception:
            logger.exception("Feed refresh request failed")
