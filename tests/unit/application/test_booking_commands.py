"""Tests for BookingCommandProcessor — status, pricing and SMS."""

from __future__ import annotations

import pytest

from shuttle_dispatch.application.use_cases.booking_commands import BookingCommandProcessor
from shuttle_dispatch.domain.errors import MutationFailure, ValidationError
from shuttle_dispatch.domain.policies.pricing import PricingForm
from shuttle_dispatch.domain.value_objects.enums import SmsRecipient, Tone
from tests.factories import make_booking

# ─── status ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_status_update_for_each_booking(mutation_api, feed):
    processor = BookingCommandProcessor(mutation_api, feed)
    bookings = [make_booking("b1", status="confirmed"), make_booking("b2", status="confirmed")]

    result = await processor.apply_status(bookings, "assigned", note="  morning run ")

    assert result.ok
    assert result.toast.title == "Statuses updated"
    assert result.toast.description == "Applied Assigned to 2 bookings."
    assert sorted(r.booking_id for r in mutation_api.status_calls) == ["b1", "b2"]
    assert all(r.note == "morning run" and r.reason_code is None for r in mutation_api.status_calls)
    assert feed.refreshes == 1


@pytest.mark.asyncio
async def test_mixed_batch_needing_reason_is_rejected_without_calls(mutation_api):
    processor = BookingCommandProcessor(mutation_api)
    bookings = [make_booking("b1", status="pending"), make_booking("b2", status="assigned")]

    result = await processor.apply_status(bookings, "confirmed")

    assert not result.ok
    assert isinstance(result.error, ValidationError)
    assert result.toast.title == "Reason required"
    assert mutation_api.status_calls == []


@pytest.mark.asyncio
async def test_mixed_batch_with_reason_goes_through(mutation_api):
    processor = BookingCommandProcessor(mutation_api)
    bookings = [make_booking("b1", status="pending"), make_booking("b2", status="assigned")]

    result = await processor.apply_status(bookings, "confirmed", reason_code="operational_override")

    assert result.ok
    assert {r.reason_code for r in mutation_api.status_calls} == {"operational_override"}


@pytest.mark.asyncio
async def test_undefined_transition_rejects_whole_batch(mutation_api):
    processor = BookingCommandProcessor(mutation_api)
    bookings = [make_booking("b1", status="confirmed"), make_booking("b2", status="completed")]

    result = await processor.apply_status(bookings, "assigned")

    assert result.toast.title == "Invalid status change"
    assert mutation_api.status_calls == []


@pytest.mark.asyncio
async def test_empty_selection_is_rejected(mutation_api):
    result = await BookingCommandProcessor(mutation_api).apply_status([], "assigned")
    assert result.toast.title == "Select bookings"


@pytest.mark.asyncio
async def test_partial_failure_is_reported(mutation_api, feed):
    mutation_api.fail_ids = {"b2"}
    processor = BookingCommandProcessor(mutation_api, feed)
    bookings = [make_booking(f"b{i}", status="confirmed") for i in range(1, 4)]

    result = await processor.apply_status(bookings, "assigned")

    assert not result.ok
    assert isinstance(result.error, MutationFailure)
    assert result.toast.tone == Tone.DANGER
    assert result.toast.description.startswith("1 of 3 bookings failed")
    assert len(mutation_api.status_calls) == 3
    assert feed.refreshes == 1


@pytest.mark.asyncio
async def test_total_failure(mutation_api, feed):
    mutation_api.fail_all = True
    processor = BookingCommandProcessor(mutation_api, feed)

    result = await processor.apply_status([make_booking("b1", status="confirmed")], "assigned")

    assert result.toast.title == "Unable to update status"
    assert result.toast.description == "SERVER_UNAVAILABLE"
    assert feed.refreshes == 0


# ─── pricing ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_pricing_sends_cents(mutation_api):
    processor = BookingCommandProcessor(mutation_api)
    form = PricingForm(base="$100.00", gst="5", total="105.00", tip="10", reason_code="service_recovery")

    result = await processor.apply_pricing([make_booking("b1")], form)

    assert result.ok
    assert result.toast.title == "Pricing updated"
    adjustment = mutation_api.pricing_calls[0].adjustment
    assert (adjustment.base_cents, adjustment.gst_cents, adjustment.tip_cents, adjustment.total_cents) == (
        10000,
        500,
        1000,
        10500,
    )


@pytest.mark.asyncio
async def test_pricing_rejects_non_numeric_without_call(mutation_api):
    processor = BookingCommandProcessor(mutation_api)
    form = PricingForm(base="a lot", gst="5", total="105", reason_code="other")

    result = await processor.apply_pricing([make_booking("b1")], form)

    assert result.toast.title == "Invalid amount"
    assert mutation_api.pricing_calls == []


@pytest.mark.asyncio
async def test_pricing_requires_reason(mutation_api):
    processor = BookingCommandProcessor(mutation_api)
    result = await processor.apply_pricing([make_booking("b1")], PricingForm(base="1", gst="0", total="1"))
    assert result.toast.title == "Reason required"
    assert mutation_api.pricing_calls == []


@pytest.mark.asyncio
async def test_pricing_partial_failure_refreshes_before_returning(mutation_api, feed):
    mutation_api.fail_ids = {"b1"}
    processor = BookingCommandProcessor(mutation_api, feed)
    form = PricingForm(base="100", gst="5", total="105", reason_code="fare_match")

    result = await processor.apply_pricing([make_booking("b1"), make_booking("b2")], form)

    assert not result.ok
    assert result.toast.description.startswith("1 of 2 bookings failed")
    assert feed.refreshes == 1


# ─── sms ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_sms_reports_total_recipients(mutation_api):
    mutation_api.sms_total = 4
    processor = BookingCommandProcessor(mutation_api)

    result = await processor.send_sms(
        [make_booking("b1"), make_booking("b2")], "  Running 10 min late  ", SmsRecipient.BOTH
    )

    assert result.ok
    assert result.total_recipients == 4
    assert result.toast.description == "Queued 4 message(s)."
    request = mutation_api.sms_calls[0]
    assert request.message == "Running 10 min late"
    assert request.recipient == SmsRecipient.BOTH


@pytest.mark.asyncio
async def test_sms_requires_message(mutation_api):
    result = await BookingCommandProcessor(mutation_api).send_sms([make_booking("b1")], "   ")
    assert result.toast.title == "Message required"
    assert mutation_api.sms_calls == []


@pytest.mark.asyncio
async def test_sms_failure(mutation_api):
    mutation_api.fail_all = True
    result = await BookingCommandProcessor(mutation_api).send_sms([make_booking("b1")], "hello")
    assert result.toast.title == "SMS failed"
    assert result.toast.tone == Tone.DANGER
