"""Tests for domain enums."""

from shuttle_dispatch.domain.value_objects.enums import (
    BookingStatus,
    PaxBucket,
    PickupWindow,
    PricingReasonCode,
    SmsRecipient,
    StatusReasonCode,
)


def test_booking_status_count():
    assert len(BookingStatus) == 9


def test_booking_status_values():
    assert BookingStatus.AWAITING_PAYMENT.value == "awaiting_payment"
    assert BookingStatus.EN_ROUTE.value == "en_route"
    assert BookingStatus.ON_TRIP.value == "on_trip"


def test_pax_bucket_values():
    assert [b.value for b in PaxBucket] == ["all", "1-2", "3-4", "5+"]


def test_pickup_window_next_two_hours_value():
    assert PickupWindow.NEXT_2H.value == "next2h"


def test_sms_recipients():
    assert {r.value for r in SmsRecipient} == {"passenger", "driver", "both"}


def test_reason_codes():
    assert len(StatusReasonCode) == 8
    assert {c.value for c in PricingReasonCode} == {
        "fare_match",
        "loyalty_credit",
        "service_recovery",
        "vehicle_change",
        "manual_override",
        "staff_error",
        "other",
    }


def test_enums_compare_as_strings():
    assert BookingStatus.CANCELLED == "cancelled"
