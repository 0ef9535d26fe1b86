"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    AWAITING_PAYMENT = "awaiting_payment"
    CONFIRMED = "confirmed"
    ASSIGNED = "assigned"
    EN_ROUTE = "en_route"
    ARRIVED = "arrived"
    ON_TRIP = "on_trip"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentPreference(str, Enum):
    PAY_NOW = "pay_now"
    PAY_ON_ARRIVAL = "pay_on_arrival"


class BookingScope(str, Enum):
    UPCOMING = "upcoming"
    PAST = "past"
    ALL = "all"


class PickupWindow(str, Enum):
    ALL = "all"
    NEXT_2H = "next2h"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    OVERNIGHT = "overnight"


class PaxBucket(str, Enum):
    ALL = "all"
    SMALL = "1-2"
    MEDIUM = "3-4"
    LARGE = "5+"


class LuggageBucket(str, Enum):
    ALL = "all"
    NONE = "none"
    STANDARD = "standard"
    HEAVY = "heavy"


class SmsRecipient(str, Enum):
    PASSENGER = "passenger"
    DRIVER = "driver"
    BOTH = "both"


class Tone(str, Enum):
    """Display tone shared by status badges and operator toasts."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


class StatusReasonCode(str, Enum):
    CUSTOMER_REQUEST = "customer_request"
    DRIVER_DELAY = "driver_delay"
    VEHICLE_ISSUE = "vehicle_issue"
    WEATHER = "weather"
    COMMS_FAILURE = "comms_failure"
    OPERATIONAL_OVERRIDE = "operational_override"
    SAFETY = "safety"
    OTHER = "other"


class PricingReasonCode(str, Enum):
    FARE_MATCH = "fare_match"
    LOYALTY_CREDIT = "loyalty_credit"
    SERVICE_RECOVERY = "service_recovery"
    VEHICLE_CHANGE = "vehicle_change"
    MANUAL_OVERRIDE = "manual_override"
    STAFF_ERROR = "staff_error"
    OTHER = "other"
