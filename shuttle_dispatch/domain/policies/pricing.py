"""PricingAdjustmentPolicy — turn an operator's dollar inputs into a validated adjustment."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from shuttle_dispatch.domain.errors import ValidationError
from shuttle_dispatch.domain.value_objects.enums import PricingReasonCode

PRICING_REASON_CODES = frozenset(code.value for code in PricingReasonCode)

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


@dataclass(frozen=True)
class PricingForm:
    """Raw operator input, amounts as typed (e.g. ``"$120.50"``)."""

    base: str
    gst: str
    total: str
    tip: str = ""
    reason_code: str = ""
    reason_note: str = ""
    require_second_approval: bool = False


@dataclass(frozen=True)
class PricingAdjustment:
    base_cents: int
    gst_cents: int
    tip_cents: int
    total_cents: int
    reason_code: str
    reason_note: str | None
    require_second_approval: bool


def dollars_to_cents(value: str | None) -> int | None:
    """Parse a dollar string to cents; None when it is empty or not a number."""
    if value is None or not value.strip():
        return None
    sanitized = _NON_NUMERIC.sub("", value)
    try:
        amount = float(sanitized)
    except ValueError:
        return None
    if not math.isfinite(amount):
        return None
    return math.floor(amount * 100 + 0.5)


def build_adjustment(form: PricingForm) -> PricingAdjustment:
    """Validate a pricing form.

    Raises:
        ValidationError: a mandatory amount is missing or non-numeric, or the
            reason code is missing or unknown.
    """
    base = dollars_to_cents(form.base)
    gst = dollars_to_cents(form.gst)
    total = dollars_to_cents(form.total)
    if base is None or gst is None or total is None:
        raise ValidationError("Enter numeric amounts before saving.", title="Invalid amount")

    tip = dollars_to_cents(form.tip or "0")
    if tip is None:
        tip = 0

    reason_code = form.reason_code.strip()
    if not reason_code:
        raise ValidationError("Select a pricing adjustment reason.", title="Reason required")
    if reason_code not in PRICING_REASON_CODES:
        raise ValidationError(f"Unknown pricing reason '{reason_code}'.", title="Invalid reason code")

    return PricingAdjustment(
        base_cents=base,
        gst_cents=gst,
        tip_cents=tip,
        total_cents=total,
        reason_code=reason_code,
        reason_note=form.reason_note.strip() or None,
        require_second_approval=form.require_second_approval,
    )
