"""
Trip payment status transitions.

unset <-> paid_in_full | payment_on_hold. Each transition validates its
required fields first and clears the fields belonging to the other state.
Settlement totals are never touched.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from src.core.exceptions import PaymentStatusError
from src.data.models.trip import HoldReason, PaymentState, PaymentStatus, TripPaymentMethod


class PaymentStatusUpdate(BaseModel):
    """Requested payment status and its supporting fields."""

    status: Optional[PaymentStatus] = None
    payment_method: Optional[TripPaymentMethod] = None
    payment_date: Optional[date] = None
    hold_reason: Optional[HoldReason] = None
    hold_reason_other: Optional[str] = None


def resolve_hold_reason(reason: Optional[HoldReason], other_text: Optional[str]) -> Optional[str]:
    """
    Stored hold reason text.

    Predefined reasons are stored by value; "other" stores the free text.
    """
    if reason is None:
        return None
    if reason == HoldReason.OTHER:
        text = (other_text or "").strip()
        return text or None
    return reason.value


def apply_payment_status(update: PaymentStatusUpdate) -> PaymentState:
    """
    Validate a payment status change and build the resulting fields.

    The result depends only on the requested state; fields of the state
    being left are dropped.

    Args:
        update: Requested change

    Returns:
        New PaymentState

    Raises:
        PaymentStatusError: If the target state is missing required fields
    """
    match update.status:
        case PaymentStatus.PAID_IN_FULL:
            if update.payment_method is None:
                raise PaymentStatusError("Please select a payment method")
            if update.payment_date is None:
                raise PaymentStatusError("Please select a payment date")
            return PaymentState(
                status=PaymentStatus.PAID_IN_FULL,
                payment_method=update.payment_method,
                payment_date=update.payment_date,
            )
        case PaymentStatus.PAYMENT_ON_HOLD:
            reason = resolve_hold_reason(update.hold_reason, update.hold_reason_other)
            if not reason:
                raise PaymentStatusError("Please provide a reason for hold")
            return PaymentState(status=PaymentStatus.PAYMENT_ON_HOLD, hold_reason=reason)
        case None:
            return PaymentState()
