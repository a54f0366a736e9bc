"""
Load data model - a single shipped vehicle/order within a trip.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationInfo, computed_field, field_validator

from src.data.models.fields import coerce_amount


class PaymentChannel(str, Enum):
    """Canonical payment-collection channel."""

    CASH = "cash"
    CHECK = "check"
    BILLING = "billing"


_CHANNEL_ALIASES = {
    "cod": PaymentChannel.CASH,
    "cash": PaymentChannel.CASH,
    "check": PaymentChannel.CHECK,
    "ach": PaymentChannel.CHECK,
}


def normalize_payment_method(raw: Optional[str]) -> PaymentChannel:
    """
    Map a raw payment method string to its collection channel.

    Matching is case-insensitive and ignores surrounding whitespace.
    COD/cash collect as cash, check/ACH as check; anything else,
    including empty or missing values, is billed.

    Args:
        raw: Payment method as entered or imported

    Returns:
        PaymentChannel (never raises)
    """
    if raw is None:
        return PaymentChannel.BILLING
    if isinstance(raw, PaymentChannel):
        return raw
    return _CHANNEL_ALIASES.get(str(raw).strip().lower(), PaymentChannel.BILLING)


def is_recognized_payment_method(raw: Optional[str]) -> bool:
    """True if the raw string maps to a channel without falling back to billing."""
    if raw is None:
        return False
    if isinstance(raw, PaymentChannel):
        return True
    text = str(raw).strip().lower()
    return text in _CHANNEL_ALIASES or text == PaymentChannel.BILLING.value


class Load(BaseModel):
    """
    A shipped vehicle/order.

    Monetary fields are coerced once, here: unparseable values become 0.
    A broker fee above the price is kept as entered and surfaces as a
    negative gross for the settlement engine to flag.
    """

    load_id: str = Field("", description="External load identifier")
    customer: str = Field("", description="Customer name")
    vehicle: str = Field("", description="Vehicle descriptor")

    # Financial
    price: Decimal = Field(Decimal("0"), description="Gross invoice amount (USD)")
    broker_fee: Decimal = Field(Decimal("0"), description="Broker fee deducted before any split (USD)")
    payment_method: Optional[str] = Field(None, description="Payment method as entered")

    notes: Optional[str] = Field(None, description="Free-text notes")

    # None while the load is an unassigned local order
    trip_id: Optional[str] = None

    @field_validator("load_id", "customer", "vehicle", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("payment_method", "notes", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("price", "broker_fee", mode="before")
    @classmethod
    def _coerce_money(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_amount(value, info.field_name)

    @computed_field
    @property
    def channel(self) -> PaymentChannel:
        """Normalized payment-collection channel."""
        return normalize_payment_method(self.payment_method)

    @computed_field
    @property
    def gross(self) -> Decimal:
        """Price less broker fee; negative only for malformed input."""
        return self.price - self.broker_fee
