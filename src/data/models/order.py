"""
Local driver order - one order entered at a time, before grouping into a trip.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.data.models.fields import coerce_amount
from src.data.models.load import PaymentChannel, normalize_payment_method


class LocalLocation(str, Enum):
    """Pickup/dropoff points served by local drivers."""

    YARD = "Yard"
    NEW_YORK = "New York"
    CONNECTICUT = "Connecticut"
    NEW_JERSEY = "New Jersey"


class LocalOrder(BaseModel):
    """An ad-hoc local driver order as entered by a back-office user."""

    order_number: str = Field(..., description="Order number, becomes the load id")
    pickup_location: LocalLocation
    dropoff_location: LocalLocation
    payment: Decimal = Field(..., gt=0, description="Order payment (USD)")
    payment_method: PaymentChannel = PaymentChannel.BILLING
    additional_cash: Decimal = Field(
        Decimal("0"), ge=0, description="Advance cash collected, cash orders only"
    )
    trip_date: date = Field(default_factory=date.today)
    weekly_statement: bool = False

    @field_validator("order_number")
    @classmethod
    def _order_number_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("order number is required")
        return value

    @field_validator("payment_method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> PaymentChannel:
        return normalize_payment_method(value)

    @field_validator("additional_cash", mode="before")
    @classmethod
    def _coerce_additional_cash(cls, value: Any) -> Decimal:
        return coerce_amount(value, "additional_cash")

    @property
    def effective_additional_cash(self) -> Decimal:
        """Additional cash only counts on cash orders."""
        if self.payment_method == PaymentChannel.CASH:
            return self.additional_cash
        return Decimal("0")
