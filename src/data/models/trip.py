"""
Trip data model - a settlement unit of one driver, one date, loads and expenses.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from src.data.models.driver import DriverType


class PaymentStatus(str, Enum):
    """Trip payment status (unset is represented by None)."""

    PAID_IN_FULL = "paid_in_full"
    PAYMENT_ON_HOLD = "payment_on_hold"


class TripPaymentMethod(str, Enum):
    """How a settled trip was paid out."""

    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    ZELLE = "zelle"


class HoldReason(str, Enum):
    """Predefined hold reasons; any other text is stored as entered."""

    DAMAGE_CLAIM = "damage_claim"
    DISPUTE = "dispute"
    PENDING_INVESTIGATION = "pending_investigation"
    OTHER = "other"


class PaymentState(BaseModel):
    """Payment status fields of a trip."""

    status: Optional[PaymentStatus] = None
    payment_method: Optional[TripPaymentMethod] = None
    payment_date: Optional[date] = None
    hold_reason: Optional[str] = None


class TripTotals(BaseModel):
    """Cached aggregate totals, always rewritten from a fresh settlement."""

    total_loads: int = 0
    total_invoice: Decimal = Decimal("0")
    total_broker_fees: Decimal = Decimal("0")
    driver_earnings: Decimal = Decimal("0")
    company_earnings: Decimal = Decimal("0")
    expenses_total: Decimal = Decimal("0")


class Trip(BaseModel):
    """
    A settlement unit.

    ``driver_type`` is captured when the trip is created so later changes
    to the driver do not alter how this trip is recomputed.
    """

    # Identification
    trip_id: str = Field(..., description="Unique trip identifier")
    driver_id: str = Field(..., description="Driver the trip belongs to")
    driver_type: DriverType = Field(..., description="Rule set frozen at creation")
    trip_name: str = Field(..., description="Display name")
    trip_date: date = Field(..., description="Trip date")

    totals: TripTotals = Field(default_factory=TripTotals)
    payment: PaymentState = Field(default_factory=PaymentState)

    # Local driver orders
    is_local_driver_order: bool = False
    order_number: Optional[str] = None
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None

    # Concurrency
    version: int = 1
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
