"""
Pydantic data models for the carrier settlement back office.

Core models:
- Driver: Driver classification and contact details
- Load: A shipped vehicle/order with price, broker fee and payment method
- Expense: Operating costs charged against a trip
- Trip: Settlement unit with cached totals and payment status
- LocalOrder: Single order entered by a local driver
"""

from .driver import Driver, DriverStatus, DriverType
from .expense import Expense, ExpenseCategory, ExpenseTotals
from .load import (
    Load,
    PaymentChannel,
    is_recognized_payment_method,
    normalize_payment_method,
)
from .order import LocalLocation, LocalOrder
from .trip import (
    HoldReason,
    PaymentState,
    PaymentStatus,
    Trip,
    TripPaymentMethod,
    TripTotals,
)

__all__ = [
    "Driver",
    "DriverStatus",
    "DriverType",
    "Expense",
    "ExpenseCategory",
    "ExpenseTotals",
    "Load",
    "PaymentChannel",
    "is_recognized_payment_method",
    "normalize_payment_method",
    "LocalLocation",
    "LocalOrder",
    "HoldReason",
    "PaymentState",
    "PaymentStatus",
    "Trip",
    "TripPaymentMethod",
    "TripTotals",
]
