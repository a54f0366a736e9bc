"""
Expense data models - operating costs charged against a trip.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from src.data.models.fields import coerce_amount


class ExpenseCategory(str, Enum):
    """Expense category."""

    PARKING = "parking"
    ELD_LOGBOOK = "eld_logbook"
    INSURANCE = "insurance"
    FUEL = "fuel"
    IFTA = "ifta"
    LOCAL_TOWING = "local_towing"
    PREPASS = "prepass"
    SHIPCAR = "shipcar"
    SUPER_DISPATCH = "super_dispatch"
    DISPATCH_FEE = "dispatch_fee"  # computed, never entered
    OTHER = "other"
    PAID_IN_ADVANCE = "paid_in_advance"


class Expense(BaseModel):
    """A single expense row attached to a trip."""

    category: ExpenseCategory
    amount: Decimal = Decimal("0")
    notes: Optional[str] = None
    trip_id: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return coerce_amount(value, "amount")


class ExpenseTotals(BaseModel):
    """
    Manually entered expense amounts for a trip, one per category.

    The dispatch fee is deliberately absent: it is computed by the
    settlement engine and recorded separately.
    """

    parking: Decimal = Decimal("0")
    eld_logbook: Decimal = Decimal("0")
    insurance: Decimal = Decimal("0")
    fuel: Decimal = Decimal("0")
    ifta: Decimal = Decimal("0")
    local_towing: Decimal = Decimal("0")
    prepass: Decimal = Decimal("0")
    shipcar: Decimal = Decimal("0")
    super_dispatch: Decimal = Decimal("0")
    other: Decimal = Decimal("0")
    paid_in_advance: Decimal = Decimal("0")

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_amounts(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_amount(value, info.field_name)

    @property
    def total(self) -> Decimal:
        """Sum of every entered category."""
        return sum(self.amounts().values(), Decimal("0"))

    def amounts(self) -> dict[ExpenseCategory, Decimal]:
        """Amounts keyed by category."""
        return {
            ExpenseCategory(name): getattr(self, name) for name in type(self).model_fields
        }

    def to_expenses(self, trip_id: Optional[str] = None) -> list[Expense]:
        """Expense rows for every category with a non-zero amount."""
        return [
            Expense(category=category, amount=amount, trip_id=trip_id)
            for category, amount in self.amounts().items()
            if amount != 0
        ]

    @classmethod
    def from_expenses(cls, expenses: Iterable[Expense]) -> "ExpenseTotals":
        """
        Rebuild entered totals from stored rows.

        Dispatch fee rows are skipped; repeated categories are summed.
        """
        values: dict[str, Decimal] = {}
        for expense in expenses:
            if expense.category == ExpenseCategory.DISPATCH_FEE:
                continue
            key = expense.category.value
            values[key] = values.get(key, Decimal("0")) + expense.amount
        return cls(**values)
