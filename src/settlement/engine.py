"""
Trip settlement engine - driver pay and company net for multi-load trips.

Turns a trip's loads and entered expenses into a full breakdown:
- Revenue and broker fees
- 10% dispatch fee on gross
- Expenses allocated to cash, check and billing channels
- Driver pay under the company-driver or owner-operator rules

Pure computation: no I/O, no state between calls.
"""

from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from src.core.config import SettlementRules
from src.data.models.driver import DriverType
from src.data.models.expense import ExpenseTotals
from src.data.models.load import Load, PaymentChannel, is_recognized_payment_method
from src.settlement.allocation import allocate_expenses

ZERO = Decimal("0")


class TripSummary(BaseModel):
    """Every intermediate quantity of a trip settlement."""

    driver_type: DriverType
    load_count: int

    # Revenue
    total_price: Decimal
    total_broker_fee: Decimal
    total_gross_before_deductions: Decimal
    local_towing: Decimal
    total_gross_after_towing: Decimal

    # Deductions
    dispatch_fee_amount: Decimal
    other_expenses: Decimal
    total_expenses: Decimal
    total_gross_after_deductions: Decimal

    # Per payment channel
    cash_gross_before_deductions: Decimal
    check_gross_before_deductions: Decimal
    billing_gross_before_deductions: Decimal
    cash_expenses: Decimal
    check_expenses: Decimal
    billing_expenses: Decimal
    cash_gross_after_deductions: Decimal
    check_gross_after_deductions: Decimal
    billing_gross_after_deductions: Decimal
    unallocated_expenses: Decimal

    # Pay
    percentage: Decimal
    driver_pay: Decimal

    warnings: list[str] = Field(default_factory=list)


def _load_warnings(load: Load) -> list[str]:
    warnings = []
    label = load.load_id or "<no id>"
    if load.price < 0 or load.broker_fee < 0:
        warnings.append(f"Load {label}: negative price or broker fee")
    if load.broker_fee > load.price:
        warnings.append(
            f"Load {label}: broker fee {load.broker_fee} exceeds price {load.price} "
            f"(gross {load.gross})"
        )
    if not is_recognized_payment_method(load.payment_method):
        warnings.append(
            f"Load {label}: payment method {load.payment_method!r} billed by default"
        )
    return warnings


def _expense_warnings(expenses: ExpenseTotals) -> list[str]:
    return [
        f"Expense {category.value}: negative amount {amount}"
        for category, amount in expenses.amounts().items()
        if amount < 0
    ]


def calculate_trip_summary(
    loads: Iterable[Load],
    driver_type: DriverType,
    expenses: Optional[ExpenseTotals] = None,
    rules: Optional[SettlementRules] = None,
) -> TripSummary:
    """
    Settle a multi-load trip.

    The dispatch fee is taken from gross before any deduction for both
    driver types. Owner-operators are paid a share of what remains after
    the dispatch fee and every other expense; company drivers are paid a
    share of gross, so expenses never reduce their pay.

    Args:
        loads: Loads on the trip
        driver_type: Rule set to apply
        expenses: Manually entered expenses (all zero when omitted)
        rules: Rates (defaults to the standard 10% / 32% / 90%)

    Returns:
        TripSummary with every intermediate amount
    """
    loads = list(loads)
    driver_type = DriverType(driver_type)
    expenses = expenses or ExpenseTotals()
    rules = rules or SettlementRules()

    total_price = ZERO
    total_broker_fee = ZERO
    channel_gross = {channel: ZERO for channel in PaymentChannel}
    warnings: list[str] = []

    for load in loads:
        total_price += load.price
        total_broker_fee += load.broker_fee
        channel_gross[load.channel] += load.gross
        warnings.extend(_load_warnings(load))

    total_gross = sum(channel_gross.values(), ZERO)

    other_expenses = expenses.total
    warnings.extend(_expense_warnings(expenses))
    dispatch_fee_amount = total_gross * rules.dispatch_fee_rate
    total_expenses = dispatch_fee_amount + other_expenses

    allocated = allocate_expenses(total_expenses, channel_gross)
    unallocated = total_expenses - sum(allocated.values(), ZERO)
    total_gross_after_deductions = total_gross - total_expenses

    match driver_type:
        case DriverType.OWNER_OPERATOR:
            percentage = rules.owner_operator_rate
            driver_pay = total_gross_after_deductions * percentage
        case DriverType.COMPANY_DRIVER:
            percentage = rules.company_driver_rate
            driver_pay = total_gross * percentage

    return TripSummary(
        driver_type=driver_type,
        load_count=len(loads),
        total_price=total_price,
        total_broker_fee=total_broker_fee,
        total_gross_before_deductions=total_gross,
        local_towing=expenses.local_towing,
        total_gross_after_towing=total_gross - expenses.local_towing,
        dispatch_fee_amount=dispatch_fee_amount,
        other_expenses=other_expenses,
        total_expenses=total_expenses,
        total_gross_after_deductions=total_gross_after_deductions,
        cash_gross_before_deductions=channel_gross[PaymentChannel.CASH],
        check_gross_before_deductions=channel_gross[PaymentChannel.CHECK],
        billing_gross_before_deductions=channel_gross[PaymentChannel.BILLING],
        cash_expenses=allocated[PaymentChannel.CASH],
        check_expenses=allocated[PaymentChannel.CHECK],
        billing_expenses=allocated[PaymentChannel.BILLING],
        cash_gross_after_deductions=channel_gross[PaymentChannel.CASH] - allocated[PaymentChannel.CASH],
        check_gross_after_deductions=channel_gross[PaymentChannel.CHECK] - allocated[PaymentChannel.CHECK],
        billing_gross_after_deductions=channel_gross[PaymentChannel.BILLING] - allocated[PaymentChannel.BILLING],
        unallocated_expenses=unallocated,
        percentage=percentage,
        driver_pay=driver_pay,
        warnings=warnings,
    )


def company_earnings(summary: TripSummary) -> Decimal:
    """
    Company net for a settled trip.

    Owner-operator trips leave the company only the dispatch fee. On
    company-driver trips the company keeps gross after towing less the
    driver's pay, the dispatch fee and the remaining recorded expenses.
    """
    match summary.driver_type:
        case DriverType.OWNER_OPERATOR:
            return summary.dispatch_fee_amount
        case DriverType.COMPANY_DRIVER:
            return (
                summary.total_gross_after_towing
                - summary.driver_pay
                - summary.dispatch_fee_amount
                - (summary.other_expenses - summary.local_towing)
            )
