"""
Plain-text settlement breakdown for a trip.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from src.data.models.driver import DriverType
from src.settlement.engine import TripSummary, company_earnings

CENT = Decimal("0.01")


def money(amount: Decimal) -> str:
    """Format an amount as dollars, negatives with a leading minus."""
    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if rounded < 0:
        return f"-${abs(rounded):,.2f}"
    return f"${rounded:,.2f}"


def format_trip_summary(summary: TripSummary, title: Optional[str] = None) -> str:
    """
    Render the full audited breakdown of a trip settlement.

    Args:
        summary: Engine output
        title: Optional heading (e.g. the trip name)

    Returns:
        Multi-line report text
    """
    rule = "=" * 60
    lines = [rule, title or "TRIP SETTLEMENT", rule]

    driver_label = (
        "Owner-operator" if summary.driver_type == DriverType.OWNER_OPERATOR else "Company driver"
    )
    lines.append(f"Driver type: {driver_label} ({summary.percentage * 100:.0f}%)")
    lines.append(f"Loads: {summary.load_count}")
    lines.append("")

    lines.append("REVENUE:")
    lines.append(f"  Total Invoice: {money(summary.total_price)}")
    lines.append(f"  Broker Fees: {money(summary.total_broker_fee)}")
    lines.append(f"  Gross Before Deductions: {money(summary.total_gross_before_deductions)}")
    lines.append("")

    lines.append("DEDUCTIONS:")
    lines.append(f"  Dispatch Fee: {money(summary.dispatch_fee_amount)}")
    lines.append(f"  Other Expenses: {money(summary.other_expenses)}")
    lines.append(f"  Total Expenses: {money(summary.total_expenses)}")
    lines.append(f"  Gross After Deductions: {money(summary.total_gross_after_deductions)}")
    lines.append("")

    lines.append("BY PAYMENT METHOD:")
    for label, before, expenses, after in (
        (
            "Cash",
            summary.cash_gross_before_deductions,
            summary.cash_expenses,
            summary.cash_gross_after_deductions,
        ),
        (
            "Check/ACH",
            summary.check_gross_before_deductions,
            summary.check_expenses,
            summary.check_gross_after_deductions,
        ),
        (
            "Billing",
            summary.billing_gross_before_deductions,
            summary.billing_expenses,
            summary.billing_gross_after_deductions,
        ),
    ):
        lines.append(
            f"  {label}: gross {money(before)}, expenses {money(expenses)}, net {money(after)}"
        )
    if summary.unallocated_expenses != 0:
        lines.append(f"  Unallocated: {money(summary.unallocated_expenses)}")
    lines.append("")

    lines.append(f"DRIVER PAY: {money(summary.driver_pay)}")
    lines.append(f"COMPANY EARNINGS: {money(company_earnings(summary))}")

    if summary.warnings:
        lines.append("")
        lines.append("WARNINGS:")
        for warning in summary.warnings:
            lines.append(f"  • {warning}")

    lines.append(rule)
    return "\n".join(lines)
