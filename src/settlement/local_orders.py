"""
Local driver order settlement.

Single orders entered one at a time:
- 10% dispatch fee on the payment, for every driver type
- The driver keeps the rest, less any advance cash collected on a cash order
- Trip totals for grouped orders are always re-derived from the loads
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from pydantic import BaseModel

from src.core.config import SettlementRules
from src.data.models.fields import coerce_amount
from src.data.models.load import Load, PaymentChannel, normalize_payment_method
from src.data.models.order import LocalOrder

ZERO = Decimal("0")

ADDITIONAL_CASH_PATTERN = re.compile(r"Additional Cash: \$([\d.,]+)")


class LocalOrderSettlement(BaseModel):
    """Settlement of one local order."""

    payment: Decimal
    channel: PaymentChannel
    dispatch_fee: Decimal
    gross_after_dispatch: Decimal
    additional_cash: Decimal
    total_cash_collected: Decimal
    driver_earnings: Decimal
    company_earnings: Decimal

    @property
    def driver_owes_company(self) -> bool:
        """Advance cash exceeded what the driver earned."""
        return self.driver_earnings < 0


class LocalTripTotals(BaseModel):
    """Totals for a trip assembled from local orders."""

    total_loads: int
    total_invoice: Decimal
    total_driver_earnings: Decimal
    total_company_earnings: Decimal


def parse_additional_cash(notes: Optional[str]) -> Decimal:
    """
    Extract the advance cash amount annotated in load notes.

    Looks for ``Additional Cash: $<amount>``; returns 0 when absent.
    """
    if not notes:
        return ZERO
    match = ADDITIONAL_CASH_PATTERN.search(notes)
    if match is None:
        return ZERO
    try:
        return Decimal(match.group(1).replace(",", "").rstrip("."))
    except InvalidOperation:
        return ZERO


def calculate_local_order(
    payment: Decimal,
    payment_method: Optional[str],
    additional_cash: Decimal = ZERO,
    rules: Optional[SettlementRules] = None,
) -> LocalOrderSettlement:
    """
    Settle a single local order.

    Driver earnings on a cash order may be negative: the driver then owes
    the company the difference.

    Args:
        payment: Order payment
        payment_method: Raw or normalized payment method
        additional_cash: Advance cash collected (ignored unless cash)
        rules: Rates (defaults to a 10% dispatch fee)

    Returns:
        LocalOrderSettlement
    """
    rules = rules or SettlementRules()
    payment = coerce_amount(payment, "payment")
    channel = normalize_payment_method(payment_method)

    dispatch_fee = payment * rules.local_dispatch_fee_rate
    gross_after_dispatch = payment - dispatch_fee

    if channel == PaymentChannel.CASH:
        advance = coerce_amount(additional_cash, "additional_cash")
        total_cash_collected = payment + advance
    else:
        advance = ZERO
        total_cash_collected = ZERO

    return LocalOrderSettlement(
        payment=payment,
        channel=channel,
        dispatch_fee=dispatch_fee,
        gross_after_dispatch=gross_after_dispatch,
        additional_cash=advance,
        total_cash_collected=total_cash_collected,
        driver_earnings=gross_after_dispatch - advance,
        company_earnings=dispatch_fee,
    )


def settle_local_load(load: Load, rules: Optional[SettlementRules] = None) -> LocalOrderSettlement:
    """Settle a stored local order load from its price, channel and notes."""
    return calculate_local_order(
        payment=load.price,
        payment_method=load.channel,
        additional_cash=parse_additional_cash(load.notes),
        rules=rules,
    )


def calculate_local_trip_totals(
    loads: Iterable[Load], rules: Optional[SettlementRules] = None
) -> LocalTripTotals:
    """
    Totals for a trip of local orders, recomputed from every load.

    Args:
        loads: All loads on the trip
        rules: Rates

    Returns:
        LocalTripTotals
    """
    loads = list(loads)
    settlements = [settle_local_load(load, rules) for load in loads]
    return LocalTripTotals(
        total_loads=len(loads),
        total_invoice=sum((s.payment for s in settlements), ZERO),
        total_driver_earnings=sum((s.driver_earnings for s in settlements), ZERO),
        total_company_earnings=sum((s.company_earnings for s in settlements), ZERO),
    )


def build_order_notes(order: LocalOrder) -> str:
    """Notes text stored on the load created for a local order."""
    notes = f"Pickup: {order.pickup_location.value}, Dropoff: {order.dropoff_location.value}"
    advance = order.effective_additional_cash
    if advance > 0:
        total_cash = order.payment + advance
        notes += f" | Additional Cash: ${advance:.2f} | Total Cash Collected: ${total_cash:.2f}"
    if order.weekly_statement:
        notes += " | Include in weekly statement"
    return notes


def order_to_load(order: LocalOrder, trip_id: Optional[str] = None) -> Load:
    """Build the load record for a local order."""
    return Load(
        load_id=order.order_number,
        customer=f"Local Order - {order.pickup_location.value} to {order.dropoff_location.value}",
        vehicle="Local Driver",
        price=order.payment,
        broker_fee=ZERO,
        payment_method=order.payment_method.value,
        notes=build_order_notes(order),
        trip_id=trip_id,
    )


def is_local_order_load(load: Load) -> bool:
    """True if the load was created from a local driver order."""
    return "Local Order" in load.customer or "Local" in load.vehicle
