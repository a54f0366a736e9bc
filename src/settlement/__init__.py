"""
Settlement engine for carrier trips.

This module contains pure calculations for:
- Payment method normalization
- Proportional expense allocation across payment channels
- Multi-load trip settlement (company driver / owner-operator)
- Local driver order settlement
- Trip payment status transitions
"""

from src.data.models.load import normalize_payment_method

from .allocation import allocate_expenses, channel_shares
from .engine import TripSummary, calculate_trip_summary, company_earnings
from .local_orders import (
    LocalOrderSettlement,
    LocalTripTotals,
    calculate_local_order,
    calculate_local_trip_totals,
    parse_additional_cash,
)
from .payment_status import PaymentStatusUpdate, apply_payment_status
from .report import format_trip_summary

__all__ = [
    "normalize_payment_method",
    "allocate_expenses",
    "channel_shares",
    "TripSummary",
    "calculate_trip_summary",
    "company_earnings",
    "LocalOrderSettlement",
    "LocalTripTotals",
    "calculate_local_order",
    "calculate_local_trip_totals",
    "parse_additional_cash",
    "PaymentStatusUpdate",
    "apply_payment_status",
    "format_trip_summary",
]
