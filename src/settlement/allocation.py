"""
Proportional allocation of trip expenses across payment channels.

Each channel carries a share of the expense equal to its share of the
trip's gross. Channel amounts always add up to exactly the allocated
total: the last channel with a non-zero gross takes whatever division
remainder is left. With no gross at all, nothing is allocated.
"""

from decimal import Decimal
from typing import Mapping

from src.data.models.load import PaymentChannel

CHANNEL_ORDER = (PaymentChannel.CASH, PaymentChannel.CHECK, PaymentChannel.BILLING)


def channel_shares(
    channel_gross: Mapping[PaymentChannel, Decimal],
) -> dict[PaymentChannel, Decimal]:
    """
    Share of total gross collected through each channel.

    Args:
        channel_gross: Gross before deductions per channel

    Returns:
        Share per channel (all 0 when total gross is 0)
    """
    total = sum((channel_gross.get(c, Decimal("0")) for c in CHANNEL_ORDER), Decimal("0"))
    if total == 0:
        return {c: Decimal("0") for c in CHANNEL_ORDER}
    return {c: channel_gross.get(c, Decimal("0")) / total for c in CHANNEL_ORDER}


def allocate_expenses(
    total_expenses: Decimal,
    channel_gross: Mapping[PaymentChannel, Decimal],
) -> dict[PaymentChannel, Decimal]:
    """
    Split an expense total across channels in proportion to gross.

    Args:
        total_expenses: Amount to allocate
        channel_gross: Gross before deductions per channel

    Returns:
        Allocated expense per channel
    """
    shares = channel_shares(channel_gross)
    allocated = {c: Decimal("0") for c in CHANNEL_ORDER}

    funded = [c for c in CHANNEL_ORDER if channel_gross.get(c, Decimal("0")) != 0]
    if not funded or all(shares[c] == 0 for c in CHANNEL_ORDER):
        return allocated

    remainder_channel = funded[-1]
    running = Decimal("0")
    for channel in funded[:-1]:
        allocated[channel] = total_expenses * shares[channel]
        running += allocated[channel]
    allocated[remainder_channel] = total_expenses - running
    return allocated
