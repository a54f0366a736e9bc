"""
Shared field coercion for monetary inputs.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


def coerce_amount(value: Any, field_name: str = "amount") -> Decimal:
    """
    Coerce a raw monetary value to Decimal.

    Blank, missing or unparseable input becomes 0 instead of failing
    validation; a warning is logged so the anomaly can be audited.

    Args:
        value: Raw value from a store record, form field or file cell
        field_name: Field being coerced (for the log entry)

    Returns:
        Decimal amount
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        logger.warning("amount_coerced_to_zero", field=field_name, raw=repr(value))
        return Decimal("0")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        text = str(value).strip().replace("$", "").replace(",", "")
        if text == "":
            return Decimal("0")
        try:
            result = Decimal(text)
        except InvalidOperation:
            logger.warning("amount_coerced_to_zero", field=field_name, raw=str(value))
            return Decimal("0")

    if not result.is_finite():
        logger.warning("amount_coerced_to_zero", field=field_name, raw=str(value))
        return Decimal("0")
    return result
