"""
Exceptions raised by the settlement back office.

Engine calculations never raise on data-quality problems; these cover
lookups, validation of state transitions, and concurrent trip edits.
"""


class SettlementError(Exception):
    """Base class for settlement back-office errors."""


class PaymentStatusError(SettlementError, ValueError):
    """A payment status transition is missing required fields."""


class InvalidOrderError(SettlementError, ValueError):
    """A local driver order failed validation."""


class TripNotFoundError(SettlementError, KeyError):
    """No trip with the given identifier."""


class DriverNotFoundError(SettlementError, KeyError):
    """No driver with the given identifier."""


class LoadNotFoundError(SettlementError, KeyError):
    """No load with the given identifier, or it is already assigned."""


class StaleTripError(SettlementError):
    """The trip changed since the caller last read it."""

    def __init__(self, trip_id: str, expected_version: int, actual_version: int) -> None:
        self.trip_id = trip_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Trip {trip_id} is at version {actual_version}, expected {expected_version}"
        )
