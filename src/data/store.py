"""
In-memory store for drivers, trips, loads and expenses.

Mirrors the relational shape drivers <- trips <- {loads, expenses} with
cascading delete from a trip to its loads and expenses. Trip writes are
version-checked so a recompute based on stale loads/expenses is rejected
instead of overwriting newer totals.
"""

import threading
from datetime import datetime
from typing import Iterable, Optional
from uuid import uuid4

import structlog

from src.core.exceptions import (
    DriverNotFoundError,
    LoadNotFoundError,
    StaleTripError,
    TripNotFoundError,
)
from src.data.models.driver import Driver
from src.data.models.expense import Expense
from src.data.models.load import Load
from src.data.models.trip import Trip


class TripStore:
    """Thread-safe in-memory trip store."""

    def __init__(self, logger: Optional[structlog.BoundLogger] = None) -> None:
        self.logger = logger or structlog.get_logger(component="trip_store")
        self._lock = threading.RLock()
        self._drivers: dict[str, Driver] = {}
        self._trips: dict[str, Trip] = {}
        self._loads: dict[str, Load] = {}
        self._expenses: dict[str, list[Expense]] = {}

    @staticmethod
    def new_id() -> str:
        """Generate a record identifier."""
        return uuid4().hex

    # Drivers

    def add_driver(self, driver: Driver) -> Driver:
        with self._lock:
            self._drivers[driver.driver_id] = driver
        return driver

    def get_driver(self, driver_id: str) -> Driver:
        with self._lock:
            try:
                return self._drivers[driver_id]
            except KeyError:
                raise DriverNotFoundError(driver_id) from None

    # Trips

    def get_trip(self, trip_id: str) -> Trip:
        with self._lock:
            try:
                return self._trips[trip_id]
            except KeyError:
                raise TripNotFoundError(trip_id) from None

    def list_trips(self, driver_id: Optional[str] = None) -> list[Trip]:
        with self._lock:
            return [
                trip
                for trip in self._trips.values()
                if driver_id is None or trip.driver_id == driver_id
            ]

    def get_loads(self, trip_id: str) -> list[Load]:
        """Loads currently assigned to a trip."""
        with self._lock:
            return [load for load in self._loads.values() if load.trip_id == trip_id]

    def get_expenses(self, trip_id: str) -> list[Expense]:
        with self._lock:
            return list(self._expenses.get(trip_id, []))

    def insert_trip(
        self,
        trip: Trip,
        loads: Iterable[Load],
        expenses: Iterable[Expense],
        assign_load_keys: Iterable[str] = (),
    ) -> Trip:
        """
        Insert a new trip together with its loads and expenses.

        ``assign_load_keys`` attaches previously unassigned loads in the same step.
        """
        keys = list(assign_load_keys)
        with self._lock:
            if trip.driver_id not in self._drivers:
                raise DriverNotFoundError(trip.driver_id)
            for key in keys:
                self._check_unassigned(key)
            self._trips[trip.trip_id] = trip
            for load in loads:
                self._loads[self.new_id()] = load.model_copy(update={"trip_id": trip.trip_id})
            for key in keys:
                self._loads[key] = self._loads[key].model_copy(update={"trip_id": trip.trip_id})
            self._expenses[trip.trip_id] = [
                expense.model_copy(update={"trip_id": trip.trip_id}) for expense in expenses
            ]
        self.logger.info("trip_inserted", trip_id=trip.trip_id, driver_id=trip.driver_id)
        return trip

    def commit_trip(
        self,
        trip: Trip,
        expected_version: int,
        expenses: Optional[Iterable[Expense]] = None,
        assign_load_keys: Iterable[str] = (),
    ) -> Trip:
        """
        Write recomputed trip fields in one step.

        Args:
            trip: Trip with updated fields
            expected_version: Version the caller read before recomputing
            expenses: If given, replaces every expense of the trip
            assign_load_keys: Unassigned loads to attach to the trip

        Returns:
            Stored trip with its version incremented

        Raises:
            StaleTripError: If the stored version differs from expected_version
        """
        with self._lock:
            current = self.get_trip(trip.trip_id)
            if current.version != expected_version:
                self.logger.warning(
                    "stale_trip_write_rejected",
                    trip_id=trip.trip_id,
                    expected_version=expected_version,
                    actual_version=current.version,
                )
                raise StaleTripError(trip.trip_id, expected_version, current.version)

            keys = list(assign_load_keys)
            for key in keys:
                self._check_unassigned(key)
            for key in keys:
                self._loads[key] = self._loads[key].model_copy(update={"trip_id": trip.trip_id})

            if expenses is not None:
                self._expenses[trip.trip_id] = [
                    expense.model_copy(update={"trip_id": trip.trip_id}) for expense in expenses
                ]

            stored = trip.model_copy(
                update={"version": current.version + 1, "updated_at": datetime.now()}
            )
            self._trips[trip.trip_id] = stored
        return stored

    def delete_trip(self, trip_id: str) -> None:
        """Delete a trip and cascade to its loads and expenses."""
        with self._lock:
            self.get_trip(trip_id)
            del self._trips[trip_id]
            load_keys = [key for key, load in self._loads.items() if load.trip_id == trip_id]
            for key in load_keys:
                del self._loads[key]
            self._expenses.pop(trip_id, None)
        self.logger.info("trip_deleted", trip_id=trip_id, loads_deleted=len(load_keys))

    # Unassigned orders

    def add_unassigned_load(self, load: Load) -> str:
        """Store a load that belongs to no trip yet; returns its record key."""
        key = self.new_id()
        with self._lock:
            self._loads[key] = load.model_copy(update={"trip_id": None})
        return key

    def unassigned_loads(self) -> dict[str, Load]:
        with self._lock:
            return {key: load for key, load in self._loads.items() if load.trip_id is None}

    def get_unassigned_load(self, key: str) -> Load:
        with self._lock:
            self._check_unassigned(key)
            return self._loads[key]

    def _check_unassigned(self, key: str) -> None:
        load = self._loads.get(key)
        if load is None or load.trip_id is not None:
            raise LoadNotFoundError(key)
