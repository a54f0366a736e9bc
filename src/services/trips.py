"""
Trip Service - trip lifecycle around the settlement engine.

This service:
- Creates trips from loads and entered expenses
- Edits trips with a full recompute from the stored loads
- Records local driver orders and groups them into trips
- Tracks payment status
- Deletes trips with their loads and expenses
- Rolls up driver performance

Every write goes through fetch -> recompute -> version-checked commit, so
cached trip totals always match a fresh settlement of the trip's loads
and expenses.
"""

from datetime import date, datetime
from decimal import Decimal
from time import time
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from src.core.exceptions import InvalidOrderError
from src.data.models.driver import Driver, DriverType
from src.data.models.expense import Expense, ExpenseCategory, ExpenseTotals
from src.data.models.load import Load
from src.data.models.order import LocalOrder
from src.data.models.trip import Trip, TripTotals
from src.data.store import TripStore
from src.services.base import AuditDecision, BaseService
from src.services.settlement import SettlementService
from src.settlement.engine import calculate_trip_summary
from src.settlement.local_orders import (
    calculate_local_trip_totals,
    is_local_order_load,
    order_to_load,
)
from src.settlement.payment_status import PaymentStatusUpdate, apply_payment_status


class DriverPerformance(BaseModel):
    """Aggregated results for one driver."""

    driver_id: str
    driver_name: str
    driver_type: DriverType
    trips: int = 0
    loads: int = 0
    revenue: Decimal = Decimal("0")
    driver_earnings: Decimal = Decimal("0")
    company_earnings: Decimal = Decimal("0")


class TripService(BaseService):
    """Trip lifecycle service."""

    def __init__(
        self,
        store: Optional[TripStore] = None,
        settlement: Optional[SettlementService] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the trip service.

        Args:
            store: Trip store (defaults to a new in-memory store)
            settlement: Settlement service (defaults to one sharing this config)
        """
        super().__init__(service_name="trips", **kwargs)
        self.store = store or TripStore()
        self.settlement = settlement or SettlementService(
            config_manager=self.config_manager, logger=self.logger
        )

    # Recompute helpers

    def _dispatch_fee_expense(self, amount: Decimal, local: bool) -> Expense:
        rate = self.rules.local_dispatch_fee_rate if local else self.rules.dispatch_fee_rate
        scope = "local driver trip" if local else "trip"
        return Expense(
            category=ExpenseCategory.DISPATCH_FEE,
            amount=amount,
            notes=f"{rate * 100:.0f}% dispatch fee for {scope}",
        )

    def _settle(
        self,
        loads: list[Load],
        driver_type: DriverType,
        local: bool,
        expenses: Optional[ExpenseTotals] = None,
    ) -> tuple[TripTotals, list[Expense]]:
        """Fresh totals and the full expense set to store with them."""
        if local:
            local_totals = self.settlement.calculate_local_trip(loads)
            totals = self.settlement.local_trip_totals(local_totals)
            rows = [self._dispatch_fee_expense(local_totals.total_company_earnings, local=True)]
            return totals, rows

        expenses = expenses or ExpenseTotals()
        summary = self.settlement.calculate_trip(loads, driver_type, expenses)
        rows = expenses.to_expenses()
        rows.append(self._dispatch_fee_expense(summary.dispatch_fee_amount, local=False))
        return self.settlement.trip_totals(summary), rows

    def _record(self, decision_type: str, trip: Trip, reasoning: str, start_time: float) -> None:
        self.log_decision(
            AuditDecision(
                timestamp=datetime.now(),
                service_name=self.service_name,
                decision_type=decision_type,
                input_data={"trip_id": trip.trip_id, "driver_id": trip.driver_id},
                reasoning=reasoning,
                output_data={
                    "version": trip.version,
                    **trip.totals.model_dump(mode="json"),
                },
                execution_time_seconds=time() - start_time,
            )
        )

    # Drivers

    def add_driver(self, driver: Driver) -> Driver:
        """Register a driver."""
        return self.store.add_driver(driver)

    # Bulk trips

    def create_trip(
        self,
        driver_id: str,
        trip_name: str,
        trip_date: date,
        loads: Iterable[Load],
        expenses: Optional[ExpenseTotals] = None,
    ) -> Trip:
        """
        Create a trip from its loads and entered expenses.

        The driver's current type is frozen on the trip.

        Args:
            driver_id: Driver the trip belongs to
            trip_name: Display name
            trip_date: Trip date
            loads: Loads on the trip
            expenses: Manually entered expenses

        Returns:
            Stored trip
        """
        start_time = time()
        driver = self.store.get_driver(driver_id)
        loads = list(loads)
        totals, rows = self._settle(loads, driver.driver_type, local=False, expenses=expenses)

        trip = Trip(
            trip_id=self.store.new_id(),
            driver_id=driver.driver_id,
            driver_type=driver.driver_type,
            trip_name=trip_name,
            trip_date=trip_date,
            totals=totals,
        )
        self.store.insert_trip(trip, loads, rows)
        self._record("trip_created", trip, f"Created trip with {len(loads)} loads", start_time)
        return trip

    def edit_trip(
        self,
        trip_id: str,
        expected_version: int,
        trip_name: Optional[str] = None,
        trip_date: Optional[date] = None,
        expenses: Optional[ExpenseTotals] = None,
    ) -> Trip:
        """
        Edit a trip's name, date or expenses and recompute its totals.

        Supplied expenses replace every stored expense. Without them the
        stored entered expenses are kept and the totals recomputed anyway.

        Args:
            trip_id: Trip to edit
            expected_version: Version the caller last read
            trip_name: New name
            trip_date: New date
            expenses: Replacement expenses (bulk trips only)

        Returns:
            Updated trip

        Raises:
            InvalidOrderError: If expenses are given for a local-order trip
            StaleTripError: If the trip changed since expected_version
        """
        start_time = time()
        trip = self.store.get_trip(trip_id)
        if trip.is_local_driver_order and expenses is not None:
            raise InvalidOrderError("Local driver trips only carry the dispatch fee expense")

        if expenses is None and not trip.is_local_driver_order:
            expenses = ExpenseTotals.from_expenses(self.store.get_expenses(trip_id))

        loads = self.store.get_loads(trip_id)
        totals, rows = self._settle(
            loads, trip.driver_type, local=trip.is_local_driver_order, expenses=expenses
        )

        updates: dict[str, Any] = {"totals": totals}
        if trip_name is not None:
            updates["trip_name"] = trip_name
        if trip_date is not None:
            updates["trip_date"] = trip_date

        stored = self.store.commit_trip(
            trip.model_copy(update=updates), expected_version, expenses=rows
        )
        self._record("trip_edited", stored, "Recomputed totals from stored loads", start_time)
        return stored

    def recalculate_trip(self, trip_id: str) -> Trip:
        """Recompute and rewrite a trip's totals from its current loads and expenses."""
        trip = self.store.get_trip(trip_id)
        return self.edit_trip(trip_id, trip.version)

    def totals_are_current(self, trip_id: str) -> bool:
        """True if the cached totals match a fresh settlement."""
        trip = self.store.get_trip(trip_id)
        expenses = None
        if not trip.is_local_driver_order:
            expenses = ExpenseTotals.from_expenses(self.store.get_expenses(trip_id))
        loads = self.store.get_loads(trip_id)

        # Engine called directly: no audit decision is recorded
        if trip.is_local_driver_order:
            fresh = self.settlement.local_trip_totals(calculate_local_trip_totals(loads, self.rules))
        else:
            summary = calculate_trip_summary(loads, trip.driver_type, expenses, self.rules)
            fresh = self.settlement.trip_totals(summary)
        return fresh == trip.totals

    # Local driver orders

    def record_local_order(self, order: LocalOrder) -> str:
        """
        Store a local order that is not on a trip yet.

        Returns:
            Record key used to add the order to a trip later
        """
        settlement = self.settlement.calculate_local_order(order)
        key = self.store.add_unassigned_load(order_to_load(order))
        self.logger.info(
            "local_order_recorded",
            order_number=order.order_number,
            load_key=key,
            driver_earnings=str(settlement.driver_earnings),
        )
        return key

    def available_local_orders(self) -> dict[str, Load]:
        """Unassigned loads that came from local driver orders."""
        return {
            key: load
            for key, load in self.store.unassigned_loads().items()
            if is_local_order_load(load)
        }

    def create_local_order_trip(self, driver_id: str, order: LocalOrder) -> Trip:
        """Create a one-order trip for a local driver."""
        start_time = time()
        driver = self.store.get_driver(driver_id)
        self.settlement.calculate_local_order(order)
        load = order_to_load(order)
        totals, rows = self._settle([load], driver.driver_type, local=True)

        trip = Trip(
            trip_id=self.store.new_id(),
            driver_id=driver.driver_id,
            driver_type=driver.driver_type,
            trip_name=f"Order {order.order_number}",
            trip_date=order.trip_date,
            totals=totals,
            is_local_driver_order=True,
            order_number=order.order_number,
            pickup_location=order.pickup_location.value,
            dropoff_location=order.dropoff_location.value,
        )
        self.store.insert_trip(trip, [load], rows)
        self._record("local_order_trip_created", trip, "Created trip for one local order", start_time)
        return trip

    def create_trip_from_orders(
        self,
        driver_id: str,
        trip_name: str,
        trip_date: date,
        load_keys: Iterable[str],
    ) -> Trip:
        """
        Group unassigned local orders into a new trip.

        Raises:
            InvalidOrderError: If no orders are selected or the name is blank
            LoadNotFoundError: If a key is unknown or already on a trip
        """
        start_time = time()
        keys = list(dict.fromkeys(load_keys))
        if not keys:
            raise InvalidOrderError("Please select at least one order to add to the trip")
        if not trip_name.strip():
            raise InvalidOrderError("Please enter a trip name")

        driver = self.store.get_driver(driver_id)
        loads = [self.store.get_unassigned_load(key) for key in keys]
        totals, rows = self._settle(loads, driver.driver_type, local=True)

        trip = Trip(
            trip_id=self.store.new_id(),
            driver_id=driver.driver_id,
            driver_type=driver.driver_type,
            trip_name=trip_name.strip(),
            trip_date=trip_date,
            totals=totals,
            is_local_driver_order=True,
        )
        self.store.insert_trip(trip, [], rows, assign_load_keys=keys)
        self._record(
            "local_orders_grouped", trip, f"Created trip from {len(keys)} orders", start_time
        )
        return trip

    def add_orders_to_trip(
        self, trip_id: str, load_keys: Iterable[str], expected_version: int
    ) -> Trip:
        """
        Merge unassigned orders into an existing trip.

        Totals are recomputed from every load now on the trip rather than
        adjusted from the previous figures.
        """
        start_time = time()
        keys = list(dict.fromkeys(load_keys))
        trip = self.store.get_trip(trip_id)
        new_loads = [self.store.get_unassigned_load(key) for key in keys]
        loads = self.store.get_loads(trip_id) + new_loads

        expenses = None
        if not trip.is_local_driver_order:
            expenses = ExpenseTotals.from_expenses(self.store.get_expenses(trip_id))
        totals, rows = self._settle(
            loads, trip.driver_type, local=trip.is_local_driver_order, expenses=expenses
        )

        stored = self.store.commit_trip(
            trip.model_copy(update={"totals": totals}),
            expected_version,
            expenses=rows,
            assign_load_keys=keys,
        )
        self._record("orders_merged", stored, f"Merged {len(keys)} orders", start_time)
        return stored

    # Payment status

    def set_payment_status(
        self,
        trip_id: str,
        update: PaymentStatusUpdate,
        expected_version: Optional[int] = None,
    ) -> Trip:
        """
        Change a trip's payment status.

        Validation happens before anything is written.

        Raises:
            PaymentStatusError: If required fields are missing
        """
        trip = self.store.get_trip(trip_id)
        payment = apply_payment_status(update)
        version = trip.version if expected_version is None else expected_version
        stored = self.store.commit_trip(trip.model_copy(update={"payment": payment}), version)
        self.logger.info(
            "payment_status_updated",
            trip_id=trip_id,
            status=payment.status.value if payment.status else None,
        )
        return stored

    # Deletion

    def delete_trip(self, trip_id: str) -> None:
        """Delete a trip with its loads and expenses."""
        self.store.delete_trip(trip_id)

    # Reporting

    def driver_performance(self, since: Optional[date] = None) -> list[DriverPerformance]:
        """
        Per-driver totals over trips dated on or after ``since``.

        Returns:
            Performance rows sorted by revenue, highest first
        """
        rows: dict[str, DriverPerformance] = {}
        for trip in self.store.list_trips():
            if since is not None and trip.trip_date < since:
                continue
            row = rows.get(trip.driver_id)
            if row is None:
                driver = self.store.get_driver(trip.driver_id)
                row = DriverPerformance(
                    driver_id=driver.driver_id,
                    driver_name=driver.name,
                    driver_type=driver.driver_type,
                )
                rows[trip.driver_id] = row
            row.trips += 1
            row.loads += trip.totals.total_loads
            row.revenue += trip.totals.total_invoice
            row.driver_earnings += trip.totals.driver_earnings
            row.company_earnings += trip.totals.company_earnings

        return sorted(rows.values(), key=lambda r: r.revenue, reverse=True)

    def execute(self, *args: Any, **kwargs: Any) -> Trip:
        """Execute trip creation (delegates to create_trip)."""
        return self.create_trip(*args, **kwargs)
