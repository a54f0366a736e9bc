"""
Tests for the trip lifecycle service.

Covers:
- Trip creation with cached totals and the recorded dispatch fee
- Edits replacing expenses with a full recompute
- Optimistic concurrency on trip writes
- Frozen driver type
- Local orders: single-order trips, grouping and merging
- Payment status
- Cascading delete
- Driver performance rollup
"""

from datetime import date
from decimal import Decimal

import pytest

from conftest import make_load
from src.core.exceptions import (
    InvalidOrderError,
    LoadNotFoundError,
    PaymentStatusError,
    StaleTripError,
    TripNotFoundError,
)
from src.data.models.driver import Driver, DriverType
from src.data.models.expense import ExpenseCategory, ExpenseTotals
from src.data.models.order import LocalOrder
from src.data.models.trip import PaymentStatus, TripPaymentMethod
from src.settlement.payment_status import PaymentStatusUpdate

TRIP_DATE = date(2025, 5, 2)


def make_order(number, payment, method="cash", additional_cash="0") -> LocalOrder:
    return LocalOrder(
        order_number=number,
        pickup_location="Yard",
        dropoff_location="Connecticut",
        payment=Decimal(str(payment)),
        payment_method=method,
        additional_cash=Decimal(str(additional_cash)),
        trip_date=TRIP_DATE,
    )


def expense_amounts(store, trip_id):
    return {e.category: e.amount for e in store.get_expenses(trip_id)}


class TestCreateTrip:
    def test_owner_operator_trip(self, trip_service, store):
        trip = trip_service.create_trip(
            "drv-oo", "Week 18", TRIP_DATE, [make_load(1000, 100, "cash")]
        )

        assert trip.driver_type == DriverType.OWNER_OPERATOR
        assert trip.version == 1
        assert trip.totals.total_loads == 1
        assert trip.totals.total_invoice == Decimal("1000")
        assert trip.totals.total_broker_fees == Decimal("100")
        assert trip.totals.driver_earnings == Decimal("729")
        assert trip.totals.company_earnings == Decimal("90")
        assert trip.totals.expenses_total == Decimal("90")

        assert expense_amounts(store, trip.trip_id) == {ExpenseCategory.DISPATCH_FEE: Decimal("90")}
        assert [load.trip_id for load in store.get_loads(trip.trip_id)] == [trip.trip_id]

    def test_company_driver_trip_with_expenses(self, trip_service, store):
        trip = trip_service.create_trip(
            "drv-cd",
            "Week 18",
            TRIP_DATE,
            [make_load(1000, 100, "cash")],
            ExpenseTotals(fuel=100, local_towing=50),
        )

        assert trip.totals.driver_earnings == Decimal("288")
        assert trip.totals.company_earnings == Decimal("372")
        assert trip.totals.expenses_total == Decimal("240")
        assert expense_amounts(store, trip.trip_id) == {
            ExpenseCategory.FUEL: Decimal("100"),
            ExpenseCategory.LOCAL_TOWING: Decimal("50"),
            ExpenseCategory.DISPATCH_FEE: Decimal("90"),
        }
        assert trip_service.totals_are_current(trip.trip_id)

    def test_negative_expense_is_stored_as_entered(self, trip_service, store):
        trip = trip_service.create_trip(
            "drv-oo", "Week 18", TRIP_DATE, [make_load(1000, 100, "cash")], ExpenseTotals(fuel=-500)
        )

        assert trip.totals.driver_earnings == Decimal("1179")
        assert expense_amounts(store, trip.trip_id)[ExpenseCategory.FUEL] == Decimal("-500")
        assert trip_service.totals_are_current(trip.trip_id)

    def test_totals_check_leaves_audit_trail_alone(self, trip_service):
        trip = trip_service.create_trip(
            "drv-oo", "Week 18", TRIP_DATE, [make_load(1000, 100, "cash")]
        )
        trip_service.create_local_order_trip("drv-cd", make_order("L-1", 500))
        local_trip = trip_service.store.list_trips(driver_id="drv-cd")[0]
        settlement_decisions = len(trip_service.settlement.decision_history)
        trip_decisions = len(trip_service.decision_history)

        assert trip_service.totals_are_current(trip.trip_id)
        assert trip_service.totals_are_current(local_trip.trip_id)
        assert len(trip_service.settlement.decision_history) == settlement_decisions
        assert len(trip_service.decision_history) == trip_decisions

    def test_unknown_driver(self, trip_service):
        with pytest.raises(KeyError):
            trip_service.create_trip("nobody", "X", TRIP_DATE, [make_load(100)])


class TestEditTrip:
    def test_expenses_replaced_and_totals_recomputed(self, trip_service, store):
        trip = trip_service.create_trip(
            "drv-oo", "Week 18", TRIP_DATE, [make_load(1000, 100, "cash")], ExpenseTotals(fuel=100)
        )
        edited = trip_service.edit_trip(
            trip.trip_id,
            expected_version=trip.version,
            trip_name="Week 18 (revised)",
            expenses=ExpenseTotals(parking=20),
        )

        assert edited.version == 2
        assert edited.trip_name == "Week 18 (revised)"
        assert edited.trip_date == TRIP_DATE
        # (900 - 90 - 20) * 0.90
        assert edited.totals.driver_earnings == Decimal("711")
        assert edited.totals.expenses_total == Decimal("110")
        assert expense_amounts(store, trip.trip_id) == {
            ExpenseCategory.PARKING: Decimal("20"),
            ExpenseCategory.DISPATCH_FEE: Decimal("90"),
        }
        assert trip_service.totals_are_current(trip.trip_id)

    def test_edit_without_expenses_keeps_stored_ones(self, trip_service, store):
        trip = trip_service.create_trip(
            "drv-oo", "Week 18", TRIP_DATE, [make_load(1000, 100)], ExpenseTotals(fuel=100)
        )
        edited = trip_service.edit_trip(trip.trip_id, trip.version, trip_date=date(2025, 5, 9))

        assert edited.trip_date == date(2025, 5, 9)
        assert edited.totals == trip.totals
        assert expense_amounts(store, trip.trip_id)[ExpenseCategory.FUEL] == Decimal("100")

    def test_stale_version_rejected_without_writing(self, trip_service, store):
        trip = trip_service.create_trip("drv-oo", "Week 18", TRIP_DATE, [make_load(1000, 100)])
        trip_service.edit_trip(trip.trip_id, trip.version, expenses=ExpenseTotals(fuel=50))

        with pytest.raises(StaleTripError) as excinfo:
            trip_service.edit_trip(trip.trip_id, trip.version, expenses=ExpenseTotals(fuel=500))

        assert excinfo.value.actual_version == 2
        current = store.get_trip(trip.trip_id)
        assert current.version == 2
        assert expense_amounts(store, trip.trip_id)[ExpenseCategory.FUEL] == Decimal("50")

    def test_driver_type_frozen_on_trip(self, trip_service, store):
        trip = trip_service.create_trip("drv-oo", "Week 18", TRIP_DATE, [make_load(1000, 100)])
        trip_service.add_driver(
            Driver(driver_id="drv-oo", name="Sam Rivera", driver_type=DriverType.COMPANY_DRIVER)
        )

        recalculated = trip_service.recalculate_trip(trip.trip_id)

        assert recalculated.driver_type == DriverType.OWNER_OPERATOR
        assert recalculated.totals.driver_earnings == Decimal("729")

    def test_local_trip_rejects_expense_edits(self, trip_service):
        trip = trip_service.create_local_order_trip("drv-cd", make_order("A1", 500))
        with pytest.raises(InvalidOrderError):
            trip_service.edit_trip(trip.trip_id, trip.version, expenses=ExpenseTotals(fuel=5))


class TestLocalOrders:
    def test_single_order_trip(self, trip_service, store):
        trip = trip_service.create_local_order_trip(
            "drv-cd", make_order("A1", 500, "cash", additional_cash=50)
        )

        assert trip.is_local_driver_order
        assert trip.trip_name == "Order A1"
        assert trip.order_number == "A1"
        assert trip.pickup_location == "Yard"
        assert trip.dropoff_location == "Connecticut"
        assert trip.totals.total_invoice == Decimal("500")
        assert trip.totals.total_broker_fees == 0
        assert trip.totals.driver_earnings == Decimal("400")
        assert trip.totals.company_earnings == Decimal("50")
        assert trip.totals.expenses_total == Decimal("50")
        assert expense_amounts(store, trip.trip_id) == {ExpenseCategory.DISPATCH_FEE: Decimal("50")}

    def test_group_orders_into_trip(self, trip_service, store):
        first = trip_service.record_local_order(make_order("A1", 500, "cash", additional_cash=50))
        second = trip_service.record_local_order(make_order("A2", 300, "billing"))
        assert set(trip_service.available_local_orders()) == {first, second}

        trip = trip_service.create_trip_from_orders("drv-cd", "Local week 18", TRIP_DATE, [first, second])

        assert trip.totals.total_loads == 2
        assert trip.totals.total_invoice == Decimal("800")
        assert trip.totals.driver_earnings == Decimal("670")
        assert trip.totals.company_earnings == Decimal("80")
        assert trip_service.available_local_orders() == {}
        assert len(store.get_loads(trip.trip_id)) == 2
        assert trip_service.totals_are_current(trip.trip_id)

    def test_merge_recomputes_from_all_loads(self, trip_service):
        first = trip_service.record_local_order(make_order("A1", 500, "cash", additional_cash=50))
        trip = trip_service.create_trip_from_orders("drv-cd", "Local", TRIP_DATE, [first])
        later = trip_service.record_local_order(make_order("A3", 100, "cash", additional_cash=150))

        merged = trip_service.add_orders_to_trip(trip.trip_id, [later], trip.version)

        assert merged.version == trip.version + 1
        assert merged.totals.total_loads == 2
        # 400 + (90 - 150)
        assert merged.totals.driver_earnings == Decimal("340")
        assert merged.totals.company_earnings == Decimal("60")
        assert trip_service.totals_are_current(trip.trip_id)

    def test_grouping_requires_orders_and_name(self, trip_service):
        key = trip_service.record_local_order(make_order("A1", 500))
        with pytest.raises(InvalidOrderError):
            trip_service.create_trip_from_orders("drv-cd", "Local", TRIP_DATE, [])
        with pytest.raises(InvalidOrderError):
            trip_service.create_trip_from_orders("drv-cd", "  ", TRIP_DATE, [key])

    def test_assigned_order_cannot_be_reused(self, trip_service):
        key = trip_service.record_local_order(make_order("A1", 500))
        trip_service.create_trip_from_orders("drv-cd", "Local", TRIP_DATE, [key])
        with pytest.raises(LoadNotFoundError):
            trip_service.create_trip_from_orders("drv-cd", "Again", TRIP_DATE, [key])

    def test_merge_into_bulk_trip_uses_bulk_rules(self, trip_service):
        trip = trip_service.create_trip("drv-oo", "Week 18", TRIP_DATE, [make_load(1000, 100, "cash")])
        key = trip_service.record_local_order(make_order("A1", 100, "billing"))

        merged = trip_service.add_orders_to_trip(trip.trip_id, [key], trip.version)

        # gross 1000, dispatch 100, (1000 - 100) * 0.90
        assert merged.totals.driver_earnings == Decimal("810")
        assert merged.totals.total_loads == 2


class TestPaymentStatus:
    def test_paid_then_on_hold(self, trip_service):
        trip = trip_service.create_trip("drv-oo", "Week 18", TRIP_DATE, [make_load(1000)])

        paid = trip_service.set_payment_status(
            trip.trip_id,
            PaymentStatusUpdate(
                status=PaymentStatus.PAID_IN_FULL,
                payment_method=TripPaymentMethod.BANK_TRANSFER,
                payment_date=date(2025, 5, 10),
            ),
        )
        assert paid.payment.status == PaymentStatus.PAID_IN_FULL
        assert paid.totals == trip.totals

        held = trip_service.set_payment_status(
            trip.trip_id, PaymentStatusUpdate(status="payment_on_hold", hold_reason="dispute")
        )
        assert held.payment.hold_reason == "dispute"
        assert held.payment.payment_method is None
        assert held.payment.payment_date is None

    def test_invalid_update_does_not_write(self, trip_service, store):
        trip = trip_service.create_trip("drv-oo", "Week 18", TRIP_DATE, [make_load(1000)])

        with pytest.raises(PaymentStatusError):
            trip_service.set_payment_status(
                trip.trip_id, PaymentStatusUpdate(status="payment_on_hold")
            )

        current = store.get_trip(trip.trip_id)
        assert current.version == trip.version
        assert current.payment.status is None


class TestDeleteTrip:
    def test_cascades_to_loads_and_expenses(self, trip_service, store):
        trip = trip_service.create_trip(
            "drv-oo", "Week 18", TRIP_DATE, [make_load(1000), make_load(500)], ExpenseTotals(fuel=10)
        )
        trip_service.delete_trip(trip.trip_id)

        assert store.get_loads(trip.trip_id) == []
        assert store.get_expenses(trip.trip_id) == []
        with pytest.raises(TripNotFoundError):
            store.get_trip(trip.trip_id)

    def test_delete_unknown_trip(self, trip_service):
        with pytest.raises(TripNotFoundError):
            trip_service.delete_trip("missing")


class TestDriverPerformance:
    def test_rollup_sorted_by_revenue(self, trip_service):
        trip_service.create_trip("drv-oo", "A", date(2025, 1, 5), [make_load(1000, 100)])
        trip_service.create_trip("drv-oo", "B", date(2025, 5, 5), [make_load(2000, 0)])
        trip_service.create_trip("drv-cd", "C", date(2025, 5, 6), [make_load(2500, 0)])

        rows = trip_service.driver_performance()

        assert [row.driver_id for row in rows] == ["drv-oo", "drv-cd"]
        assert rows[0].trips == 2
        assert rows[0].loads == 2
        assert rows[0].revenue == Decimal("3000")
        assert rows[1].driver_earnings == Decimal("800")

    def test_since_filter(self, trip_service):
        trip_service.create_trip("drv-oo", "A", date(2025, 1, 5), [make_load(1000, 100)])
        trip_service.create_trip("drv-cd", "C", date(2025, 5, 6), [make_load(2500, 0)])

        rows = trip_service.driver_performance(since=date(2025, 5, 1))

        assert [row.driver_id for row in rows] == ["drv-cd"]
