"""
Settlement Service - audited driver pay calculations.

This service:
- Runs the trip settlement engine with the configured rates
- Settles local driver orders and trips built from them
- Converts settlements into the cached totals stored on a trip
- Records every calculation, with its data-quality warnings, for audit
"""

from datetime import datetime
from decimal import Decimal
from time import time
from typing import Any, Iterable, Optional

from src.data.models.driver import DriverType
from src.data.models.expense import ExpenseTotals
from src.data.models.load import Load
from src.data.models.order import LocalOrder
from src.data.models.trip import TripTotals
from src.services.base import AuditDecision, BaseService
from src.settlement.engine import TripSummary, calculate_trip_summary, company_earnings
from src.settlement.local_orders import (
    LocalOrderSettlement,
    LocalTripTotals,
    calculate_local_order,
    calculate_local_trip_totals,
)


class SettlementService(BaseService):
    """Settlement service wrapping the pure engine with audit logging."""

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the settlement service."""
        super().__init__(service_name="settlement", **kwargs)

    def calculate_trip(
        self,
        loads: Iterable[Load],
        driver_type: DriverType,
        expenses: Optional[ExpenseTotals] = None,
    ) -> TripSummary:
        """
        Settle a multi-load trip.

        Args:
            loads: Loads on the trip
            driver_type: Driver classification frozen on the trip
            expenses: Manually entered expenses

        Returns:
            TripSummary with the full breakdown
        """
        start_time = time()
        loads = list(loads)
        expenses = expenses or ExpenseTotals()

        self.logger.info(
            "calculating_trip_settlement",
            driver_type=DriverType(driver_type).value,
            loads=len(loads),
            other_expenses=str(expenses.total),
        )

        summary = calculate_trip_summary(loads, driver_type, expenses, self.rules)

        decision = AuditDecision(
            timestamp=datetime.now(),
            service_name=self.service_name,
            decision_type="trip_settlement",
            input_data={
                "driver_type": summary.driver_type.value,
                "loads": len(loads),
                "expenses": {k.value: str(v) for k, v in expenses.amounts().items() if v},
            },
            reasoning=(
                f"Settled {len(loads)} loads at {summary.percentage * 100:.0f}% "
                f"for {summary.driver_type.value}"
            ),
            output_data={
                "total_gross_before_deductions": str(summary.total_gross_before_deductions),
                "dispatch_fee_amount": str(summary.dispatch_fee_amount),
                "total_expenses": str(summary.total_expenses),
                "driver_pay": str(summary.driver_pay),
                "company_earnings": str(company_earnings(summary)),
            },
            warnings=summary.warnings,
            execution_time_seconds=time() - start_time,
        )
        self.log_decision(decision)

        return summary

    def calculate_local_order(self, order: LocalOrder) -> LocalOrderSettlement:
        """
        Settle a single local driver order.

        Args:
            order: Validated local order

        Returns:
            LocalOrderSettlement
        """
        start_time = time()
        settlement = calculate_local_order(
            order.payment,
            order.payment_method,
            order.effective_additional_cash,
            self.rules,
        )

        warnings = []
        if settlement.driver_owes_company:
            warnings.append(
                f"Order {order.order_number}: advance cash exceeds earnings, "
                f"driver owes company ${abs(settlement.driver_earnings):.2f}"
            )

        self.log_decision(
            AuditDecision(
                timestamp=datetime.now(),
                service_name=self.service_name,
                decision_type="local_order_settlement",
                input_data={
                    "order_number": order.order_number,
                    "payment": str(order.payment),
                    "payment_method": order.payment_method.value,
                    "additional_cash": str(order.additional_cash),
                },
                reasoning="Dispatch fee deducted, remainder to driver less advance cash",
                output_data={
                    "dispatch_fee": str(settlement.dispatch_fee),
                    "driver_earnings": str(settlement.driver_earnings),
                },
                warnings=warnings,
                execution_time_seconds=time() - start_time,
            )
        )
        return settlement

    def calculate_local_trip(self, loads: Iterable[Load]) -> LocalTripTotals:
        """Totals for a trip of local orders, re-derived from every load."""
        start_time = time()
        loads = list(loads)
        totals = calculate_local_trip_totals(loads, self.rules)

        self.log_decision(
            AuditDecision(
                timestamp=datetime.now(),
                service_name=self.service_name,
                decision_type="local_trip_settlement",
                input_data={"loads": len(loads)},
                reasoning=f"Recomputed {len(loads)} local orders from source loads",
                output_data={
                    "total_invoice": str(totals.total_invoice),
                    "total_driver_earnings": str(totals.total_driver_earnings),
                    "total_company_earnings": str(totals.total_company_earnings),
                },
                execution_time_seconds=time() - start_time,
            )
        )
        return totals

    def trip_totals(self, summary: TripSummary) -> TripTotals:
        """Cached trip totals for a bulk settlement."""
        return TripTotals(
            total_loads=summary.load_count,
            total_invoice=summary.total_price,
            total_broker_fees=summary.total_broker_fee,
            driver_earnings=summary.driver_pay,
            company_earnings=company_earnings(summary),
            expenses_total=summary.total_expenses,
        )

    def local_trip_totals(self, totals: LocalTripTotals) -> TripTotals:
        """Cached trip totals for a local-order trip; the dispatch fee is its only expense."""
        return TripTotals(
            total_loads=totals.total_loads,
            total_invoice=totals.total_invoice,
            total_broker_fees=Decimal("0"),
            driver_earnings=totals.total_driver_earnings,
            company_earnings=totals.total_company_earnings,
            expenses_total=totals.total_company_earnings,
        )

    def execute(self, *args: Any, **kwargs: Any) -> TripSummary:
        """
        Execute a trip settlement (delegates to calculate_trip).

        Args:
            *args: Positional arguments for calculate_trip
            **kwargs: Keyword arguments for calculate_trip

        Returns:
            TripSummary
        """
        return self.calculate_trip(*args, **kwargs)


def main() -> None:
    """Example usage of the settlement service."""
    from src.core.logging import configure_logging
    from src.settlement.report import format_trip_summary

    configure_logging()

    service = SettlementService()

    loads = [
        Load(
            load_id="LOAD-001",
            customer="Test Broker",
            vehicle="2019 Honda Accord",
            price=Decimal("1000"),
            broker_fee=Decimal("100"),
            payment_method="COD",
        ),
        Load(
            load_id="LOAD-002",
            customer="Test Broker 2",
            vehicle="2021 Ford F-150",
            price=Decimal("850"),
            broker_fee=Decimal("50"),
            payment_method="ACH",
        ),
        Load(
            load_id="LOAD-003",
            customer="Dealer Direct",
            vehicle="2018 Toyota Camry",
            price=Decimal("700"),
            broker_fee=Decimal("0"),
            payment_method="",
        ),
    ]
    expenses = ExpenseTotals(fuel=Decimal("250"), parking=Decimal("40"))

    for driver_type in DriverType:
        summary = service.calculate_trip(loads, driver_type, expenses)
        print()
        print(format_trip_summary(summary, title=f"TRIP SETTLEMENT - {driver_type.value}"))


if __name__ == "__main__":
    main()
