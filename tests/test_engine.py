"""
Tests for the trip settlement engine.

Covers:
- Revenue, broker fee and per-channel gross
- Dispatch fee on gross for both driver types
- Proportional expense allocation
- Owner-operator and company-driver pay rules
- Company earnings
- Zero-load and malformed-load edge cases
"""

from decimal import Decimal

import pytest

from conftest import make_load
from src.core.config import SettlementRules
from src.data.models.driver import DriverType
from src.data.models.expense import ExpenseTotals
from src.settlement.engine import calculate_trip_summary, company_earnings

OWNER = DriverType.OWNER_OPERATOR
COMPANY = DriverType.COMPANY_DRIVER
TOLERANCE = Decimal("1e-20")


class TestScenarios:
    """Worked examples."""

    def test_owner_operator_single_cash_load(self):
        summary = calculate_trip_summary([make_load(1000, 100, "cash")], OWNER, ExpenseTotals())

        assert summary.total_gross_before_deductions == Decimal("900")
        assert summary.dispatch_fee_amount == Decimal("90")
        assert summary.total_expenses == Decimal("90")
        assert summary.total_gross_after_deductions == Decimal("810")
        assert summary.driver_pay == Decimal("729")
        assert summary.percentage == Decimal("0.90")

    def test_company_driver_single_cash_load(self):
        summary = calculate_trip_summary([make_load(1000, 100, "cash")], COMPANY, ExpenseTotals())

        assert summary.dispatch_fee_amount == Decimal("90")
        assert summary.driver_pay == Decimal("288")
        assert summary.percentage == Decimal("0.32")

    def test_cash_and_billing_split(self):
        loads = [
            make_load(600, 0, "cod", load_id="A"),
            make_load(400, 0, "billing", load_id="B"),
        ]
        summary = calculate_trip_summary(loads, OWNER, ExpenseTotals())

        assert summary.total_expenses == Decimal("100")
        assert summary.cash_expenses == Decimal("60")
        assert summary.check_expenses == Decimal("0")
        assert summary.billing_expenses == Decimal("40")
        assert summary.cash_gross_after_deductions == Decimal("540")
        assert summary.billing_gross_after_deductions == Decimal("360")


class TestTotals:
    def test_sums_across_loads(self):
        loads = [
            make_load(1200, 150, "cash", load_id="A"),
            make_load(800, 50, "ACH", load_id="B"),
            make_load(950, 0, "", load_id="C"),
        ]
        summary = calculate_trip_summary(loads, OWNER)

        assert summary.load_count == 3
        assert summary.total_price == Decimal("2950")
        assert summary.total_broker_fee == Decimal("200")
        assert summary.total_gross_before_deductions == Decimal("2750")
        assert summary.cash_gross_before_deductions == Decimal("1050")
        assert summary.check_gross_before_deductions == Decimal("750")
        assert summary.billing_gross_before_deductions == Decimal("950")

    def test_other_expenses_include_every_entered_category(self):
        expenses = ExpenseTotals(
            parking=10,
            eld_logbook=20,
            insurance=30,
            fuel=40,
            ifta=5,
            local_towing=15,
            prepass=6,
            shipcar=7,
            super_dispatch=8,
            other=9,
            paid_in_advance=100,
        )
        summary = calculate_trip_summary([make_load(2000)], OWNER, expenses)

        assert summary.other_expenses == Decimal("250")
        assert summary.dispatch_fee_amount == Decimal("200")
        assert summary.total_expenses == Decimal("450")
        assert summary.local_towing == Decimal("15")
        assert summary.total_gross_after_towing == Decimal("1985")


class TestProperties:
    @pytest.mark.parametrize("driver_type", [OWNER, COMPANY])
    def test_dispatch_fee_is_ten_percent_of_gross(self, driver_type):
        loads = [make_load(1234.56, 34.56, "check"), make_load(99.99, 0, "cash")]
        summary = calculate_trip_summary(loads, driver_type, ExpenseTotals(fuel=300))
        assert summary.dispatch_fee_amount == summary.total_gross_before_deductions * Decimal("0.10")

    @pytest.mark.parametrize("driver_type", [OWNER, COMPANY])
    def test_channels_reconcile_to_total(self, driver_type):
        loads = [
            make_load(100, 0, "cash", load_id="A"),
            make_load(100, 0, "check", load_id="B"),
            make_load(100, 0, "billing", load_id="C"),
        ]
        summary = calculate_trip_summary(loads, driver_type, ExpenseTotals(fuel=10))

        channel_total = (
            summary.cash_gross_after_deductions
            + summary.check_gross_after_deductions
            + summary.billing_gross_after_deductions
        )
        assert abs(channel_total - summary.total_gross_after_deductions) < TOLERANCE
        assert summary.cash_expenses + summary.check_expenses + summary.billing_expenses == summary.total_expenses
        assert summary.unallocated_expenses == 0

    def test_owner_operator_pay_after_all_expenses(self):
        summary = calculate_trip_summary(
            [make_load(3000, 300, "cash"), make_load(1500, 0, "check")],
            OWNER,
            ExpenseTotals(fuel=420, insurance=180),
        )
        expected = (summary.total_gross_before_deductions - summary.total_expenses) * Decimal("0.90")
        assert summary.driver_pay == expected

    def test_company_driver_pay_ignores_expenses(self):
        loads = [make_load(3000, 300, "cash"), make_load(1500, 0, "check")]
        without = calculate_trip_summary(loads, COMPANY, ExpenseTotals())
        with_expenses = calculate_trip_summary(
            loads, COMPANY, ExpenseTotals(fuel=900, local_towing=250)
        )

        assert without.driver_pay == with_expenses.driver_pay
        assert with_expenses.driver_pay == Decimal("4200") * Decimal("0.32")

    def test_driver_type_accepts_raw_value(self):
        summary = calculate_trip_summary([make_load(100)], "company_driver")
        assert summary.driver_type == COMPANY


class TestCompanyEarnings:
    def test_owner_operator_company_keeps_dispatch_fee(self):
        summary = calculate_trip_summary(
            [make_load(1000, 100, "cash")], OWNER, ExpenseTotals(fuel=50)
        )
        assert company_earnings(summary) == Decimal("90")

    def test_company_driver_company_nets_after_pay_and_costs(self):
        summary = calculate_trip_summary(
            [make_load(1000, 100, "cash")],
            COMPANY,
            ExpenseTotals(fuel=100, local_towing=50),
        )
        # 900 gross - 288 pay - 90 dispatch - 150 expenses
        assert company_earnings(summary) == Decimal("372")


class TestEdgeCases:
    @pytest.mark.parametrize("driver_type", [OWNER, COMPANY])
    def test_no_loads(self, driver_type):
        summary = calculate_trip_summary([], driver_type, ExpenseTotals())

        assert summary.load_count == 0
        assert summary.total_gross_before_deductions == 0
        assert summary.dispatch_fee_amount == 0
        assert summary.cash_expenses == 0
        assert summary.check_expenses == 0
        assert summary.billing_expenses == 0
        assert summary.driver_pay == 0

    def test_expenses_without_gross_are_unallocated(self):
        summary = calculate_trip_summary([], OWNER, ExpenseTotals(parking=25))

        assert summary.cash_expenses == 0
        assert summary.check_expenses == 0
        assert summary.billing_expenses == 0
        assert summary.unallocated_expenses == Decimal("25")
        assert summary.total_gross_after_deductions == Decimal("-25")

    def test_negative_gross_flows_through_and_is_flagged(self):
        loads = [make_load(100, 250, "cash", load_id="BAD"), make_load(1000, 0, "check")]
        summary = calculate_trip_summary(loads, OWNER)

        assert summary.cash_gross_before_deductions == Decimal("-150")
        assert summary.total_gross_before_deductions == Decimal("850")
        assert any("BAD" in warning and "exceeds" in warning for warning in summary.warnings)

    def test_unrecognized_payment_method_is_flagged(self):
        summary = calculate_trip_summary([make_load(500, 0, "zelle", load_id="Z")], OWNER)

        assert summary.billing_gross_before_deductions == Decimal("500")
        assert any("zelle" in warning for warning in summary.warnings)

    def test_negative_expense_flows_through_and_is_flagged(self):
        summary = calculate_trip_summary(
            [make_load(1000, 100, "cash")], OWNER, ExpenseTotals(fuel=-500)
        )

        assert summary.other_expenses == Decimal("-500")
        assert summary.total_expenses == Decimal("-410")
        assert summary.driver_pay == Decimal("1179")
        assert summary.warnings == ["Expense fuel: negative amount -500"]

    def test_clean_loads_have_no_warnings(self):
        summary = calculate_trip_summary([make_load(500, 50, "cash")], OWNER)
        assert summary.warnings == []

    def test_custom_rates(self):
        rules = SettlementRules(
            dispatch_fee_rate=Decimal("0.12"),
            owner_operator_rate=Decimal("0.85"),
        )
        summary = calculate_trip_summary([make_load(1000)], OWNER, rules=rules)

        assert summary.dispatch_fee_amount == Decimal("120")
        assert summary.driver_pay == Decimal("880") * Decimal("0.85")
