"""Tests for payslip calculation."""

from datetime import date
from decimal import Decimal

from hrms_core.models import Employee
from hrms_core.models.enums import PayrollItemType
from hrms_core.services import PayslipCalculator

JAN_START = date(2025, 1, 1)
JAN_END = date(2025, 1, 31)


def salaried(amount="5000.00"):
    return Employee(employment_type="FULL_TIME", salary_amount=Decimal(amount), hourly_rate=None)


def hourly(rate="25.00", employment_type="PART_TIME"):
    return Employee(employment_type=employment_type, salary_amount=None, hourly_rate=Decimal(rate))


class TestWorkingDays:
    def test_january_2025(self):
        """Test weekday counting over a month starting on a Wednesday."""
        assert PayslipCalculator.working_days(JAN_START, JAN_END) == 23

    def test_weekend_only(self):
        assert PayslipCalculator.working_days(date(2025, 1, 4), date(2025, 1, 5)) == 0

    def test_inverted_range(self):
        assert PayslipCalculator.working_days(JAN_END, JAN_START) == 0


class TestPayBasis:
    def test_salaried_employee(self):
        assert PayslipCalculator.is_hourly(salaried()) is False

    def test_hourly_employee(self):
        assert PayslipCalculator.is_hourly(hourly()) is True

    def test_full_time_with_both_rates_is_salaried(self):
        employee = salaried()
        employee.hourly_rate = Decimal("30.00")
        assert PayslipCalculator.is_hourly(employee) is False

    def test_contractor_with_both_rates_is_hourly(self):
        employee = hourly(rate="40.00", employment_type="CONTRACT")
        employee.salary_amount = Decimal("6000.00")
        assert PayslipCalculator.is_hourly(employee) is True

    def test_salaried_hourly_rate(self):
        """Test that salaried rates spread the salary over 176 monthly hours."""
        assert PayslipCalculator.hourly_rate(salaried()) == Decimal("28.41")


class TestPayslipCalculator:
    """Test the earnings, deductions and taxes pipeline."""

    def test_salaried_payslip(self):
        result = PayslipCalculator().calculate(salaried(), JAN_START, JAN_END)

        assert result.regular_hours == Decimal("176")
        assert result.basic_pay == Decimal("5000.00")
        assert result.overtime_pay == Decimal("0.00")
        assert result.gross_pay == Decimal("5000.00")
        # 205.00 insurance + 250.00 retirement
        assert result.total_deductions == Decimal("455.00")
        # 1100.00 + 250.00 + 310.00 + 72.50 + 30.00
        assert result.total_taxes == Decimal("1762.50")
        assert result.net_pay == Decimal("2782.50")

    def test_line_order(self):
        result = PayslipCalculator().calculate(
            salaried(), JAN_START, JAN_END, overtime_hours=Decimal("2")
        )
        assert [line.item_code for line in result.lines] == [
            "BASIC",
            "OVERTIME",
            "HEALTH",
            "DENTAL",
            "VISION",
            "LIFE",
            "401K",
            "FED_TAX",
            "STATE_TAX",
            "SOC_SEC",
            "MEDICARE",
            "UNEMP",
        ]
        assert {line.item_type for line in result.lines[7:]} == {PayrollItemType.TAX}

    def test_hourly_payslip(self):
        """Test that hourly pay is 8 hours per weekday at the hourly rate."""
        result = PayslipCalculator().calculate(hourly(), JAN_START, JAN_END)

        assert result.regular_hours == Decimal("184")
        assert result.basic_pay == Decimal("4600.00")
        assert result.total_deductions == Decimal("435.00")
        assert result.total_taxes == Decimal("1621.50")
        assert result.net_pay == Decimal("2543.50")

    def test_overtime(self):
        """Test overtime at 1.5x the derived hourly rate, taxed with the rest of gross."""
        result = PayslipCalculator().calculate(
            salaried(), JAN_START, JAN_END, overtime_hours=Decimal("10")
        )

        assert result.overtime_hours == Decimal("10")
        assert result.overtime_pay == Decimal("426.15")
        assert result.gross_pay == Decimal("5426.15")
        # Retirement stays on basic pay only
        assert result.total_deductions == Decimal("455.00")
        assert result.total_taxes == Decimal("1912.72")
        assert result.net_pay == Decimal("3058.43")

    def test_no_pay_basis(self):
        """Test that an employee without salary or rate gets an empty payslip."""
        employee = Employee(employment_type="FULL_TIME", salary_amount=None, hourly_rate=None)
        result = PayslipCalculator().calculate(employee, JAN_START, JAN_END)

        assert result.gross_pay == Decimal("0.00")
        assert result.net_pay == Decimal("0.00")
        assert [line.item_code for line in result.lines] == ["BASIC"]

    def test_round_to_cents(self):
        assert PayslipCalculator.round_to_cents(Decimal("1.005")) == Decimal("1.01")
        assert PayslipCalculator.round_to_cents(Decimal("1.004")) == Decimal("1.00")
