"""Payslip calculation with flat-rate deductions and taxes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from hrms_core.models import Employee
from hrms_core.models.enums import EmploymentType, PayrollItemType

ZERO = Decimal("0.00")


@dataclass
class LineCandidate:
    """A payslip line before persistence. Amounts are always positive."""

    item_type: PayrollItemType
    item_code: str
    item_name: str
    amount: Decimal


@dataclass
class PayslipCalculation:
    """Result of calculating pay for one employee."""

    regular_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    basic_pay: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    lines: list[LineCandidate] = field(default_factory=list)

    def _sum(self, item_type: PayrollItemType) -> Decimal:
        return sum((line.amount for line in self.lines if line.item_type == item_type), ZERO)

    @property
    def gross_pay(self) -> Decimal:
        return self._sum(PayrollItemType.EARNING)

    @property
    def total_deductions(self) -> Decimal:
        return self._sum(PayrollItemType.DEDUCTION)

    @property
    def total_taxes(self) -> Decimal:
        return self._sum(PayrollItemType.TAX)

    @property
    def net_pay(self) -> Decimal:
        return self.gross_pay - self.total_deductions - self.total_taxes


class PayslipCalculator:
    """Calculates one employee's pay for a period.

    Pipeline (stable line order):
    1) Earnings: basic pay, then overtime
    2) Deductions: fixed insurance premiums, retirement as a share of basic pay
    3) Taxes: flat rates on gross pay

    Salaried employees receive their monthly salary as basic pay. Hourly
    employees are paid standard hours (8 per working day in the period) at
    their hourly rate. Every amount is rounded HALF_UP to cents.
    """

    OUTPUT_PRECISION = Decimal("0.01")

    HOURS_PER_DAY = Decimal("8")
    DAYS_PER_MONTH = Decimal("22")
    OVERTIME_MULTIPLIER = Decimal("1.5")

    # (code, name, amount)
    FIXED_DEDUCTIONS = (
        ("HEALTH", "Health Insurance", Decimal("150.00")),
        ("DENTAL", "Dental Insurance", Decimal("25.00")),
        ("VISION", "Vision Insurance", Decimal("10.00")),
        ("LIFE", "Life Insurance", Decimal("20.00")),
    )
    RETIREMENT_RATE = Decimal("0.05")

    # (code, name, rate on gross)
    TAX_RATES = (
        ("FED_TAX", "Federal Income Tax", Decimal("0.22")),
        ("STATE_TAX", "State Income Tax", Decimal("0.05")),
        ("SOC_SEC", "Social Security", Decimal("0.062")),
        ("MEDICARE", "Medicare", Decimal("0.0145")),
        ("UNEMP", "Unemployment Tax", Decimal("0.006")),
    )

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(PayslipCalculator.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def working_days(start: date, end: date) -> int:
        """Weekdays in the inclusive range."""
        days = 0
        current = start
        while current <= end:
            if current.weekday() < 5:
                days += 1
            current += timedelta(days=1)
        return days

    @classmethod
    def is_hourly(cls, employee: Employee) -> bool:
        if employee.hourly_rate is None:
            return False
        return employee.salary_amount is None or employee.employment_type in (
            EmploymentType.PART_TIME.value,
            EmploymentType.CONTRACT.value,
        )

    @classmethod
    def hourly_rate(cls, employee: Employee) -> Decimal:
        """Base hourly rate; salaried rates derive from 22 days of 8 hours."""
        if cls.is_hourly(employee):
            return Decimal(employee.hourly_rate)
        if employee.salary_amount is not None:
            monthly_hours = cls.DAYS_PER_MONTH * cls.HOURS_PER_DAY
            return cls.round_to_cents(Decimal(employee.salary_amount) / monthly_hours)
        return ZERO

    def calculate(
        self,
        employee: Employee,
        period_start: date,
        period_end: date,
        overtime_hours: Decimal = ZERO,
    ) -> PayslipCalculation:
        result = PayslipCalculation(overtime_hours=overtime_hours)

        if self.is_hourly(employee):
            hours = self.HOURS_PER_DAY * self.working_days(period_start, period_end)
            result.regular_hours = hours
            result.basic_pay = self.round_to_cents(hours * Decimal(employee.hourly_rate))
        elif employee.salary_amount is not None:
            result.regular_hours = self.DAYS_PER_MONTH * self.HOURS_PER_DAY
            result.basic_pay = self.round_to_cents(Decimal(employee.salary_amount))

        if overtime_hours > 0:
            rate = self.hourly_rate(employee) * self.OVERTIME_MULTIPLIER
            result.overtime_pay = self.round_to_cents(overtime_hours * rate)

        result.lines.extend(self._earning_lines(result))
        # Nothing to deduct from an empty payslip
        if result.gross_pay > 0:
            result.lines.extend(self._deduction_lines(result.basic_pay))
            result.lines.extend(self._tax_lines(result.gross_pay))
        return result

    def _earning_lines(self, result: PayslipCalculation) -> list[LineCandidate]:
        lines = [
            LineCandidate(PayrollItemType.EARNING, "BASIC", "Basic Pay", result.basic_pay)
        ]
        if result.overtime_pay > 0:
            lines.append(
                LineCandidate(PayrollItemType.EARNING, "OVERTIME", "Overtime", result.overtime_pay)
            )
        return lines

    def _deduction_lines(self, basic_pay: Decimal) -> list[LineCandidate]:
        lines = [
            LineCandidate(PayrollItemType.DEDUCTION, code, name, amount)
            for code, name, amount in self.FIXED_DEDUCTIONS
        ]
        lines.append(
            LineCandidate(
                PayrollItemType.DEDUCTION,
                "401K",
                "401(k) Retirement",
                self.round_to_cents(basic_pay * self.RETIREMENT_RATE),
            )
        )
        return lines

    def _tax_lines(self, gross_pay: Decimal) -> list[LineCandidate]:
        return [
            LineCandidate(PayrollItemType.TAX, code, name, self.round_to_cents(gross_pay * rate))
            for code, name, rate in self.TAX_RATES
        ]
