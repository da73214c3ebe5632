from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..common.validators import to_cents
from ..core.enums import EntryStatus
from ..employees.model import Employee
from ..periods.model import PayrollPeriod
from .calculator.base import DeductionCalculator
from .calculator.statutory_calculator import StatutoryDeductionCalculator
from .model import DailyPayLine, GrossPay, ManualDeductions, PayrollEntry


def _rounded_lines(gross: GrossPay) -> tuple[DailyPayLine, ...]:
    return tuple(
        replace(line, rate=to_cents(line.rate), amount=to_cents(line.amount), adjustment=to_cents(line.adjustment))
        for line in gross.lines
    )


def build_entry(
    employee: Employee,
    period: PayrollPeriod,
    gross: GrossPay,
    *,
    calculator: Optional[DeductionCalculator] = None,
    manual: Optional[ManualDeductions] = None,
    status: EntryStatus = EntryStatus.PENDING,
) -> PayrollEntry:
    """Combine gross pay with statutory and manual deductions.

    Deductions are computed on the unrounded gross; every stored money field is
    then rounded to centavos so the derived totals add up exactly.
    """
    calculator = calculator or StatutoryDeductionCalculator()
    deductions = calculator.compute(gross.gross_pay)

    return PayrollEntry(
        employee_id=employee.employee_id,
        period_id=period.period_id,
        daily_rate=to_cents(employee.daily_rate) if employee.daily_rate is not None else None,
        gross_pay=to_cents(gross.gross_pay),
        social_insurance=to_cents(deductions.social_insurance),
        health_insurance=to_cents(deductions.health_insurance),
        housing_fund=to_cents(deductions.housing_fund),
        income_tax=to_cents(deductions.income_tax),
        manual=manual or ManualDeductions(),
        status=status,
        daily_breakdown=_rounded_lines(gross),
    )


def rebuild_entry(
    entry: PayrollEntry,
    employee: Employee,
    period: PayrollPeriod,
    gross: GrossPay,
    *,
    calculator: Optional[DeductionCalculator] = None,
) -> PayrollEntry:
    """Recompute gross and statutory fields of an existing entry, keeping manual deductions and status."""
    fresh = build_entry(employee, period, gross, calculator=calculator, manual=entry.manual, status=entry.status)
    return replace(fresh, entry_id=entry.entry_id)
