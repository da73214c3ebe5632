from __future__ import annotations

from datetime import date
from typing import Iterable

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import iter_dates
from ..core.constants import ZERO
from ..core.exceptions import InvalidPeriodError, ValidationError
from ..employees.model import Employee
from .daily_pay import daily_pay, synthesize_default
from .model import DailyPayLine, GrossPay


def aggregate_period(
    employee: Employee,
    period_start: date,
    period_end: date,
    records: Iterable[AttendanceRecord],
) -> GrossPay:
    """Sum daily pay over every calendar date of the period, inclusive.

    Days without a record are synthesized from the employee's defaults. When
    neither the record nor the employee carries a rate, the day's base amount
    is zero and the date is reported in missing_rate_dates.
    """
    if period_end < period_start:
        raise InvalidPeriodError(f"Period end {period_end} is before period start {period_start}")

    by_date: dict[date, AttendanceRecord] = {}
    for record in records:
        if record.employee_id != employee.employee_id:
            continue
        if record.work_date in by_date:
            raise ValidationError(f"Duplicate attendance for employee {employee.employee_id} on {record.work_date}")
        by_date[record.work_date] = record

    gross = ZERO
    lines: list[DailyPayLine] = []
    missing_rate: list[date] = []

    for day in iter_dates(period_start, period_end):
        record = by_date.get(day)
        synthesized = record is None
        if record is None:
            record = synthesize_default(employee, day)

        rate = record.daily_rate if record.daily_rate is not None else employee.daily_rate
        if rate is None:
            missing_rate.append(day)
            rate = ZERO

        amount = daily_pay(record.status, rate, holiday_type=record.holiday_type)
        line = DailyPayLine(
            work_date=day,
            status=record.status,
            rate=rate,
            amount=amount,
            adjustment=record.adjustment,
            synthesized=synthesized,
        )
        lines.append(line)
        gross += line.pay

    if not gross.is_finite() or gross < 0:
        raise ValidationError(f"Gross pay for employee {employee.employee_id} is negative ({gross})")

    return GrossPay(
        employee_id=employee.employee_id,
        period_start=period_start,
        period_end=period_end,
        gross_pay=gross,
        lines=tuple(lines),
        missing_rate_dates=tuple(missing_rate),
    )
