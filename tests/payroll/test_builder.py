from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

from src.payroll_system.payroll_system.attendance.model import AttendanceRecord
from src.payroll_system.payroll_system.core.enums import AttendanceStatus, EntryStatus
from src.payroll_system.payroll_system.payroll.aggregator import aggregate_period
from src.payroll_system.payroll_system.payroll.builder import build_entry, rebuild_entry
from src.payroll_system.payroll_system.payroll.calculator.base import DeductionCalculator, StatutoryDeductions
from src.payroll_system.payroll_system.payroll.model import ManualDeductions

from tests.fakes import WEEK_END, WEEK_START, make_employee, make_period


def _five_day_week():
    records = []
    for i in range(7):
        day = WEEK_START + timedelta(days=i)
        status = AttendanceStatus.DAY_OFF if i >= 5 else AttendanceStatus.PRESENT
        records.append(AttendanceRecord(employee_id=1, work_date=day, status=status, daily_rate=Decimal("600")))
    return records


def test_end_to_end_weekly_entry():
    employee = make_employee(rate="600")
    gross = aggregate_period(employee, WEEK_START, WEEK_END, _five_day_week())
    entry = build_entry(employee, make_period(), gross)

    assert entry.gross_pay == Decimal("3000.00")
    assert entry.social_insurance == Decimal("150.00")
    assert entry.health_insurance == Decimal("75.00")
    assert entry.housing_fund == Decimal("50.00")
    assert entry.income_tax == Decimal("0.00")
    assert entry.total_deductions == Decimal("275.00")
    assert entry.net_pay == Decimal("2725.00")
    assert entry.status is EntryStatus.PENDING
    assert len(entry.daily_breakdown) == 7


def test_totals_are_derived_from_items():
    employee = make_employee(rate="600")
    gross = aggregate_period(employee, WEEK_START, WEEK_END, _five_day_week())
    manual = ManualDeductions(
        cash_advance=Decimal("100"),
        loan=Decimal("50"),
        vat=Decimal("12"),
        other_deductions=Decimal("8"),
        short=Decimal("5"),
    )
    entry = build_entry(employee, make_period(), gross, manual=manual)

    items = [
        entry.social_insurance,
        entry.health_insurance,
        entry.housing_fund,
        entry.income_tax,
        entry.manual.cash_advance,
        entry.manual.loan,
        entry.manual.vat,
        entry.manual.other_deductions,
        entry.manual.short,
    ]
    assert entry.total_deductions == sum(items)
    assert entry.net_pay == entry.gross_pay - entry.total_deductions
    assert entry.net_pay == Decimal("2550.00")


def test_money_fields_are_rounded_half_up():
    employee = make_employee(rate="480.15")
    gross = aggregate_period(employee, WEEK_START, WEEK_END, [])
    entry = build_entry(employee, make_period(), gross)

    # 480.15 x 5
    assert entry.gross_pay == Decimal("2400.75")
    # monthly 9603 -> bracket 10000
    assert entry.social_insurance == Decimal("125.00")
    assert entry.health_insurance == Decimal("62.50")
    # 9603 x 0.02 / 4 = 48.015
    assert entry.housing_fund == Decimal("48.02")
    for value in (entry.gross_pay, entry.social_insurance, entry.health_insurance, entry.housing_fund):
        assert value == value.quantize(Decimal("0.01"))


def test_net_pay_is_floored_at_zero():
    employee = make_employee(rate="100")
    gross = aggregate_period(employee, WEEK_START, WEEK_START, [])
    entry = build_entry(employee, make_period(), gross, manual=ManualDeductions(loan=Decimal("500")))

    assert entry.net_pay == 0
    assert entry.net_shortfall == entry.total_deductions - entry.gross_pay
    assert entry.net_shortfall > 0


def test_zero_gross_entry_has_no_statutory_deductions():
    employee = make_employee(rate="600")
    records = [
        AttendanceRecord(employee_id=1, work_date=WEEK_START + timedelta(days=i), status=AttendanceStatus.ABSENT,
                         daily_rate=Decimal("600"))
        for i in range(7)
    ]
    entry = build_entry(employee, make_period(), aggregate_period(employee, WEEK_START, WEEK_END, records))

    assert entry.gross_pay == 0
    assert entry.statutory_total == 0
    assert entry.net_pay == 0


class FlatCalculator(DeductionCalculator):
    def compute(self, gross_pay):
        return StatutoryDeductions(Decimal("1"), Decimal("2"), Decimal("3"), Decimal("4"))


def test_calculator_can_be_swapped():
    employee = make_employee(rate="600")
    gross = aggregate_period(employee, WEEK_START, WEEK_END, [])
    entry = build_entry(employee, make_period(), gross, calculator=FlatCalculator())

    assert entry.statutory_total == Decimal("10")


def test_rebuild_keeps_manual_deductions_status_and_id():
    employee = make_employee(rate="600")
    period = make_period()
    first = build_entry(
        employee,
        period,
        aggregate_period(employee, WEEK_START, WEEK_END, []),
        manual=ManualDeductions(cash_advance=Decimal("200")),
    )
    first = replace(first, entry_id=7, status=EntryStatus.APPROVED)

    records = [
        AttendanceRecord(employee_id=1, work_date=WEEK_START, status=AttendanceStatus.ABSENT, daily_rate=Decimal("600"))
    ]
    rebuilt = rebuild_entry(first, employee, period, aggregate_period(employee, WEEK_START, WEEK_END, records))

    assert rebuilt.entry_id == 7
    assert rebuilt.status is EntryStatus.APPROVED
    assert rebuilt.manual.cash_advance == Decimal("200")
    assert rebuilt.gross_pay == Decimal("2400.00")
