from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.attendance.model import AttendanceRecord
from src.payroll_system.payroll_system.core.enums import AttendanceStatus, HolidayType
from src.payroll_system.payroll_system.core.exceptions import InvalidPeriodError, ValidationError
from src.payroll_system.payroll_system.payroll.aggregator import aggregate_period

from tests.fakes import WEEK_END, WEEK_START, make_employee


def _record(day, status=AttendanceStatus.PRESENT, *, rate="600", adjustment="0", holiday_type=None, employee_id=1):
    return AttendanceRecord(
        employee_id=employee_id,
        work_date=day,
        status=status,
        daily_rate=Decimal(rate) if rate is not None else None,
        adjustment=Decimal(adjustment),
        holiday_type=holiday_type,
    )


def _week():
    return [WEEK_START + timedelta(days=i) for i in range(7)]


def test_all_present_week():
    records = [_record(d) for d in _week()]
    gross = aggregate_period(make_employee(), WEEK_START, WEEK_END, records)

    assert gross.gross_pay == Decimal("4200")
    assert len(gross.lines) == 7
    assert not any(line.synthesized for line in gross.lines)


def test_missing_days_are_synthesized():
    gross = aggregate_period(make_employee(rate="600"), WEEK_START, WEEK_END, [])

    assert gross.gross_pay == Decimal("3000")
    assert all(line.synthesized for line in gross.lines)
    assert [line.status for line in gross.lines][-2:] == [AttendanceStatus.DAY_OFF, AttendanceStatus.DAY_OFF]


def test_mixed_statuses_and_adjustments():
    days = _week()
    records = [
        _record(days[0], adjustment="50"),
        _record(days[1], AttendanceStatus.HALF_DAY),
        _record(days[2], AttendanceStatus.ABSENT, adjustment="20"),
        _record(days[3], AttendanceStatus.HOLIDAY, holiday_type=HolidayType.REGULAR),
        _record(days[4], AttendanceStatus.HOLIDAY, holiday_type=HolidayType.SPECIAL),
    ]
    gross = aggregate_period(make_employee(), WEEK_START, WEEK_END, records)

    # 650 + 300 + 20 + 780 + 1200 + day off x2
    assert gross.gross_pay == Decimal("2950")
    assert gross.lines[0].pay == Decimal("650")
    assert gross.lines[2].amount == 0
    assert gross.lines[2].adjustment == Decimal("20")


def test_record_rate_falls_back_to_employee_rate():
    records = [_record(WEEK_START, rate=None)]
    gross = aggregate_period(make_employee(rate="500"), WEEK_START, WEEK_START, records)

    assert gross.gross_pay == Decimal("500")
    assert gross.missing_rate_dates == ()


def test_no_rate_anywhere_pays_zero_and_reports_date():
    gross = aggregate_period(make_employee(rate=None), WEEK_START, WEEK_START + timedelta(days=1), [])

    assert gross.gross_pay == 0
    assert gross.missing_rate_dates == (WEEK_START, WEEK_START + timedelta(days=1))


def test_single_day_period():
    gross = aggregate_period(make_employee(), WEEK_START, WEEK_START, [_record(WEEK_START, adjustment="10")])
    assert gross.gross_pay == Decimal("610")


def test_records_outside_range_or_for_others_are_ignored():
    records = [
        _record(WEEK_START - timedelta(days=1), rate="9999"),
        _record(WEEK_START, rate="9999", employee_id=2),
    ]
    gross = aggregate_period(make_employee(), WEEK_START, WEEK_START, records)
    assert gross.gross_pay == Decimal("600")


def test_inverted_period_is_rejected():
    with pytest.raises(InvalidPeriodError):
        aggregate_period(make_employee(), WEEK_END, WEEK_START, [])


def test_negative_gross_is_rejected():
    records = [_record(WEEK_START, AttendanceStatus.ABSENT, adjustment="-100")]
    with pytest.raises(ValidationError):
        aggregate_period(make_employee(), WEEK_START, WEEK_START, records)


def test_duplicate_dates_are_rejected():
    records = [_record(WEEK_START), _record(WEEK_START, AttendanceStatus.ABSENT)]
    with pytest.raises(ValidationError):
        aggregate_period(make_employee(), WEEK_START, WEEK_END, records)


def test_holiday_without_type_fails_the_employee():
    records = [_record(date(2026, 1, 6), AttendanceStatus.HOLIDAY)]
    with pytest.raises(ValidationError):
        aggregate_period(make_employee(), WEEK_START, WEEK_END, records)
