from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.attendance.model import AttendanceRecord
from src.payroll_system.payroll_system.core.enums import (
    AttendanceStatus,
    DuplicatePolicy,
    EntryOutcome,
    EntryStatus,
    PeriodStatus,
)
from src.payroll_system.payroll_system.core.exceptions import (
    DuplicateEntryError,
    InvalidPeriodError,
    InvalidTransitionError,
    NotFoundError,
    PayrollBatchError,
    StaleEntryError,
    ValidationError,
)
from src.payroll_system.payroll_system.payroll.service import PayrollService

from tests.fakes import (
    WEEK_END,
    WEEK_START,
    FakeAttendanceRepo,
    FakeEmployeesRepo,
    FakePayrollRepo,
    FakePeriodsRepo,
    make_employee,
    make_period,
)


def _present(employee_id, day, rate="600", status=AttendanceStatus.PRESENT, holiday_type=None):
    return AttendanceRecord(
        employee_id=employee_id,
        work_date=day,
        status=status,
        daily_rate=Decimal(rate),
        holiday_type=holiday_type,
    )


def _build(records=(), employees=None, periods=None):
    employees_repo = FakeEmployeesRepo(
        employees
        if employees is not None
        else [make_employee(1, rate="600"), make_employee(2, rate="500"), make_employee(3, active=False)]
    )
    attendance_repo = FakeAttendanceRepo(records)
    payroll_repo = FakePayrollRepo()
    periods_repo = FakePeriodsRepo(periods if periods is not None else [make_period(1)], entries=payroll_repo)
    service = PayrollService(
        employees=employees_repo,
        attendance=attendance_repo,
        periods=periods_repo,
        entries=payroll_repo,
    )
    return service, attendance_repo, periods_repo, payroll_repo


def test_generate_creates_entries_for_active_employees():
    svc, _, periods, entries = _build()

    result = svc.generate_for_period(1)

    assert [o.employee_id for o in result.created] == [1, 2]
    assert result.failed_count == 0
    gross = {e.employee_id: e.gross_pay for e in entries.all()}
    assert gross == {1: Decimal("3000.00"), 2: Decimal("2500.00")}
    assert periods.get_by_id(1).status is PeriodStatus.COMPLETED


def test_skip_existing_leaves_entries_untouched():
    svc, _, _, entries = _build()
    svc.generate_for_period(1)
    before = {e.entry_id: e for e in entries.all()}

    result = svc.generate_for_period(1, policy="skip_existing")

    assert len(result.skipped) == 2
    assert result.failed_count == 0
    assert {e.entry_id: e for e in entries.all()} == before


def test_reject_existing_reports_duplicates():
    svc, _, _, entries = _build()
    svc.generate_for_period(1)

    result = svc.generate_for_period(1, policy=DuplicatePolicy.REJECT_EXISTING)

    assert len(entries.all()) == 2
    assert [o.outcome for o in result.failed] == [EntryOutcome.DUPLICATE, EntryOutcome.DUPLICATE]
    assert result.summary()["failures"][0]["reason"] == "entry already exists"


def test_overwrite_existing_recomputes_and_resets_manual_fields():
    svc, attendance, _, entries = _build()
    svc.generate_for_period(1)
    first = entries.get_for_employee_and_period(1, 1)
    svc.update_manual_deductions(first.entry_id, loan=100)

    attendance.create(_present(1, WEEK_START, status=AttendanceStatus.ABSENT))
    result = svc.generate_for_period(1, policy="overwrite_existing")

    assert len(result.overwritten) == 2
    updated = entries.get_for_employee_and_period(1, 1)
    assert updated.entry_id == first.entry_id
    assert updated.gross_pay == Decimal("2400.00")
    assert updated.manual.loan == 0
    assert len(entries.all()) == 2


def test_one_bad_employee_does_not_stop_the_batch():
    bad_holiday = _present(2, WEEK_START + timedelta(days=1), status=AttendanceStatus.HOLIDAY)
    svc, _, periods, entries = _build([bad_holiday])

    result = svc.generate_for_period(1)

    assert [o.employee_id for o in result.created] == [1]
    assert [(o.employee_id, o.outcome) for o in result.failed] == [(2, EntryOutcome.FAILED)]
    assert "holiday type" in result.failed[0].reason
    assert [e.employee_id for e in entries.all()] == [1]
    assert periods.get_by_id(1).status is PeriodStatus.PENDING


def test_abort_on_failure_writes_nothing():
    bad_holiday = _present(2, WEEK_START, status=AttendanceStatus.HOLIDAY)
    svc, _, periods, entries = _build([bad_holiday])

    with pytest.raises(PayrollBatchError) as exc_info:
        svc.generate_for_period(1, abort_on_failure=True)

    assert exc_info.value.result.failed_count == 1
    assert entries.all() == []
    assert periods.get_by_id(1).status is PeriodStatus.PENDING


def test_missing_period_aborts():
    svc, _, _, entries = _build()
    with pytest.raises(InvalidPeriodError):
        svc.generate_for_period(99)
    assert entries.all() == []


def test_inverted_period_aborts():
    svc, _, _, _ = _build(periods=[make_period(1, start=WEEK_END, end=WEEK_START)])
    with pytest.raises(InvalidPeriodError):
        svc.generate_for_period(1)


def test_storage_failure_rolls_back_batch():
    svc, _, periods, entries = _build()
    entries.fail_with = RuntimeError("connection lost")

    with pytest.raises(RuntimeError):
        svc.generate_for_period(1)

    assert entries.all() == []
    assert periods.get_by_id(1).status is PeriodStatus.PENDING


def test_unknown_policy_is_rejected():
    svc, _, _, _ = _build()
    with pytest.raises(ValidationError):
        svc.generate_for_period(1, policy="merge")


def test_clamped_entries_are_reported():
    svc, _, _, _ = _build(employees=[make_employee(1, rate="10")])

    result = svc.generate_for_period(1)

    entry = result.created[0].entry
    assert entry.net_pay == 0
    assert result.summary()["clamped"] == [1]


def test_generate_for_employee_twice_with_reject_existing():
    svc, _, _, entries = _build()

    first = svc.generate_for_employee(employee_id=1, period_id=1, policy="reject_existing")
    second = svc.generate_for_employee(employee_id=1, period_id=1, policy="reject_existing")

    assert first.outcome is EntryOutcome.CREATED
    assert second.outcome is EntryOutcome.DUPLICATE
    assert not second.ok
    assert len(entries.all()) == 1


def test_generate_for_employee_lost_race_is_a_duplicate():
    svc, _, _, entries = _build()
    entries.fail_with = DuplicateEntryError(1, 1)

    outcome = svc.generate_for_employee(employee_id=1, period_id=1)

    assert outcome.outcome is EntryOutcome.DUPLICATE


def test_generate_for_unknown_employee():
    svc, _, _, _ = _build()
    with pytest.raises(NotFoundError):
        svc.generate_for_employee(employee_id=42, period_id=1)


def test_preview_does_not_persist():
    svc, _, _, entries = _build([_present(1, WEEK_START, status=AttendanceStatus.HALF_DAY)])

    gross = svc.preview_gross(employee_id=1, period_id=1)

    assert gross.gross_pay == Decimal("2700")
    assert entries.all() == []


def test_recalculate_picks_up_attendance_changes_and_keeps_manual():
    svc, attendance, _, entries = _build()
    svc.generate_for_period(1)
    entry = entries.get_for_employee_and_period(1, 1)
    svc.update_manual_deductions(entry.entry_id, cash_advance="150.50")

    attendance.create(_present(1, WEEK_START + timedelta(days=5), rate="600"))
    updated = svc.recalculate_entry(entry.entry_id)

    assert updated.gross_pay == Decimal("3600.00")
    assert updated.manual.cash_advance == Decimal("150.50")
    assert entries.get_by_id(entry.entry_id) == updated


def test_manual_deductions_must_be_non_negative():
    svc, _, _, entries = _build()
    svc.generate_for_period(1)
    entry = entries.get_for_employee_and_period(1, 1)

    with pytest.raises(ValidationError):
        svc.update_manual_deductions(entry.entry_id, loan=-1)


def test_manual_deductions_update_totals():
    svc, _, _, entries = _build()
    svc.generate_for_period(1)
    entry = entries.get_for_employee_and_period(1, 1)

    updated = svc.update_manual_deductions(entry.entry_id, cash_advance=100, vat="12", short="3")

    assert updated.total_deductions == Decimal("390.00")
    assert updated.net_pay == Decimal("2610.00")


def test_status_workflow():
    svc, _, _, entries = _build()
    svc.generate_for_period(1)
    entry = entries.get_for_employee_and_period(1, 1)

    with pytest.raises(InvalidTransitionError):
        svc.set_status(entry.entry_id, "paid")

    assert svc.set_status(entry.entry_id, "approved").status is EntryStatus.APPROVED
    assert svc.set_status(entry.entry_id, "paid").status is EntryStatus.PAID

    with pytest.raises(InvalidTransitionError):
        svc.set_status(entry.entry_id, "pending")
    with pytest.raises(InvalidTransitionError):
        svc.recalculate_entry(entry.entry_id)
    with pytest.raises(InvalidTransitionError):
        svc.update_manual_deductions(entry.entry_id, loan=1)
    with pytest.raises(InvalidTransitionError):
        svc.delete_entry(entry.entry_id)


def test_delete_entry():
    svc, _, _, entries = _build()
    svc.generate_for_period(1)
    entry = entries.get_for_employee_and_period(2, 1)

    svc.delete_entry(entry.entry_id)

    assert entries.get_by_id(entry.entry_id) is None
    with pytest.raises(NotFoundError):
        svc.delete_entry(entry.entry_id)


def test_payslip_uses_stored_breakdown_or_rederives_it():
    svc, _, _, entries = _build()
    svc.generate_for_period(1)
    entry = entries.get_for_employee_and_period(1, 1)

    slip = svc.build_payslip(entry.entry_id)
    assert slip.employee.employee_id == 1
    assert slip.period.period_id == 1
    assert len(slip.lines) == 7

    entries.update(replace(entry, daily_breakdown=()))
    slip = svc.build_payslip(entry.entry_id)
    assert len(slip.lines) == 7
    assert sum(line.pay for line in slip.lines) == Decimal("3000")


def test_register_rows():
    svc, _, _, _ = _build()
    svc.generate_for_period(1)

    rows = svc.register_rows(1)

    assert [r["employee_number"] for r in rows] == ["EMP-001", "EMP-002"]
    assert rows[0]["net_pay"] == "2725.00"
    assert rows[0]["status"] == "pending"


def test_generated_outcomes_carry_stored_entry_ids():
    svc, _, _, entries = _build()

    result = svc.generate_for_period(1)
    single = svc.generate_for_employee(employee_id=1, period_id=1, policy="overwrite_existing")

    stored = {e.employee_id: e.entry_id for e in entries.all()}
    assert {o.employee_id: o.entry.entry_id for o in result.created} == stored
    assert single.outcome is EntryOutcome.OVERWRITTEN
    assert single.entry.entry_id == stored[1]


def test_overwrite_existing_leaves_paid_entries_alone():
    svc, attendance, _, entries = _build()
    svc.generate_for_period(1)
    paid = entries.get_for_employee_and_period(1, 1)
    svc.update_manual_deductions(paid.entry_id, loan=100)
    svc.set_status(paid.entry_id, "approved")
    svc.set_status(paid.entry_id, "paid")

    attendance.create(_present(1, WEEK_START, status=AttendanceStatus.ABSENT))
    result = svc.generate_for_period(1, policy="overwrite_existing")

    assert [(o.employee_id, o.reason) for o in result.failed] == [(1, "entry already paid")]
    assert [o.employee_id for o in result.overwritten] == [2]
    kept = entries.get_by_id(paid.entry_id)
    assert kept.status is EntryStatus.PAID
    assert kept.manual.loan == Decimal("100")
    assert kept.gross_pay == Decimal("3000.00")

    single = svc.generate_for_employee(employee_id=1, period_id=1, policy="overwrite_existing")
    assert single.outcome is EntryOutcome.FAILED
    assert entries.get_by_id(paid.entry_id) == kept


def test_overwrite_of_vanished_entry_rolls_back(monkeypatch):
    svc, attendance, _, entries = _build()
    svc.generate_for_period(1)
    before = {e.entry_id: e for e in entries.all()}
    first = entries.get_for_employee_and_period(1, 1)
    original = entries.save_batch

    def save_after_concurrent_delete(*, inserts, replacements):
        entries.delete(first.entry_id)
        return original(inserts=inserts, replacements=replacements)

    monkeypatch.setattr(entries, "save_batch", save_after_concurrent_delete)
    attendance.create(_present(2, WEEK_START, rate="500", status=AttendanceStatus.ABSENT))

    with pytest.raises(StaleEntryError):
        svc.generate_for_period(1, policy="overwrite_existing")

    second = entries.get_for_employee_and_period(2, 1)
    assert second == before[second.entry_id]
