from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Any, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.validators import require_non_negative
from ..core.enums import DuplicatePolicy, EntryOutcome, EntryStatus, PeriodStatus
from ..core.exceptions import (
    DomainError,
    DuplicateEntryError,
    InvalidPeriodError,
    InvalidTransitionError,
    NotFoundError,
    PayrollBatchError,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..periods.model import PayrollPeriod
from ..periods.repository import PeriodRepository
from ..periods.service import validate_period_dates
from .aggregator import aggregate_period
from .builder import build_entry, rebuild_entry
from .calculator.base import DeductionCalculator
from .calculator.statutory_calculator import StatutoryDeductionCalculator
from .model import BatchResult, EmployeeOutcome, GrossPay, ManualDeductions, PayrollEntry, Payslip
from .repository import PayrollEntryRepository

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[EntryStatus, set[EntryStatus]] = {
    EntryStatus.PENDING: {EntryStatus.APPROVED},
    EntryStatus.APPROVED: {EntryStatus.PENDING, EntryStatus.PAID},
    EntryStatus.PAID: set(),
}


class PayrollService:
    """Attendance-to-payroll generation and payroll entry maintenance.

    The arithmetic lives in aggregator/builder (pure); this layer loads data,
    applies the duplicate policy, persists and logs.
    """

    def __init__(
        self,
        *,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        periods: PeriodRepository,
        entries: PayrollEntryRepository,
        calculator: Optional[DeductionCalculator] = None,
    ):
        self._employees = employees
        self._attendance = attendance
        self._periods = periods
        self._entries = entries
        self._calculator = calculator or StatutoryDeductionCalculator()

    # ----- loading -----

    def _get_period(self, period_id: int) -> PayrollPeriod:
        period = self._periods.get_by_id(int(period_id))
        if not period:
            raise InvalidPeriodError(f"Payroll period {period_id} does not exist")
        validate_period_dates(period.period_start, period.period_end)
        return period

    def _get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError(f"Employee {employee_id} does not exist")
        return employee

    def _get_entry(self, entry_id: int) -> PayrollEntry:
        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError(f"Payroll entry {entry_id} does not exist")
        return entry

    def _gross_for(self, employee: Employee, period: PayrollPeriod, records: Sequence[AttendanceRecord]) -> GrossPay:
        gross = aggregate_period(employee, period.period_start, period.period_end, records)
        if gross.missing_rate_dates:
            logger.warning(
                "No daily rate for employee %s on %d day(s) of period %s; paid as 0",
                employee.employee_number,
                len(gross.missing_rate_dates),
                period.period_id,
            )
        return gross

    def preview_gross(self, *, employee_id: int, period_id: int) -> GrossPay:
        """Daily breakdown and gross pay without persisting anything."""
        employee = self._get_employee(employee_id)
        period = self._get_period(period_id)
        records = self._attendance.list_for_employee(
            employee.employee_id, start_date=period.period_start, end_date=period.period_end
        )
        return self._gross_for(employee, period, records)

    # ----- generation -----

    def _plan(
        self,
        employee: Employee,
        period: PayrollPeriod,
        records: Sequence[AttendanceRecord],
        *,
        existing: Optional[PayrollEntry],
        policy: DuplicatePolicy,
    ) -> EmployeeOutcome:
        if existing and policy is DuplicatePolicy.SKIP_EXISTING:
            return EmployeeOutcome(employee.employee_id, EntryOutcome.SKIPPED, "entry already exists")
        if existing and policy is DuplicatePolicy.REJECT_EXISTING:
            return EmployeeOutcome(employee.employee_id, EntryOutcome.DUPLICATE, "entry already exists")
        if existing and existing.status is EntryStatus.PAID:
            logger.warning(
                "Not overwriting paid entry %s for employee %s", existing.entry_id, employee.employee_number
            )
            return EmployeeOutcome(employee.employee_id, EntryOutcome.FAILED, "entry already paid")

        try:
            entry = build_entry(employee, period, self._gross_for(employee, period, records), calculator=self._calculator)
        except DomainError as exc:
            logger.warning("Payroll failed for employee %s: %s", employee.employee_number, exc)
            return EmployeeOutcome(employee.employee_id, EntryOutcome.FAILED, str(exc))

        if entry.net_shortfall > 0:
            logger.warning(
                "Deductions exceed gross pay for employee %s by %s; net pay floored at 0",
                employee.employee_number,
                entry.net_shortfall,
            )
        if existing:
            return EmployeeOutcome(
                employee.employee_id, EntryOutcome.OVERWRITTEN, entry=replace(entry, entry_id=existing.entry_id)
            )
        return EmployeeOutcome(employee.employee_id, EntryOutcome.CREATED, entry=entry)

    def _persist(self, outcomes: Sequence[EmployeeOutcome]) -> list[EmployeeOutcome]:
        """Write the planned entries and swap in the stored copies (with entry_id)."""
        saved = self._entries.save_batch(
            inserts=[o.entry for o in outcomes if o.outcome is EntryOutcome.CREATED],
            replacements=[o.entry for o in outcomes if o.outcome is EntryOutcome.OVERWRITTEN],
        )
        by_employee = {e.employee_id: e for e in saved}
        return [
            replace(o, entry=by_employee[o.employee_id]) if o.employee_id in by_employee else o for o in outcomes
        ]

    def generate_for_period(
        self,
        period_id: int,
        *,
        policy: Any = DuplicatePolicy.SKIP_EXISTING,
        abort_on_failure: bool = False,
    ) -> BatchResult:
        """Generate entries for every active employee in one transaction.

        Per-employee failures are collected in the result; an invalid period or a
        storage failure aborts the batch and nothing is written. With
        abort_on_failure, any per-employee failure aborts it as well.
        """
        policy = DuplicatePolicy.parse(policy)
        period = self._get_period(period_id)
        logger.info(
            "Generating payroll for period %s (%s..%s), policy=%s",
            period.period_id,
            period.period_start,
            period.period_end,
            policy.value,
        )

        employees = self._employees.list_active()
        by_employee: dict[int, list[AttendanceRecord]] = defaultdict(list)
        for record in self._attendance.list_for_range(start_date=period.period_start, end_date=period.period_end):
            by_employee[record.employee_id].append(record)
        existing = {e.employee_id: e for e in self._entries.list_for_period(period.period_id)}

        outcomes = [
            self._plan(
                employee,
                period,
                by_employee.get(employee.employee_id, []),
                existing=existing.get(employee.employee_id),
                policy=policy,
            )
            for employee in employees
        ]
        result = BatchResult(period_id=period.period_id, policy=policy, outcomes=tuple(outcomes))
        if abort_on_failure and result.failed_count:
            logger.error("Payroll batch for period %s aborted: %s", period.period_id, result.summary()["failures"])
            raise PayrollBatchError(result)

        result = replace(result, outcomes=tuple(self._persist(outcomes)))
        if result.failed_count == 0:
            self._periods.update_status(period.period_id, PeriodStatus.COMPLETED)
        logger.info(
            "Payroll generation for period %s done: created=%d overwritten=%d skipped=%d failed=%d",
            period.period_id,
            len(result.created),
            len(result.overwritten),
            len(result.skipped),
            result.failed_count,
        )
        return result

    def generate_for_employee(
        self,
        *,
        employee_id: int,
        period_id: int,
        policy: Any = DuplicatePolicy.REJECT_EXISTING,
    ) -> EmployeeOutcome:
        policy = DuplicatePolicy.parse(policy)
        period = self._get_period(period_id)
        employee = self._get_employee(employee_id)
        records = self._attendance.list_for_employee(
            employee.employee_id, start_date=period.period_start, end_date=period.period_end
        )
        existing = self._entries.get_for_employee_and_period(employee.employee_id, period.period_id)

        outcome = self._plan(employee, period, records, existing=existing, policy=policy)
        try:
            (outcome,) = self._persist([outcome])
        except DuplicateEntryError:
            # Lost a race with a concurrent insert for the same pair.
            if policy is DuplicatePolicy.SKIP_EXISTING:
                return EmployeeOutcome(employee.employee_id, EntryOutcome.SKIPPED, "entry already exists")
            if policy is DuplicatePolicy.REJECT_EXISTING:
                return EmployeeOutcome(employee.employee_id, EntryOutcome.DUPLICATE, "entry already exists")
            raise
        return outcome

    # ----- maintenance -----

    def _ensure_editable(self, entry: PayrollEntry) -> None:
        if entry.status is EntryStatus.PAID:
            raise InvalidTransitionError(f"Payroll entry {entry.entry_id} is already paid")

    def recalculate_entry(self, entry_id: int) -> PayrollEntry:
        """Re-derive gross and statutory deductions from current attendance."""
        entry = self._get_entry(entry_id)
        self._ensure_editable(entry)
        employee = self._get_employee(entry.employee_id)
        period = self._get_period(entry.period_id)
        records = self._attendance.list_for_employee(
            employee.employee_id, start_date=period.period_start, end_date=period.period_end
        )
        updated = rebuild_entry(
            entry, employee, period, self._gross_for(employee, period, records), calculator=self._calculator
        )
        self._entries.update(updated)
        logger.info("Recalculated payroll entry %s: gross %s -> %s", entry_id, entry.gross_pay, updated.gross_pay)
        return updated

    def update_manual_deductions(
        self,
        entry_id: int,
        *,
        cash_advance: Any = 0,
        loan: Any = 0,
        vat: Any = 0,
        other_deductions: Any = 0,
        short: Any = 0,
    ) -> PayrollEntry:
        entry = self._get_entry(entry_id)
        self._ensure_editable(entry)
        manual = ManualDeductions(
            cash_advance=require_non_negative(cash_advance or 0, "cash_advance"),
            loan=require_non_negative(loan or 0, "loan"),
            vat=require_non_negative(vat or 0, "vat"),
            other_deductions=require_non_negative(other_deductions or 0, "other_deductions"),
            short=require_non_negative(short or 0, "short"),
        )
        updated = replace(entry, manual=manual)
        self._entries.update(updated)
        if updated.net_shortfall > 0:
            logger.warning("Deductions exceed gross pay on entry %s by %s", entry_id, updated.net_shortfall)
        return updated

    def set_status(self, entry_id: int, status: Any) -> PayrollEntry:
        entry = self._get_entry(entry_id)
        target = EntryStatus.parse(status)
        if target is entry.status:
            return entry
        if target not in ALLOWED_TRANSITIONS[entry.status]:
            raise InvalidTransitionError(f"Cannot move payroll entry from {entry.status.value} to {target.value}")
        self._entries.update_status(entry.entry_id, target)
        logger.info("Payroll entry %s: %s -> %s", entry_id, entry.status.value, target.value)
        return replace(entry, status=target)

    def delete_entry(self, entry_id: int) -> None:
        entry = self._get_entry(entry_id)
        self._ensure_editable(entry)
        self._entries.delete(entry.entry_id)

    def list_entries(self, period_id: int) -> Sequence[PayrollEntry]:
        return self._entries.list_for_period(self._get_period(period_id).period_id)

    # ----- read models -----

    def build_payslip(self, entry_id: int) -> Payslip:
        entry = self._get_entry(entry_id)
        employee = self._get_employee(entry.employee_id)
        period = self._get_period(entry.period_id)
        lines = entry.daily_breakdown
        if not lines:
            # Entries created by hand carry no stored breakdown.
            records = self._attendance.list_for_employee(
                employee.employee_id, start_date=period.period_start, end_date=period.period_end
            )
            lines = self._gross_for(employee, period, records).lines
        return Payslip(employee=employee, period=period, entry=entry, lines=tuple(lines))

    def register_rows(self, period_id: int) -> list[dict]:
        """Flat rows for the payroll register export of one period."""
        rows: list[dict] = []
        for entry in self.list_entries(period_id):
            employee = self._employees.get_by_id(entry.employee_id)
            if employee is None:
                raise ValidationError(f"Payroll entry {entry.entry_id} references a missing employee")
            rows.append(
                {
                    "employee_number": employee.employee_number,
                    "full_name": employee.full_name,
                    "department": employee.department or "-",
                    "gross_pay": str(entry.gross_pay),
                    "sss": str(entry.social_insurance),
                    "philhealth": str(entry.health_insurance),
                    "pagibig": str(entry.housing_fund),
                    "tax": str(entry.income_tax),
                    "cash_advance": str(entry.manual.cash_advance),
                    "loan": str(entry.manual.loan),
                    "vat": str(entry.manual.vat),
                    "other_deductions": str(entry.manual.other_deductions),
                    "short": str(entry.manual.short),
                    "total_deductions": str(entry.total_deductions),
                    "net_pay": str(entry.net_pay),
                    "status": entry.status.value,
                }
            )
        return rows
