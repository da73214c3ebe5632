from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.constants import ZERO
from ..core.enums import AttendanceStatus, DuplicatePolicy, EntryOutcome, EntryStatus
from ..employees.model import Employee
from ..periods.model import PayrollPeriod


@dataclass(frozen=True)
class DailyPayLine:
    """One day of the payslip breakdown. pay = amount + adjustment."""

    work_date: date
    status: AttendanceStatus
    rate: Decimal
    amount: Decimal
    adjustment: Decimal
    synthesized: bool = False

    @property
    def pay(self) -> Decimal:
        return self.amount + self.adjustment


@dataclass(frozen=True)
class GrossPay:
    employee_id: int
    period_start: date
    period_end: date
    gross_pay: Decimal
    lines: tuple[DailyPayLine, ...]
    missing_rate_dates: tuple[date, ...] = ()


@dataclass(frozen=True)
class ManualDeductions:
    """Deductions entered by HR; not derived from gross pay."""

    cash_advance: Decimal = ZERO
    loan: Decimal = ZERO
    vat: Decimal = ZERO
    other_deductions: Decimal = ZERO
    short: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.cash_advance + self.loan + self.vat + self.other_deductions + self.short


@dataclass(frozen=True)
class PayrollEntry:
    """Domain entity: one employee's pay for one period.

    total_deductions and net_pay are always derived from the itemized fields.
    Net pay is floored at zero; the uncovered part is exposed as net_shortfall.
    """

    employee_id: int
    period_id: int
    daily_rate: Optional[Decimal]
    gross_pay: Decimal
    social_insurance: Decimal
    health_insurance: Decimal
    housing_fund: Decimal
    income_tax: Decimal
    manual: ManualDeductions = field(default_factory=ManualDeductions)
    status: EntryStatus = EntryStatus.PENDING
    daily_breakdown: tuple[DailyPayLine, ...] = ()
    entry_id: Optional[int] = None

    @property
    def statutory_total(self) -> Decimal:
        return self.social_insurance + self.health_insurance + self.housing_fund + self.income_tax

    @property
    def total_deductions(self) -> Decimal:
        return self.statutory_total + self.manual.total

    @property
    def net_pay(self) -> Decimal:
        return max(ZERO, self.gross_pay - self.total_deductions)

    @property
    def net_shortfall(self) -> Decimal:
        return max(ZERO, self.total_deductions - self.gross_pay)


@dataclass(frozen=True)
class EmployeeOutcome:
    employee_id: int
    outcome: EntryOutcome
    reason: Optional[str] = None
    entry: Optional[PayrollEntry] = None

    @property
    def ok(self) -> bool:
        return self.outcome in (EntryOutcome.CREATED, EntryOutcome.OVERWRITTEN, EntryOutcome.SKIPPED)


@dataclass(frozen=True)
class BatchResult:
    period_id: int
    policy: DuplicatePolicy
    outcomes: tuple[EmployeeOutcome, ...]

    def _with(self, *kinds: EntryOutcome) -> list[EmployeeOutcome]:
        return [o for o in self.outcomes if o.outcome in kinds]

    @property
    def created(self) -> list[EmployeeOutcome]:
        return self._with(EntryOutcome.CREATED)

    @property
    def overwritten(self) -> list[EmployeeOutcome]:
        return self._with(EntryOutcome.OVERWRITTEN)

    @property
    def skipped(self) -> list[EmployeeOutcome]:
        return self._with(EntryOutcome.SKIPPED)

    @property
    def failed(self) -> list[EmployeeOutcome]:
        return self._with(EntryOutcome.DUPLICATE, EntryOutcome.FAILED)

    @property
    def succeeded_count(self) -> int:
        return len(self.created) + len(self.overwritten)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def clamped(self) -> list[EmployeeOutcome]:
        """Entries whose deductions exceeded gross pay (net floored at zero)."""
        return [o for o in self.outcomes if o.entry is not None and o.entry.net_shortfall > 0]

    def summary(self) -> dict:
        return {
            "period_id": self.period_id,
            "policy": self.policy.value,
            "created": len(self.created),
            "overwritten": len(self.overwritten),
            "skipped": len(self.skipped),
            "succeeded": self.succeeded_count,
            "failed": self.failed_count,
            "failures": [{"employee_id": o.employee_id, "reason": o.reason} for o in self.failed],
            "clamped": [o.employee_id for o in self.clamped],
        }


@dataclass(frozen=True)
class Payslip:
    """Read-model consumed by payslip rendering/e-mail."""

    employee: Employee
    period: PayrollPeriod
    entry: PayrollEntry
    lines: tuple[DailyPayLine, ...]
