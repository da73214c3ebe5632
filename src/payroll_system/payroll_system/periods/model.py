from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import PeriodStatus


@dataclass(frozen=True)
class PayrollPeriod:
    """Domain entity: a weekly (Monday-Sunday) payroll cycle, inclusive on both ends."""

    period_id: int
    week_id: int
    period_start: date
    period_end: date
    payment_date: date
    status: PeriodStatus = PeriodStatus.PENDING

    @property
    def days(self) -> int:
        return (self.period_end - self.period_start).days + 1
