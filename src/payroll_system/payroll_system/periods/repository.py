from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import PeriodStatus
from .model import PayrollPeriod


class PeriodRepository(Protocol):
    def get_by_id(self, period_id: int) -> Optional[PayrollPeriod]:
        raise NotImplementedError

    def get_by_week_id(self, week_id: int) -> Optional[PayrollPeriod]:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[PayrollPeriod]:
        raise NotImplementedError

    def list_ending_on(self, day: date) -> Sequence[PayrollPeriod]:
        """Periods ending on `day` that are not COMPLETED yet."""

        raise NotImplementedError

    def create(
        self,
        *,
        week_id: int,
        period_start: date,
        period_end: date,
        payment_date: date,
        status: PeriodStatus,
        replace_existing: bool = False,
    ) -> int:
        """Insert a period.

        With replace_existing, a period holding the same week_id is deleted first
        (its payroll entries go with it) in the same transaction.
        """

        raise NotImplementedError

    def update_status(self, period_id: int, status: PeriodStatus) -> bool:
        raise NotImplementedError

    def delete(self, period_id: int) -> bool:
        raise NotImplementedError

    def has_paid_entries(self, period_id: int) -> bool:
        raise NotImplementedError
