from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from ..common.datetime_utils import week_bounds
from ..core.constants import DEFAULT_PERIOD_LIST_LIMIT
from ..core.enums import PeriodStatus
from ..core.exceptions import InvalidPeriodError, NotFoundError, ValidationError
from .model import PayrollPeriod
from .repository import PeriodRepository

logger = logging.getLogger(__name__)


def validate_period_dates(period_start: date, period_end: date, payment_date: Optional[date] = None) -> None:
    if period_end < period_start:
        raise InvalidPeriodError(f"Period end {period_end} is before period start {period_start}")
    if payment_date is not None and payment_date < period_end:
        raise ValidationError("Payment date must be on or after the period end")


class PeriodService:
    def __init__(self, periods: PeriodRepository):
        self._periods = periods

    def get_period(self, period_id: int) -> PayrollPeriod:
        """Load a period for payroll work; a missing or inverted period is fatal."""
        period = self._periods.get_by_id(int(period_id))
        if not period:
            raise InvalidPeriodError(f"Payroll period {period_id} does not exist")
        validate_period_dates(period.period_start, period.period_end)
        return period

    def list_periods(self, *, limit: int = DEFAULT_PERIOD_LIST_LIMIT) -> Sequence[PayrollPeriod]:
        return self._periods.list_recent(int(limit))

    def ending_on(self, day: date) -> Sequence[PayrollPeriod]:
        return self._periods.list_ending_on(day)

    def create_period(
        self,
        *,
        week_id: int,
        period_start: date,
        period_end: date,
        payment_date: date,
        status: Any = PeriodStatus.PENDING,
        overwrite_existing: bool = False,
        align_to_week: bool = False,
    ) -> int:
        if align_to_week:
            period_start, period_end = week_bounds(period_start, period_end)
        validate_period_dates(period_start, period_end, payment_date)
        parsed_status = PeriodStatus.parse(status)

        existing = self._periods.get_by_week_id(int(week_id))
        if existing and not overwrite_existing:
            raise ValidationError(f"A payroll period with week ID {week_id} already exists")
        if existing:
            self._ensure_no_paid_entries(existing.period_id)
            logger.info("Overwriting payroll period week_id=%s (period_id=%s)", week_id, existing.period_id)

        period_id = self._periods.create(
            week_id=int(week_id),
            period_start=period_start,
            period_end=period_end,
            payment_date=payment_date,
            status=parsed_status,
            replace_existing=existing is not None,
        )
        logger.info("Created payroll period %s: %s..%s", period_id, period_start, period_end)
        return period_id

    def update_status(self, period_id: int, status: Any) -> None:
        if not self._periods.update_status(int(period_id), PeriodStatus.parse(status)):
            raise NotFoundError(f"Payroll period {period_id} does not exist")

    def _ensure_no_paid_entries(self, period_id: int) -> None:
        # Removing a period cascades to its payroll entries.
        if self._periods.has_paid_entries(period_id):
            raise ValidationError(f"Payroll period {period_id} has paid entries and cannot be replaced or deleted")

    def delete_period(self, period_id: int) -> None:
        self._ensure_no_paid_entries(int(period_id))
        if not self._periods.delete(int(period_id)):
            raise NotFoundError(f"Payroll period {period_id} does not exist")
        logger.info("Deleted payroll period %s and its entries", period_id)
