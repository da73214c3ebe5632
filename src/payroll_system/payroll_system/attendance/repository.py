from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, HolidayType
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_range(self, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        """All employees' records in the inclusive range, ordered by work_date."""

        raise NotImplementedError

    def existing_employee_ids(self, *, work_date: date, employee_ids: Iterable[int]) -> set[int]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> int:
        """Insert a record; raises ValidationError if (employee, date) already exists."""

        raise NotImplementedError

    def create_many(self, records: Sequence[AttendanceRecord]) -> list[int]:
        raise NotImplementedError

    def update(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        daily_rate: Optional[Decimal],
        adjustment: Decimal,
        holiday_type: Optional[HolidayType],
    ) -> bool:
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def delete_many(self, attendance_ids: Sequence[int]) -> int:
        raise NotImplementedError
