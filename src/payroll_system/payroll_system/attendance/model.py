from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus, HolidayType


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row per (employee, work_date).

    daily_rate may be missing on legacy rows; the employee's configured rate is
    used instead. holiday_type is only meaningful when status is HOLIDAY.
    """

    employee_id: int
    work_date: date
    status: AttendanceStatus
    daily_rate: Optional[Decimal]
    adjustment: Decimal = Decimal("0")
    holiday_type: Optional[HolidayType] = None
    attendance_id: Optional[int] = None


@dataclass(frozen=True)
class BulkRecordResult:
    created: list[int]
    skipped: list[int]
