from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..common.validators import optional_decimal, require_non_negative, to_decimal
from ..core.enums import AttendanceStatus, HolidayType
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import AttendanceRecord, BulkRecordResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _resolve_holiday_type(status: AttendanceStatus, holiday_type: Any) -> Optional[HolidayType]:
    if status is not AttendanceStatus.HOLIDAY:
        return None
    if holiday_type is None or (isinstance(holiday_type, str) and not holiday_type.strip()):
        raise ValidationError("Holiday attendance requires a holiday type (Regular or Special)")
    return HolidayType.parse(holiday_type)


class AttendanceService:
    """Attendance data entry.

    This is the ingestion boundary: free-text statuses and holiday types are
    normalized here once, so the payroll core only ever sees enum members.
    """

    def __init__(self, attendance: AttendanceRepository, employees: EmployeeRepository):
        self._attendance = attendance
        self._employees = employees

    def _get_employee(self, employee_id: int):
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError(f"Employee {employee_id} does not exist")
        return employee

    def record_attendance(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: Any,
        adjustment: Any = 0,
        daily_rate: Any = None,
        holiday_type: Any = None,
    ) -> int:
        employee = self._get_employee(employee_id)
        parsed_status = AttendanceStatus.parse(status)

        if self._attendance.get_for_employee_and_date(employee.employee_id, work_date):
            raise ValidationError(f"Attendance already recorded for {employee.employee_number} on {work_date}")

        rate = optional_decimal(daily_rate, "daily_rate")
        if rate is None:
            rate = employee.daily_rate
        elif rate < 0:
            raise ValidationError("daily_rate cannot be negative")

        record = AttendanceRecord(
            employee_id=employee.employee_id,
            work_date=work_date,
            status=parsed_status,
            daily_rate=rate,
            adjustment=to_decimal(adjustment or 0, "adjustment"),
            holiday_type=_resolve_holiday_type(parsed_status, holiday_type),
        )
        attendance_id = self._attendance.create(record)
        logger.info(
            "Recorded attendance %s for employee %s on %s (%s)",
            attendance_id,
            employee.employee_number,
            work_date,
            parsed_status.value,
        )
        return attendance_id

    def bulk_record(
        self,
        *,
        work_date: date,
        employee_ids: Iterable[int],
        status: Any,
        holiday_type: Any = None,
    ) -> BulkRecordResult:
        """Record the same status for many employees on one date.

        Employees that already have a record for the date, or that do not exist,
        are skipped rather than failing the whole request.
        """

        parsed_status = AttendanceStatus.parse(status)
        parsed_holiday = _resolve_holiday_type(parsed_status, holiday_type)

        requested = list(dict.fromkeys(int(i) for i in employee_ids))
        if not requested:
            raise ValidationError("No employees selected")

        existing = self._attendance.existing_employee_ids(work_date=work_date, employee_ids=requested)
        if len(existing) == len(requested):
            raise ValidationError("All selected employees already have attendance records for this date")

        records: list[AttendanceRecord] = []
        skipped: list[int] = []
        for employee_id in requested:
            employee = self._employees.get_by_id(employee_id) if employee_id not in existing else None
            if employee is None:
                skipped.append(employee_id)
                continue
            records.append(
                AttendanceRecord(
                    employee_id=employee.employee_id,
                    work_date=work_date,
                    status=parsed_status,
                    daily_rate=employee.daily_rate,
                    adjustment=Decimal("0"),
                    holiday_type=parsed_holiday,
                )
            )

        self._attendance.create_many(records)
        created = [r.employee_id for r in records]
        logger.info("Bulk attendance on %s: created=%d skipped=%d", work_date, len(created), len(skipped))
        return BulkRecordResult(created=created, skipped=skipped)

    def update_attendance(
        self,
        *,
        attendance_id: int,
        status: Any,
        adjustment: Any = 0,
        daily_rate: Any = None,
        holiday_type: Any = None,
    ) -> None:
        current = self._attendance.get_by_id(int(attendance_id))
        if not current:
            raise NotFoundError(f"Attendance record {attendance_id} does not exist")

        parsed_status = AttendanceStatus.parse(status)
        rate = current.daily_rate if daily_rate is None else require_non_negative(daily_rate, "daily_rate")

        self._attendance.update(
            attendance_id=int(attendance_id),
            status=parsed_status,
            daily_rate=rate,
            adjustment=to_decimal(adjustment or 0, "adjustment"),
            holiday_type=_resolve_holiday_type(parsed_status, holiday_type),
        )

    def delete_attendance(self, attendance_id: int) -> None:
        if not self._attendance.delete(int(attendance_id)):
            raise NotFoundError(f"Attendance record {attendance_id} does not exist")

    def bulk_delete(self, attendance_ids: Sequence[int]) -> int:
        if not attendance_ids:
            raise ValidationError("No attendance records selected")
        deleted = self._attendance.delete_many([int(i) for i in attendance_ids])
        logger.info("Deleted %d attendance records", deleted)
        return deleted

    def list_for_period(self, employee_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        if end < start:
            raise ValidationError("end date must not be before start date")
        return self._attendance.list_for_employee(int(employee_id), start_date=start, end_date=end)
