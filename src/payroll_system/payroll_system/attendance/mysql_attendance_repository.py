from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus, HolidayType
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, employee_id, work_date, daily_rate, adjustment, status, holiday_type"


def _holiday_type(value: Optional[str]) -> Optional[HolidayType]:
    # Unrecognized legacy values are surfaced as "missing" and rejected when pay is resolved.
    if not value:
        return None
    try:
        return HolidayType.parse(value)
    except ValidationError:
        return None


def _to_record(row: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        employee_id=int(row["employee_id"]),
        work_date=row["work_date"],
        status=AttendanceStatus.parse(row["status"], strict=False),
        daily_rate=as_decimal(row.get("daily_rate")),
        adjustment=as_decimal(row.get("adjustment")) or Decimal("0"),
        holiday_type=_holiday_type(row.get("holiday_type")),
    )


def _insert_params(record: AttendanceRecord) -> tuple:
    return (
        record.employee_id,
        record.work_date,
        record.daily_rate,
        record.adjustment,
        record.status.value,
        record.holiday_type.value if record.holiday_type else None,
    )


_INSERT = """
    INSERT INTO attendance(employee_id, work_date, daily_rate, adjustment, status, holiday_type)
    VALUES(%s,%s,%s,%s,%s,%s)
"""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def list_for_employee(self, employee_id: int, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(employee_id), start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_range(self, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, employee_id ASC
                """,
                (start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def existing_employee_ids(self, *, work_date: date, employee_ids: Iterable[int]) -> set[int]:
        ids = [int(i) for i in employee_ids]
        if not ids:
            return set()
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT employee_id FROM attendance WHERE work_date=%s AND employee_id IN ({placeholders})",
                (work_date, *ids),
            )
            return {int(r["employee_id"]) for r in fetchall(cur)}

    def create(self, record: AttendanceRecord) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(_INSERT, _insert_params(record))
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ValidationError(
                    f"Attendance already recorded for employee {record.employee_id} on {record.work_date}"
                ) from exc
            raise

    def create_many(self, records: Sequence[AttendanceRecord]) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for record in records:
                cur.execute(_INSERT, _insert_params(record))
                ids.append(int(cur.lastrowid))
        return ids

    def update(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        daily_rate: Optional[Decimal],
        adjustment: Decimal,
        holiday_type: Optional[HolidayType],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET status=%s, daily_rate=%s, adjustment=%s, holiday_type=%s
                WHERE attendance_id=%s
                """,
                (
                    status.value,
                    daily_rate,
                    adjustment,
                    holiday_type.value if holiday_type else None,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def delete_many(self, attendance_ids: Sequence[int]) -> int:
        ids = [int(i) for i in attendance_ids]
        if not ids:
            return 0
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM attendance WHERE attendance_id IN ({placeholders})", tuple(ids))
            return int(cur.rowcount)
