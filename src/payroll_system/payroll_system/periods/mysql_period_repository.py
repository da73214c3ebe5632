from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import EntryStatus, PeriodStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PayrollPeriod
from .repository import PeriodRepository

_COLUMNS = "period_id, week_id, period_start, period_end, payment_date, status"


def _to_period(row: Dict[str, Any]) -> PayrollPeriod:
    return PayrollPeriod(
        period_id=int(row["period_id"]),
        week_id=int(row["week_id"]),
        period_start=row["period_start"],
        period_end=row["period_end"],
        payment_date=row["payment_date"],
        status=PeriodStatus.parse(row["status"]),
    )


class MySQLPeriodRepository(PeriodRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, period_id: int) -> Optional[PayrollPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_periods WHERE period_id=%s", (int(period_id),))
            row = fetchone(cur)
            return _to_period(row) if row else None

    def get_by_week_id(self, week_id: int) -> Optional[PayrollPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_periods WHERE week_id=%s", (int(week_id),))
            row = fetchone(cur)
            return _to_period(row) if row else None

    def list_recent(self, limit: int) -> Sequence[PayrollPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_periods ORDER BY period_end DESC LIMIT %s",
                (int(limit),),
            )
            return [_to_period(r) for r in fetchall(cur)]

    def list_ending_on(self, day: date) -> Sequence[PayrollPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_periods WHERE period_end=%s AND status<>%s ORDER BY period_id",
                (day, PeriodStatus.COMPLETED.value),
            )
            return [_to_period(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            if replace_existing:
                # payroll_entries rows follow via ON DELETE CASCADE
                cur.execute("DELETE FROM payroll_periods WHERE week_id=%s", (int(week_id),))
            cur.execute(
                """
                INSERT INTO payroll_periods(week_id, period_start, period_end, payment_date, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(week_id), period_start, period_end, payment_date, status.value),
            )
            return int(cur.lastrowid)

    def update_status(self, period_id: int, status: PeriodStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE payroll_periods SET status=%s WHERE period_id=%s",
                (status.value, int(period_id)),
            )
            return cur.rowcount > 0

    def delete(self, period_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payroll_periods WHERE period_id=%s", (int(period_id),))
            return cur.rowcount > 0

    def has_paid_entries(self, period_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM payroll_entries WHERE period_id=%s AND status=%s LIMIT 1",
                (int(period_id), EntryStatus.PAID.value),
            )
            return fetchone(cur) is not None
