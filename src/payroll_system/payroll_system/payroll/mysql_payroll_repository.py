from __future__ import annotations

import json
from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..common.datetime_utils import parse_iso_date
from ..core.enums import AttendanceStatus, EntryStatus
from ..core.exceptions import DuplicateEntryError, StaleEntryError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import DailyPayLine, ManualDeductions, PayrollEntry
from .repository import PayrollEntryRepository

_COLUMNS = """
    entry_id, employee_id, period_id, daily_rate, gross_pay,
    sss_deduction, philhealth_deduction, pagibig_deduction, tax_deduction,
    cash_advance, loan, vat, other_deductions, short,
    status, daily_breakdown
"""


def dump_breakdown(lines: Sequence[DailyPayLine]) -> str:
    return json.dumps(
        [
            {
                "date": line.work_date.isoformat(),
                "status": line.status.value,
                "rate": str(line.rate),
                "amount": str(line.amount),
                "adjustment": str(line.adjustment),
                "synthesized": line.synthesized,
            }
            for line in lines
        ]
    )


def load_breakdown(raw: Optional[str]) -> tuple[DailyPayLine, ...]:
    if not raw:
        return ()
    return tuple(
        DailyPayLine(
            work_date=parse_iso_date(item["date"]),
            status=AttendanceStatus.parse(item.get("status"), strict=False),
            rate=Decimal(item.get("rate", "0")),
            amount=Decimal(item.get("amount", "0")),
            adjustment=Decimal(item.get("adjustment", "0")),
            synthesized=bool(item.get("synthesized", False)),
        )
        for item in json.loads(raw)
    )


def _money(row: Dict[str, Any], key: str) -> Decimal:
    return as_decimal(row.get(key)) or Decimal("0")


def _to_entry(row: Dict[str, Any]) -> PayrollEntry:
    return PayrollEntry(
        entry_id=int(row["entry_id"]),
        employee_id=int(row["employee_id"]),
        period_id=int(row["period_id"]),
        daily_rate=as_decimal(row.get("daily_rate")),
        gross_pay=_money(row, "gross_pay"),
        social_insurance=_money(row, "sss_deduction"),
        health_insurance=_money(row, "philhealth_deduction"),
        housing_fund=_money(row, "pagibig_deduction"),
        income_tax=_money(row, "tax_deduction"),
        manual=ManualDeductions(
            cash_advance=_money(row, "cash_advance"),
            loan=_money(row, "loan"),
            vat=_money(row, "vat"),
            other_deductions=_money(row, "other_deductions"),
            short=_money(row, "short"),
        ),
        status=EntryStatus.parse(row["status"]),
        daily_breakdown=load_breakdown(row.get("daily_breakdown")),
    )


def _value_params(entry: PayrollEntry) -> tuple:
    return (
        entry.daily_rate,
        entry.gross_pay,
        entry.social_insurance,
        entry.health_insurance,
        entry.housing_fund,
        entry.income_tax,
        entry.manual.cash_advance,
        entry.manual.loan,
        entry.manual.vat,
        entry.manual.other_deductions,
        entry.manual.short,
        entry.status.value,
        dump_breakdown(entry.daily_breakdown),
    )


_SET_CLAUSE = """
    daily_rate=%s, gross_pay=%s,
    sss_deduction=%s, philhealth_deduction=%s, pagibig_deduction=%s, tax_deduction=%s,
    cash_advance=%s, loan=%s, vat=%s, other_deductions=%s, short=%s,
    status=%s, daily_breakdown=%s
"""


class MySQLPayrollEntryRepository(PayrollEntryRepository):
    """payroll_entries storage.

    total_deductions and net_pay are generated columns in the schema, so they are
    never written from here.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[PayrollEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_entries WHERE entry_id=%s", (int(entry_id),))
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def get_for_employee_and_period(self, employee_id: int, period_id: int) -> Optional[PayrollEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_entries WHERE employee_id=%s AND period_id=%s",
                (int(employee_id), int(period_id)),
            )
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def list_for_period(self, period_id: int) -> Sequence[PayrollEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_entries WHERE period_id=%s ORDER BY employee_id ASC",
                (int(period_id),),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def save_batch(
        self, *, inserts: Sequence[PayrollEntry], replacements: Sequence[PayrollEntry]
    ) -> list[PayrollEntry]:
        if not inserts and not replacements:
            return []
        saved: list[PayrollEntry] = []
        current: Optional[PayrollEntry] = None
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                for current in inserts:
                    cur.execute(
                        f"""
                        INSERT INTO payroll_entries(
                            employee_id, period_id, daily_rate, gross_pay,
                            sss_deduction, philhealth_deduction, pagibig_deduction, tax_deduction,
                            cash_advance, loan, vat, other_deductions, short,
                            status, daily_breakdown
                        )
                        VALUES({",".join(["%s"] * 15)})
                        """,
                        (current.employee_id, current.period_id, *_value_params(current)),
                    )
                    saved.append(replace(current, entry_id=int(cur.lastrowid)))
                for current in replacements:
                    cur.execute(
                        f"UPDATE payroll_entries SET {_SET_CLAUSE} WHERE entry_id=%s AND status<>%s",
                        (*_value_params(current), int(current.entry_id), EntryStatus.PAID.value),
                    )
                    # rowcount counts matched rows (FOUND_ROWS); 0 means deleted or paid meanwhile.
                    if cur.rowcount == 0:
                        raise StaleEntryError(current.entry_id)
                    saved.append(current)
        except IntegrityError as exc:
            if is_duplicate_key(exc) and current is not None:
                raise DuplicateEntryError(current.employee_id, current.period_id) from exc
            raise
        return saved

    def update(self, entry: PayrollEntry) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payroll_entries SET {_SET_CLAUSE} WHERE entry_id=%s",
                (*_value_params(entry), int(entry.entry_id)),
            )
            return cur.rowcount > 0

    def update_status(self, entry_id: int, status: EntryStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE payroll_entries SET status=%s WHERE entry_id=%s", (status.value, int(entry_id)))
            return cur.rowcount > 0

    def delete(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payroll_entries WHERE entry_id=%s", (int(entry_id),))
            return cur.rowcount > 0
