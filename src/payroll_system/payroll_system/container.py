from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .payroll.calculator.statutory_calculator import StatutoryDeductionCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollEntryRepository
from .payroll.service import PayrollService
from .periods.mysql_period_repository import MySQLPeriodRepository
from .periods.service import PeriodService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    attendance_repo: MySQLAttendanceRepository
    periods_repo: MySQLPeriodRepository
    payroll_repo: MySQLPayrollEntryRepository

    attendance_service: AttendanceService
    period_service: PeriodService
    payroll_service: PayrollService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    periods_repo = MySQLPeriodRepository(conn)
    payroll_repo = MySQLPayrollEntryRepository(conn)

    attendance_service = AttendanceService(attendance_repo, employees_repo)
    period_service = PeriodService(periods_repo)
    payroll_service = PayrollService(
        employees=employees_repo,
        attendance=attendance_repo,
        periods=periods_repo,
        entries=payroll_repo,
        calculator=StatutoryDeductionCalculator(),
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        periods_repo=periods_repo,
        payroll_repo=payroll_repo,
        attendance_service=attendance_service,
        period_service=period_service,
        payroll_service=payroll_service,
    )
