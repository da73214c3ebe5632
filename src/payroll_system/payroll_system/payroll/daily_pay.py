from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import is_weekend
from ..core.constants import ZERO
from ..core.enums import AttendanceStatus, HolidayType
from ..core.exceptions import ValidationError
from ..employees.model import Employee

FULL_DAY = Decimal("1")

STATUS_MULTIPLIERS: dict[AttendanceStatus, Decimal] = {
    AttendanceStatus.PRESENT: FULL_DAY,
    AttendanceStatus.WFH: FULL_DAY,
    AttendanceStatus.SP: FULL_DAY,
    AttendanceStatus.HALF_DAY: Decimal("0.5"),
    AttendanceStatus.ABSENT: ZERO,
    AttendanceStatus.DAY_OFF: ZERO,
    AttendanceStatus.LEAVE: ZERO,
}

HOLIDAY_MULTIPLIERS: dict[HolidayType, Decimal] = {
    HolidayType.REGULAR: Decimal("1.3"),
    HolidayType.SPECIAL: Decimal("2"),
}


def multiplier_for(status: AttendanceStatus, holiday_type: Optional[HolidayType] = None) -> Decimal:
    if status is AttendanceStatus.HOLIDAY:
        if holiday_type not in HOLIDAY_MULTIPLIERS:
            raise ValidationError("Holiday attendance has no recognized holiday type")
        return HOLIDAY_MULTIPLIERS[holiday_type]
    # UNKNOWN (legacy free text) is paid as a full day
    return STATUS_MULTIPLIERS.get(status, FULL_DAY)


def daily_pay(
    status: AttendanceStatus,
    rate: Decimal,
    adjustment: Decimal = ZERO,
    holiday_type: Optional[HolidayType] = None,
) -> Decimal:
    """multiplier(status) x rate + adjustment; the adjustment applies even at a zero multiplier."""
    return multiplier_for(status, holiday_type) * rate + adjustment


def synthesize_default(employee: Employee, day: date) -> AttendanceRecord:
    """Stand-in record for a day nobody entered: Day Off on weekends, Present otherwise."""
    return AttendanceRecord(
        employee_id=employee.employee_id,
        work_date=day,
        status=AttendanceStatus.DAY_OFF if is_weekend(day) else AttendanceStatus.PRESENT,
        daily_rate=employee.daily_rate,
        adjustment=ZERO,
    )
