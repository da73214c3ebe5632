from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from .exceptions import ValidationError


def _canonical(value: str) -> str:
    return re.sub(r"[\s_\-]+", "", value).lower()


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "Present"
    ABSENT = "Absent"
    DAY_OFF = "Day Off"
    HOLIDAY = "Holiday"
    LEAVE = "Leave"
    WFH = "WFH"
    HALF_DAY = "Half Day"
    SP = "SP"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Optional[str], *, strict: bool = True) -> "AttendanceStatus":
        """Normalize free-text input ("present", "day_off", "HALF-DAY") to a member.

        With ``strict=False`` unrecognized values map to UNKNOWN instead of raising;
        used when reading legacy rows that predate input validation.
        """
        if isinstance(value, cls):
            return value
        key = _canonical(value or "")
        for member in cls:
            if member is not cls.UNKNOWN and _canonical(member.value) == key:
                return member
        if strict:
            raise ValidationError(f"Unknown attendance status: {value!r}")
        return cls.UNKNOWN


class HolidayType(str, Enum):
    REGULAR = "Regular"
    SPECIAL = "Special"

    @classmethod
    def parse(cls, value: Optional[str]) -> "HolidayType":
        if isinstance(value, cls):
            return value
        key = _canonical(value or "")
        for member in cls:
            if _canonical(member.value) == key:
                return member
        raise ValidationError(f"Unknown holiday type: {value!r}")


class PeriodStatus(str, Enum):
    PENDING = "pending"
    OPEN = "open"
    CLOSED = "closed"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PeriodStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown period status: {value!r}") from None


class EntryStatus(str, Enum):
    """Payroll entry workflow: PENDING -> APPROVED -> PAID."""

    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"

    @classmethod
    def parse(cls, value: Optional[str]) -> "EntryStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown payroll entry status: {value!r}") from None


class DuplicatePolicy(str, Enum):
    """What to do when an (employee, period) pair already has an entry."""

    SKIP_EXISTING = "skip_existing"
    REJECT_EXISTING = "reject_existing"
    OVERWRITE_EXISTING = "overwrite_existing"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DuplicatePolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown duplicate policy: {value!r}") from None


class EntryOutcome(str, Enum):
    CREATED = "created"
    OVERWRITTEN = "overwritten"
    SKIPPED = "skipped"
    DUPLICATE = "duplicate"
    FAILED = "failed"
