from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee reference data.

    Read-only from the payroll side; daily_rate is the fallback used when a day
    has no attendance record.
    """

    employee_id: int
    employee_number: str
    full_name: str
    department: Optional[str]
    position: Optional[str]
    daily_rate: Optional[Decimal]
    email: Optional[str] = None
    is_active: bool = True
