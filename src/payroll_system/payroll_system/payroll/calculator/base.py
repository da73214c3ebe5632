from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class StatutoryDeductions:
    social_insurance: Decimal
    health_insurance: Decimal
    housing_fund: Decimal
    income_tax: Decimal

    @property
    def total(self) -> Decimal:
        return self.social_insurance + self.health_insurance + self.housing_fund + self.income_tax


class DeductionCalculator(ABC):
    """Calculator interface (Strategy Pattern for statutory deductions)."""

    @abstractmethod
    def compute(self, gross_pay: Decimal) -> StatutoryDeductions:
        raise NotImplementedError
