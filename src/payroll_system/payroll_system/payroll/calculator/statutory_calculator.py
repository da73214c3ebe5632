from __future__ import annotations

from decimal import Decimal

from . import rates
from .base import DeductionCalculator, StatutoryDeductions


class StatutoryDeductionCalculator(DeductionCalculator):
    """Standard rule: SSS, PhilHealth, Pag-IBIG and withholding tax on weekly gross."""

    def compute(self, gross_pay: Decimal) -> StatutoryDeductions:
        return StatutoryDeductions(
            social_insurance=rates.social_insurance(gross_pay),
            health_insurance=rates.health_insurance(gross_pay),
            housing_fund=rates.housing_fund(gross_pay),
            income_tax=rates.income_tax(gross_pay),
        )
