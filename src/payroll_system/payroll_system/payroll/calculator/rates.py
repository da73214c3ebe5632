"""Statutory deduction formulas (2025 tables).

Every function takes the gross pay of one weekly period, converts it to a
monthly (x4) or annual (x48) basis, applies the table and converts the result
back to the weekly basis. Results are not rounded; rounding to centavos is done
once when the payroll entry is built.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, Decimal

from ...core.constants import MONTHS_PER_YEAR, WEEKS_PER_MONTH, WEEKS_PER_YEAR, ZERO

SSS_RATE = Decimal("0.05")
SSS_MIN_COMPENSATION = Decimal("4000")
SSS_MAX_COMPENSATION = Decimal("30000")
SSS_BRACKET_STEP = Decimal("500")

PHILHEALTH_RATE = Decimal("0.025")
PHILHEALTH_FLOOR = Decimal("10000")
PHILHEALTH_CEILING = Decimal("100000")

PAGIBIG_RATE = Decimal("0.02")
PAGIBIG_MONTHLY_CAP = Decimal("200")

# (lower bound of annual taxable income, tax on the lower bound, rate on the excess)
TAX_BRACKETS: tuple[tuple[Decimal, Decimal, Decimal], ...] = (
    (Decimal("8000000"), Decimal("2202500"), Decimal("0.35")),
    (Decimal("2000000"), Decimal("402500"), Decimal("0.30")),
    (Decimal("800000"), Decimal("102500"), Decimal("0.25")),
    (Decimal("400000"), Decimal("22500"), Decimal("0.20")),
    (Decimal("250000"), Decimal("0"), Decimal("0.15")),
)


def social_insurance(gross: Decimal) -> Decimal:
    """SSS employee share: 5% of the monthly salary credit, floored at 4,000 and capped at 30,000."""
    if gross <= 0:
        return ZERO
    monthly = gross * WEEKS_PER_MONTH
    if monthly <= SSS_MIN_COMPENSATION:
        credit = SSS_MIN_COMPENSATION
    elif monthly > SSS_MAX_COMPENSATION:
        credit = SSS_MAX_COMPENSATION
    else:
        credit = (monthly / SSS_BRACKET_STEP).to_integral_value(rounding=ROUND_CEILING) * SSS_BRACKET_STEP
    return credit * SSS_RATE / WEEKS_PER_MONTH


def health_insurance(gross: Decimal) -> Decimal:
    """PhilHealth employee share: 2.5% of monthly basic pay within [10,000, 100,000]."""
    if gross <= 0:
        return ZERO
    monthly = gross * WEEKS_PER_MONTH
    if monthly < PHILHEALTH_FLOOR:
        monthly = PHILHEALTH_FLOOR
    elif monthly > PHILHEALTH_CEILING:
        monthly = PHILHEALTH_CEILING
    return monthly * PHILHEALTH_RATE / WEEKS_PER_MONTH


def housing_fund(gross: Decimal) -> Decimal:
    """Pag-IBIG employee share: 2% of monthly pay, at most 200 a month."""
    if gross <= 0:
        return ZERO
    monthly = gross * WEEKS_PER_MONTH
    return min(monthly * PAGIBIG_RATE, PAGIBIG_MONTHLY_CAP) / WEEKS_PER_MONTH


def annual_tax(taxable_income: Decimal) -> Decimal:
    for lower, base, rate in TAX_BRACKETS:
        if taxable_income > lower:
            return base + (taxable_income - lower) * rate
    return ZERO


def income_tax(gross: Decimal) -> Decimal:
    """Withholding tax for one week.

    Annualizes gross pay, subtracts the annualized contributions and applies
    the progressive table; the annual tax is spread over 52 weeks.
    """
    if gross <= 0:
        return ZERO
    annual_gross = gross * WEEKS_PER_MONTH * MONTHS_PER_YEAR
    weekly_contributions = social_insurance(gross) + health_insurance(gross) + housing_fund(gross)
    annual_contributions = weekly_contributions * WEEKS_PER_MONTH * MONTHS_PER_YEAR
    return annual_tax(annual_gross - annual_contributions) / WEEKS_PER_YEAR
