from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.payroll.calculator import rates
from src.payroll_system.payroll_system.payroll.calculator.statutory_calculator import StatutoryDeductionCalculator


def D(value):
    return Decimal(str(value))


@pytest.mark.parametrize(
    "gross, expected",
    [
        (1000, 50),  # monthly 4000, floor
        (500, 50),
        (3000, 150),  # monthly 12000 is already on a bracket
        (3001, "156.25"),  # monthly 12004 rounds up to 12500
        (7500, 375),  # monthly 30000
        (7750, 375),  # monthly 31000, capped
    ],
)
def test_social_insurance_brackets(gross, expected):
    assert rates.social_insurance(D(gross)) == D(expected)


@pytest.mark.parametrize(
    "gross, expected",
    [
        (1000, "62.5"),  # below floor
        (2500, "62.5"),  # monthly 10000
        (3000, 75),
        (25000, 625),  # monthly 100000
        (50000, 625),
    ],
)
def test_health_insurance_floor_and_ceiling(gross, expected):
    assert rates.health_insurance(D(gross)) == D(expected)


def test_housing_fund_is_capped_at_200_a_month():
    assert rates.housing_fund(D(1250)) == D(25)
    assert rates.housing_fund(D(3000)) == D(50)
    assert rates.housing_fund(D(100000)) == D(50)


def test_income_tax_is_zero_under_threshold():
    assert rates.income_tax(D(3000)) == 0
    assert rates.income_tax(D(5000)) == 0


def test_income_tax_progressive_bracket():
    # annual gross 480000, annual contributions (375 + 250 + 50) x 48 = 32400
    expected = (D(22500) + (D(447600) - D(400000)) * D("0.20")) / D(52)
    assert rates.income_tax(D(10000)) == expected


def test_annual_tax_table_edges():
    assert rates.annual_tax(D(250000)) == 0
    assert rates.annual_tax(D(400000)) == D(22500)
    assert rates.annual_tax(D(800000)) == D(102500)
    assert rates.annual_tax(D(8000001)) == D(2202500) + D("0.35")


def test_zero_gross_has_no_deductions():
    result = StatutoryDeductionCalculator().compute(D(0))
    assert result.total == 0


@pytest.mark.parametrize("gross", [0, "0.01", 1, 999, 3000, 12345.67, 250000, 10**7])
def test_deductions_are_non_negative_and_finite(gross):
    result = StatutoryDeductionCalculator().compute(D(gross))
    for value in (result.social_insurance, result.health_insurance, result.housing_fund, result.income_tax):
        assert value.is_finite()
        assert value >= 0
