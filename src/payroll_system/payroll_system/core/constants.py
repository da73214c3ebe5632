"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

CENTS = Decimal("0.01")
ZERO = Decimal("0")

# Payroll runs weekly; statutory tables are monthly/annual.
WEEKS_PER_MONTH = Decimal("4")
MONTHS_PER_YEAR = Decimal("12")
WEEKS_PER_YEAR = Decimal("52")

DEFAULT_PERIOD_LIST_LIMIT = 52
