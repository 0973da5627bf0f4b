"""
Input validation for usage records.

Pure predicates over meter ID shape, usage magnitude, and date bounds.
All three must hold before a record is admitted to the monitor.
"""

import re
from datetime import date, datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

# "WM" followed by exactly three ASCII digits, case-sensitive
METER_ID_PATTERN = re.compile(r"WM[0-9]{3}")

MIN_USAGE_LITERS = 0.0
MAX_USAGE_LITERS = 10000.0


def is_valid_meter_id(meter_id: Optional[str]) -> bool:
    """Check that a meter ID has the ``WM`` + three digits shape.

    Args:
        meter_id: Candidate meter ID

    Returns:
        True if the ID is non-blank and matches exactly
    """
    if meter_id is None or not meter_id.strip():
        return False
    return METER_ID_PATTERN.fullmatch(meter_id) is not None


def is_valid_usage_amount(amount: float) -> bool:
    """Check that an amount lies within 0..10000 liters, inclusive."""
    return MIN_USAGE_LITERS <= amount <= MAX_USAGE_LITERS


def is_valid_date(usage_date: Optional[date], today: Optional[date] = None) -> bool:
    """Check that a date is neither in the future nor older than one year.

    Args:
        usage_date: Calendar date of the reading
        today: Reference date (defaults to the system clock date)

    Returns:
        True if ``today - 1 year <= usage_date <= today``
    """
    # datetime is a date subclass but carries a time of day
    if usage_date is None or isinstance(usage_date, datetime):
        return False
    if today is None:
        today = date.today()
    one_year_ago = today - relativedelta(years=1)
    return one_year_ago <= usage_date <= today


def failed_checks(
    meter_id: Optional[str],
    usage_date: Optional[date],
    amount: float
) -> list:
    """Names of the validation checks a reading fails, in check order."""
    failures = []
    if not is_valid_meter_id(meter_id):
        failures.append("meter_id")
    if not is_valid_usage_amount(amount):
        failures.append("usage_amount")
    if not is_valid_date(usage_date):
        failures.append("date")
    return failures
