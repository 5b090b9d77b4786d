"""Retention rules — calendar-day age arithmetic for archives.

Ages use the proxy ``year*372 + month*31 + day``. It is not calendar
exact across month ends but it is monotonic, which is all the pruner
needs for ordering and thresholds.
"""

from __future__ import annotations

from datetime import date, datetime

from zen_backup.core.utils import iso_date

DAYS_PER_MONTH_PROXY = 31
DAYS_PER_YEAR_PROXY = 372


def date_to_days(value: date | datetime | str) -> int:
    """Proxy day number; archive dates are never calendar-validated."""
    text = value[:10] if isinstance(value, str) else iso_date(value)
    year, month, day = (int(part) for part in text.split("-"))
    return year * DAYS_PER_YEAR_PROXY + month * DAYS_PER_MONTH_PROXY + day


def age_in_days(archive_day: date | datetime | str, reference: date | datetime | str) -> int:
    return date_to_days(reference) - date_to_days(archive_day)


def is_expired(
    archive_day: date | datetime | str,
    reference: date | datetime | str,
    max_age_days: int,
) -> bool:
    """An archive expires only when its age strictly exceeds *max_age_days*."""
    return age_in_days(archive_day, reference) > max_age_days
