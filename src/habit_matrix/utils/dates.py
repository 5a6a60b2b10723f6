"""
Date helpers.

Only fixed ``YYYY-MM-DD`` literals are understood. Dates travel through the
system as ISO strings, which compare correctly as plain strings.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

ISO_DATE_PATTERN = r"\d{4}-\d{2}-\d{2}"

_ISO_DATE_RE = re.compile(rf"^{ISO_DATE_PATTERN}$")

DateLike = Union[date, str]


def parse_iso_date(date_str: Optional[str]) -> Optional[str]:
    """
    Validate a ``YYYY-MM-DD`` literal.

    Returns the normalised string, or None if the text is not a real
    calendar date ("2025-02-30" is rejected).
    """
    if not date_str:
        return None
    date_str = date_str.strip()
    if not _ISO_DATE_RE.match(date_str):
        return None
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date().isoformat()
    except ValueError:
        return None


def to_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def iso(value: DateLike) -> str:
    return to_date(value).isoformat()


def yesterday(today: DateLike) -> str:
    return (to_date(today) - timedelta(days=1)).isoformat()
