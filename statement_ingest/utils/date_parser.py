"""Date parsing helpers for statement formats."""
import logging
import re
from datetime import date, datetime
from typing import Iterable, Optional, Union

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


def parse_ofx_date(date_string: str) -> Optional[date]:
    """
    Parse an OFX timestamp by fixed offsets.

    OFX dates look like ``YYYYMMDD[HHMMSS[.XXX][TZ]]``; only the first eight
    characters are significant here.

    Args:
        date_string: Raw DTPOSTED value

    Returns:
        date or None if the prefix is not a valid calendar date
    """
    if not date_string or len(date_string) < 8:
        return None

    prefix = date_string[:8]
    if not prefix.isdigit():
        return None

    try:
        return date(int(prefix[0:4]), int(prefix[4:6]), int(prefix[6:8]))
    except ValueError:
        return None


def parse_slash_date(date_string: str, default_year: Optional[int] = None) -> Optional[date]:
    """
    Parse ``DD/MM/YYYY``, ``DD/MM/YY`` or ``DD/MM``.

    Two-digit years are placed in the 2000s. A missing year falls back to
    ``default_year`` (current year when not given).

    Args:
        date_string: Date text as matched on a statement line
        default_year: Year to use when the text has none

    Returns:
        date or None if the parts do not form a valid date
    """
    parts = date_string.strip().split('/')
    if len(parts) < 2 or not all(part.isdigit() for part in parts):
        return None

    day = int(parts[0])
    month = int(parts[1])
    year = default_year if default_year is not None else date.today().year

    if len(parts) >= 3:
        year = int(parts[2])
        if year < 100:
            year += 2000

    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_flexible_date(date_string: str) -> Optional[date]:
    """
    Parse dates returned by recognition services.

    Tries ISO (``YYYY-MM-DD``), then ``DD/MM/YYYY`` / ``DD-MM-YYYY``, then
    dateutil with day-first preference.

    Args:
        date_string: Date text

    Returns:
        date or None if every strategy fails
    """
    if not date_string or not isinstance(date_string, str):
        return None

    cleaned = date_string.strip()

    iso_match = re.match(r'^(\d{4})-(\d{2})-(\d{2})', cleaned)
    if iso_match:
        try:
            return date(int(iso_match.group(1)), int(iso_match.group(2)), int(iso_match.group(3)))
        except ValueError:
            return None

    br_match = re.match(r'^(\d{2})[/-](\d{2})[/-](\d{4})', cleaned)
    if br_match:
        try:
            return date(int(br_match.group(3)), int(br_match.group(2)), int(br_match.group(1)))
        except ValueError:
            return None

    try:
        return dateutil_parser.parse(cleaned, dayfirst=True).date()
    except (ValueError, OverflowError):
        pass

    logger.warning(f"Could not parse date: {date_string}")
    return None


def format_br_date(value: DateLike) -> str:
    """Format a date as DD/MM/YYYY."""
    return value.strftime('%d/%m/%Y')


def format_month_period(dates: Iterable[date]) -> str:
    """
    Describe the month span covered by a set of dates.

    Returns:
        "MM/YYYY - MM/YYYY", or an empty string when no dates are given
    """
    ordered = sorted(dates)
    if not ordered:
        return ""

    return f"{ordered[0].strftime('%m/%Y')} - {ordered[-1].strftime('%m/%Y')}"
