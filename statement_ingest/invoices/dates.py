"""
Invoice date calculator.

Derives closing and due dates from a card's billing-cycle days and an
invoice competency (month, year).

Rules:
- The closing date falls inside the competency month.
- The due date always falls in the month after closing, rolling the year
  over when closing happens in December.
"""
import calendar
import logging
from datetime import date, datetime
from typing import Union

from dateutil import parser as dateutil_parser

from ..exceptions import InvoiceDateError
from ..models import CalculatedDates, CardDates, InvoiceCompetency

logger = logging.getLogger(__name__)

MIN_YEAR = 2020
MAX_YEAR = 2100
INVALID_DATE = "Invalid date"
INVALID_MONTH = "Invalid month"

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]


def _validate_day(day: int, field_name: str) -> None:
    if not isinstance(day, int) or isinstance(day, bool) or day < 1 or day > 31:
        raise InvoiceDateError(f"{field_name} must be between 1 and 31, got {day!r}")


def _validate_month(month: int) -> None:
    if not isinstance(month, int) or isinstance(month, bool) or month < 1 or month > 12:
        raise InvoiceDateError(f"Month must be between 1 and 12, got {month!r}")


def _validate_year(year: int) -> None:
    if not isinstance(year, int) or isinstance(year, bool) or year < MIN_YEAR or year > MAX_YEAR:
        raise InvoiceDateError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}, got {year!r}")


def validate_competency(competency: InvoiceCompetency) -> None:
    """Check a competency's month and year ranges."""
    _validate_month(competency.month)
    _validate_year(competency.year)


def _build_date(year: int, month: int, day: int) -> date:
    # Cycle days past the end of a short month land on its last day
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def calculate_closing_date(closing_day: int, month: int, year: int) -> date:
    """
    Place the card's closing day inside the competency month.

    Args:
        closing_day: Day of month the invoice closes (1-31)
        month: Competency month (1-12)
        year: Competency year (2020-2100)

    Returns:
        Closing date

    Raises:
        InvoiceDateError: If any argument is out of range

    Example:
        >>> calculate_closing_date(10, 12, 2025)
        datetime.date(2025, 12, 10)
    """
    _validate_day(closing_day, "Closing day")
    _validate_month(month)
    _validate_year(year)

    return _build_date(year, month, closing_day)


def calculate_due_date(due_day: int, closing_month: int, closing_year: int) -> date:
    """
    Place the card's due day in the month following the closing month.

    Args:
        due_day: Day of month the invoice is due (1-31)
        closing_month: Month of the closing date (1-12)
        closing_year: Year of the closing date (2020-2100)

    Returns:
        Due date

    Raises:
        InvoiceDateError: If any argument is out of range

    Example:
        >>> calculate_due_date(17, 12, 2025)
        datetime.date(2026, 1, 17)
    """
    _validate_day(due_day, "Due day")
    _validate_month(closing_month)
    _validate_year(closing_year)

    due_month = closing_month + 1
    due_year = closing_year

    if due_month > 12:
        due_month = 1
        due_year += 1

    return _build_date(due_year, due_month, due_day)


def calculate_invoice_dates(card: CardDates, competency: InvoiceCompetency) -> CalculatedDates:
    """
    Compute both invoice dates for a card and a competency.

    Args:
        card: Card billing-cycle days
        competency: Invoice month and year

    Returns:
        CalculatedDates with date objects and their ISO forms
    """
    closing_date = calculate_closing_date(card.closing_day, competency.month, competency.year)
    due_date = calculate_due_date(card.due_day, competency.month, competency.year)

    return CalculatedDates(
        closing_date=closing_date,
        due_date=due_date,
        closing_date_iso=closing_date.isoformat(),
        due_date_iso=due_date.isoformat(),
    )


def format_for_display(value: Union[date, datetime, str]) -> str:
    """
    Format a date or ISO string as DD/MM/YYYY.

    Returns the "Invalid date" sentinel instead of raising on bad input.
    """
    parsed = None

    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = date.fromisoformat(value.strip()[:10])
        except ValueError:
            try:
                parsed = dateutil_parser.isoparse(value.strip()).date()
            except (ValueError, OverflowError):
                parsed = None

    if parsed is None:
        logger.error(f"Invalid date provided to format_for_display: {value!r}")
        return INVALID_DATE

    return parsed.strftime('%d/%m/%Y')


def get_month_name(month: int) -> str:
    """Get the English month name for 1-12, or "Invalid month"."""
    if isinstance(month, int) and 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return INVALID_MONTH
