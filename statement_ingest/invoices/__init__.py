"""Invoice date calculation and draft building."""
from .dates import (
    calculate_closing_date,
    calculate_due_date,
    calculate_invoice_dates,
    format_for_display,
    get_month_name,
    validate_competency,
    INVALID_DATE
)
from .builder import build_invoice_draft

__all__ = [
    'calculate_closing_date',
    'calculate_due_date',
    'calculate_invoice_dates',
    'format_for_display',
    'get_month_name',
    'validate_competency',
    'INVALID_DATE',
    'build_invoice_draft',
]
