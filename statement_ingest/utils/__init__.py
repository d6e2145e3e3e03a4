"""Utility functions."""
from .logger import setup_logger, log_parse_audit
from .currency_parser import parse_brazilian_amount, parse_decimal_amount, format_currency
from .date_parser import (
    parse_ofx_date,
    parse_slash_date,
    parse_flexible_date,
    format_br_date,
    format_month_period
)
from .text import strip_accents, collapse_whitespace, detect_installment

__all__ = [
    'setup_logger',
    'log_parse_audit',
    'parse_brazilian_amount',
    'parse_decimal_amount',
    'format_currency',
    'parse_ofx_date',
    'parse_slash_date',
    'parse_flexible_date',
    'format_br_date',
    'format_month_period',
    'strip_accents',
    'collapse_whitespace',
    'detect_installment'
]
