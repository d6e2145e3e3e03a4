"""Parse currency amounts from Brazilian and OFX-style formats."""
import re
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..config.settings import CURRENCY_SYMBOLS, DEFAULT_CURRENCY

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def parse_brazilian_amount(amount_string: str) -> Optional[Decimal]:
    """
    Parse an amount written in Brazilian notation.

    Handles:
    - R$ 1.234,56
    - 1.234,56
    - -R$ 25,80
    - 25,8

    Args:
        amount_string: String containing the amount

    Returns:
        Decimal amount (signed) or None if parsing fails
    """
    if not amount_string or not isinstance(amount_string, str):
        return None

    cleaned = amount_string.strip()
    if not cleaned:
        return None

    is_negative = cleaned.startswith('-') or cleaned.endswith('-')

    # Remove currency markers, signs and whitespace
    cleaned = re.sub(r'(?i)R\$|BRL', '', cleaned)
    cleaned = cleaned.replace('-', '').replace('+', '').replace(' ', '')

    # Dot is the thousands separator, comma the decimal separator
    cleaned = cleaned.replace('.', '').replace(',', '.')

    if not re.fullmatch(r'\d+(\.\d+)?', cleaned):
        logger.debug(f"Could not parse Brazilian amount: {amount_string}")
        return None

    amount = Decimal(cleaned).quantize(TWO_PLACES)
    return -amount if is_negative else amount


def parse_decimal_amount(amount_string: str) -> Optional[Decimal]:
    """
    Parse a machine-formatted signed decimal (e.g. OFX ``TRNAMT`` or CSV exports).

    Accepts either ``.`` or ``,`` as the decimal separator, no thousands separator.

    Args:
        amount_string: String such as "-45.90" or "-45,90"

    Returns:
        Decimal amount (signed) or None if parsing fails
    """
    if not amount_string or not isinstance(amount_string, str):
        return None

    cleaned = amount_string.strip().replace(',', '.')

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None

    if not amount.is_finite():
        return None

    return amount


def format_currency(amount: Decimal, currency: str = DEFAULT_CURRENCY) -> str:
    """
    Format amount as currency string.

    Args:
        amount: Numeric amount
        currency: Currency code from CURRENCY_SYMBOLS; unknown codes are shown as BRL

    Returns:
        Formatted currency string, e.g. "R$ 1.234,56"
    """
    if currency not in CURRENCY_SYMBOLS:
        currency = "BRL"
    symbol = CURRENCY_SYMBOLS[currency]

    formatted = f"{abs(amount):,.2f}"
    if currency == "BRL":
        # Brazilian separators and a space after "R$"
        formatted = formatted.replace(',', '_').replace('.', ',').replace('_', '.')
        symbol += " "

    if amount < 0:
        return f"-{symbol}{formatted}"
    return f"{symbol}{formatted}"
