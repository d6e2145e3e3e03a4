"""Banco Inter CSV export parser.

Expected layout::

    Data,Descrição,Valor
    15/01/2024,"COMPRA LOJA ABC","150,00"

Charges are positive; zero and negative rows (refunds) are skipped.
"""

import logging
import re
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from ..models import ParsedTransaction
from ..utils import detect_installment, parse_brazilian_amount, parse_decimal_amount
from .csv_parser import CSVStatementParser

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r'(\d{2})[/-](\d{2})[/-](\d{4})')
CARD_PATTERN = re.compile(r'cart[ãa]o[:\s]*\*+\s*(\d{4})', re.IGNORECASE)


def parse_inter_amount(amount_string: str) -> Optional[Decimal]:
    """Amounts use Brazilian notation, but some exports write a plain "150.00"."""
    if ',' in amount_string:
        return parse_brazilian_amount(amount_string)

    cleaned = re.sub(r'(?i)R\$', '', amount_string).replace(' ', '')
    return parse_decimal_amount(cleaned)


class InterCSVParser(CSVStatementParser):
    """Parser for the Banco Inter card CSV export."""

    name = "Banco Inter CSV Parser"
    bank_name = "Banco Inter"

    COLUMNS = {
        'date': ('data',),
        'description': ('descricao',),
        'amount': ('valor',),
    }

    def parse_row(self, fields: Dict[str, str], line_number: int) -> Optional[ParsedTransaction]:
        match = DATE_PATTERN.search(fields['date'])
        try:
            transaction_date = date(int(match.group(3)), int(match.group(2)), int(match.group(1)))
        except (AttributeError, ValueError):
            raise ValueError(f"Invalid date: {fields['date']}")

        amount = parse_inter_amount(fields['amount'])
        if amount is None:
            raise ValueError(f"Invalid amount: {fields['amount']}")

        if amount <= 0:
            return None

        description = fields['description']
        if not description:
            raise ValueError("Missing description")

        return ParsedTransaction(
            date=transaction_date,
            description=description,
            amount=amount,
            category=self.categorizer.categorize(description),
            installment=detect_installment(description),
            raw_data={'source': 'inter_csv', 'line_number': line_number}
        )

    def extract_card_last4(self, text: str) -> Optional[str]:
        match = CARD_PATTERN.search(text)
        return match.group(1) if match else None
