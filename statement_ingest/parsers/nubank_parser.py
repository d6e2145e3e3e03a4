"""Nubank CSV export parser.

Expected layout::

    date,category,title,amount
    2024-01-15,restaurante,"Restaurante XYZ",-150.00

Debits are negative; positive rows are payments or refunds and are skipped.
"""

import logging
from typing import Dict, Optional

from ..models import ParsedTransaction
from ..utils import detect_installment, parse_decimal_amount, parse_flexible_date
from .csv_parser import CSVStatementParser

logger = logging.getLogger(__name__)


class NubankCSVParser(CSVStatementParser):
    """Parser for the Nubank card CSV export."""

    name = "Nubank CSV Parser"
    bank_name = "Nubank"

    COLUMNS = {
        'date': ('date',),
        'category': ('category',),
        'title': ('title',),
        'amount': ('amount',),
    }

    def parse_row(self, fields: Dict[str, str], line_number: int) -> Optional[ParsedTransaction]:
        transaction_date = parse_flexible_date(fields['date'])
        if transaction_date is None:
            raise ValueError(f"Invalid date: {fields['date']}")

        amount = parse_decimal_amount(fields['amount'])
        if amount is None:
            raise ValueError(f"Invalid amount: {fields['amount']}")

        if amount >= 0:
            return None

        description = fields['title']
        if not description:
            raise ValueError("Missing description")

        return ParsedTransaction(
            date=transaction_date,
            description=description,
            amount=abs(amount),
            category=self.categorizer.map_issuer_category(fields['category'], description),
            installment=detect_installment(description),
            raw_data={
                'source': 'nubank_csv',
                'line_number': line_number,
                'original_amount': amount,
                'issuer_category': fields['category'],
            }
        )
