"""Parsed transaction model."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

DEFAULT_CATEGORY = "Other"


@dataclass
class ParsedTransaction:
    """
    One purchase or charge recovered from a statement.

    Attributes:
        date: Transaction date (not the statement date)
        description: Trimmed free text
        amount: Always positive; direction is resolved by the parser
        category: Label from the category taxonomy
        installment: Installment marker such as "2/12"
        raw_data: Parser-specific provenance, for debugging only
    """
    date: date
    description: str
    amount: Decimal
    category: str = DEFAULT_CATEGORY
    installment: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate transaction data."""
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))
        if self.amount <= 0:
            raise ValueError("amount must be positive")

    @property
    def dedup_key(self) -> tuple:
        """Composite key used to collapse repeated statement lines."""
        return (self.date.isoformat(), self.description, self.amount)

    def to_dict(self) -> dict:
        """Convert transaction to dictionary."""
        result = {
            'date': self.date.strftime('%Y-%m-%d'),
            'description': self.description,
            'amount': str(self.amount),
            'category': self.category,
        }
        if self.installment:
            result['installment'] = self.installment
        if self.raw_data:
            result['raw_data'] = {key: str(value) for key, value in self.raw_data.items()}
        return result
