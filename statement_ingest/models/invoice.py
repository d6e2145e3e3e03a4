"""Invoice competency and billing-cycle models."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List

from .transaction import ParsedTransaction


@dataclass(frozen=True)
class InvoiceCompetency:
    """The billing period (month, year) an invoice belongs to."""
    month: int
    year: int


@dataclass(frozen=True)
class CardDates:
    """A card's fixed billing-cycle configuration."""
    closing_day: int
    due_day: int


@dataclass(frozen=True)
class CalculatedDates:
    """Closing and due dates derived from a card and a competency."""
    closing_date: date
    due_date: date
    closing_date_iso: str
    due_date_iso: str

    def to_dict(self) -> dict:
        """Convert calculated dates to dictionary."""
        return {
            'closing_date': self.closing_date_iso,
            'due_date': self.due_date_iso,
        }


@dataclass
class InvoiceDraft:
    """
    An invoice ready to be handed to the invoice repository.

    Attributes:
        card_id: Target card identifier
        competency: Billing period
        dates: Closing/due dates for the period
        items: Accepted transactions
        dates_from_statement: Whether the dates came from the statement itself
    """
    card_id: str
    competency: InvoiceCompetency
    dates: CalculatedDates
    items: List[ParsedTransaction] = field(default_factory=list)
    dates_from_statement: bool = False

    @property
    def total_amount(self) -> Decimal:
        """Sum of item amounts."""
        return sum((item.amount for item in self.items), Decimal("0"))

    def to_dict(self) -> dict:
        """Convert invoice draft to dictionary."""
        return {
            'card_id': self.card_id,
            'month': self.competency.month,
            'year': self.competency.year,
            'closing_date': self.dates.closing_date_iso,
            'due_date': self.dates.due_date_iso,
            'dates_from_statement': self.dates_from_statement,
            'total_amount': str(self.total_amount),
            'items': [item.to_dict() for item in self.items],
        }
