"""
Plausibility filtering for heuristically extracted transactions.

Drops structurally valid results that are almost certainly noise: dates far
outside the statement window, absurd amounts and degenerate descriptions.
Drops are counted, not reported as errors.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ..config.settings import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TRANSACTION_AMOUNT,
    MIN_DESCRIPTION_LENGTH,
    PLAUSIBILITY_FUTURE_MONTHS,
    PLAUSIBILITY_PAST_YEARS,
)
from ..models import ParsedTransaction

logger = logging.getLogger(__name__)


@dataclass
class FilterOutcome:
    """Transactions that survived filtering and how many were removed."""
    kept: List[ParsedTransaction]
    dropped: int


class PlausibilityFilter:
    """
    Reject transactions outside plausible bounds.

    Bounds (relative to "today"):
    - date within [today - past_years, today + future_months]
    - 0 < amount <= max_amount
    - description length within [min_length, max_length]
    """

    def __init__(
        self,
        today: Optional[Callable[[], date]] = None,
        past_years: int = PLAUSIBILITY_PAST_YEARS,
        future_months: int = PLAUSIBILITY_FUTURE_MONTHS,
        max_amount: Decimal = MAX_TRANSACTION_AMOUNT,
        min_length: int = MIN_DESCRIPTION_LENGTH,
        max_length: int = MAX_DESCRIPTION_LENGTH
    ):
        """
        Initialize filter.

        Args:
            today: Callable returning the reference date (date.today by default)
            past_years: Oldest accepted transaction age in years
            future_months: Furthest accepted future date in months
            max_amount: Largest accepted amount
            min_length: Shortest accepted description
            max_length: Longest accepted description
        """
        self.today = today or date.today
        self.past_years = past_years
        self.future_months = future_months
        self.max_amount = max_amount
        self.min_length = min_length
        self.max_length = max_length

    def date_window(self) -> Tuple[date, date]:
        """Earliest and latest accepted transaction dates."""
        reference = self.today()
        return (
            reference - relativedelta(years=self.past_years),
            reference + relativedelta(months=self.future_months),
        )

    def is_plausible(self, transaction: ParsedTransaction, window: Optional[Tuple[date, date]] = None) -> bool:
        """Check one transaction against every bound."""
        earliest, latest = window or self.date_window()

        if transaction.date < earliest or transaction.date > latest:
            return False
        if transaction.amount <= 0 or transaction.amount > self.max_amount:
            return False

        description = (transaction.description or "").strip()
        if len(description) < self.min_length or len(description) > self.max_length:
            return False

        return True

    def filter(self, transactions: Iterable[ParsedTransaction]) -> FilterOutcome:
        """
        Keep only plausible transactions.

        Args:
            transactions: Candidate transactions

        Returns:
            FilterOutcome with kept transactions and the number dropped
        """
        window = self.date_window()
        kept = []
        dropped = 0

        for transaction in transactions:
            if self.is_plausible(transaction, window):
                kept.append(transaction)
            else:
                dropped += 1
                logger.debug(
                    f"Dropped implausible transaction: {transaction.date} "
                    f"{transaction.description!r} {transaction.amount}"
                )

        return FilterOutcome(kept=kept, dropped=dropped)


def remove_duplicates(transactions: Iterable[ParsedTransaction]) -> List[ParsedTransaction]:
    """
    Collapse exact repeats of (ISO date, description, amount), keeping first-seen order.
    """
    seen = set()
    unique = []

    for transaction in transactions:
        key = transaction.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(transaction)

    return unique
