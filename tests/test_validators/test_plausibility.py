"""Tests for plausibility filtering and deduplication."""
from datetime import date
from decimal import Decimal

from statement_ingest.models import ParsedTransaction
from statement_ingest.validators import PlausibilityFilter, remove_duplicates


def txn(day=date(2025, 3, 1), description="MERCADO CENTRAL", amount="10.00"):
    return ParsedTransaction(date=day, description=description, amount=Decimal(amount))


class TestPlausibilityFilter:
    """Test bounds relative to a fixed reference date."""

    def test_window(self, today):
        assert PlausibilityFilter(today=today).date_window() == (date(2023, 3, 15), date(2025, 4, 15))

    def test_keeps_plausible(self, today):
        outcome = PlausibilityFilter(today=today).filter([txn()])

        assert len(outcome.kept) == 1
        assert outcome.dropped == 0

    def test_drops_out_of_window_dates(self, today):
        outcome = PlausibilityFilter(today=today).filter([
            txn(day=date(2020, 1, 1)),
            txn(day=date(2025, 6, 1)),
            txn(day=date(2025, 4, 15)),
        ])

        assert [t.date for t in outcome.kept] == [date(2025, 4, 15)]
        assert outcome.dropped == 2

    def test_drops_absurd_amounts(self, today):
        outcome = PlausibilityFilter(today=today, max_amount=Decimal("5000")).filter([
            txn(amount="5000.00"),
            txn(amount="5000.01"),
        ])

        assert [t.amount for t in outcome.kept] == [Decimal("5000.00")]

    def test_drops_degenerate_descriptions(self, today):
        outcome = PlausibilityFilter(today=today).filter([txn(description="AB"), txn(description="X" * 201)])

        assert outcome.kept == []
        assert outcome.dropped == 2


class TestRemoveDuplicates:
    """Test collapsing of repeated statement lines."""

    def test_keeps_first_occurrence_order(self):
        first = txn(description="A LOJA")
        second = txn(description="B LOJA")
        unique = remove_duplicates([first, second, txn(description="A LOJA")])

        assert unique == [first, second]

    def test_different_amounts_are_kept(self):
        assert len(remove_duplicates([txn(amount="10.00"), txn(amount="10.01")])) == 2
