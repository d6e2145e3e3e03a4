"""Tests for data models."""
import threading
from datetime import date
from decimal import Decimal

import pytest

from statement_ingest.models import (
    FailureKind,
    ParseContext,
    ParsedTransaction,
    ParseResult,
    StatementFile,
    StatementMetadata,
)


class TestParsedTransaction:
    """Test transaction invariants."""

    def test_amount_coerced_to_decimal(self):
        txn = ParsedTransaction(date=date(2025, 1, 1), description="LOJA", amount=10.5)
        assert txn.amount == Decimal("10.5")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1.00")])
    def test_non_positive_amount_rejected(self, amount):
        with pytest.raises(ValueError):
            ParsedTransaction(date=date(2025, 1, 1), description="LOJA", amount=amount)

    def test_to_dict(self, sample_transaction):
        payload = sample_transaction.to_dict()

        assert payload['date'] == "2025-02-15"
        assert payload['amount'] == "123.45"
        assert 'installment' not in payload


class TestParseResult:
    """Test result invariants."""

    def test_failure_cannot_carry_transactions(self, sample_transaction):
        with pytest.raises(ValueError):
            ParseResult(success=False, transactions=[sample_transaction])

    def test_failure_kind_defaults_to_parse_failed(self):
        assert ParseResult(success=False).failure_kind is FailureKind.PARSE_FAILED

    def test_totals_and_messages(self, sample_transaction):
        result = ParseResult(
            success=True,
            transactions=[sample_transaction, sample_transaction],
            errors=["Line 3: bad"],
            notices=["ok"],
        )

        assert result.total_amount == Decimal("246.90")
        assert result.messages == ["Line 3: bad", "ok"]
        assert result.to_dict()['failure_kind'] == "none"

    def test_metadata_omits_unset_fields(self):
        assert StatementMetadata(bank_name="Nubank").to_dict() == {'bank_name': "Nubank", 'dropped_count': 0}


class TestParseContext:
    """Test deadline and cancellation tracking."""

    def test_unbounded(self):
        context = ParseContext()

        assert context.remaining() is None
        assert context.expired is False
        assert context.cancelled is False

    def test_zero_timeout_is_expired(self):
        assert ParseContext(timeout=0).expired is True

    def test_cancelled(self):
        event = threading.Event()
        context = ParseContext(cancel_event=event)
        event.set()

        assert context.cancelled is True


class TestStatementFile:
    """Test uploaded file helpers."""

    def test_extension_and_pdf_detection(self):
        assert StatementFile(content=b"", name="Fatura.PDF").is_pdf is True
        assert StatementFile(content=b"", name="scan", media_type="application/pdf").is_pdf is True
        assert StatementFile(content=b"", name="extrato.ofx").extension == ".ofx"

    def test_from_path(self, tmp_path):
        path = tmp_path / "nubank.csv"
        path.write_bytes(b"date,title,amount\n")
        file = StatementFile.from_path(path)

        assert file.name == "nubank.csv"
        assert file.size == 18
        assert file.media_type == "text/csv"
