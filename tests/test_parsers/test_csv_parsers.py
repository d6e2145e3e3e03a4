"""Tests for the Nubank and Inter CSV parsers."""
from datetime import date
from decimal import Decimal

import pytest

from statement_ingest.models import StatementFile
from statement_ingest.parsers import InterCSVParser, NubankCSVParser
from statement_ingest.parsers.inter_parser import parse_inter_amount

NUBANK_CSV = """date,category,title,amount
2025-01-15,restaurante,"Restaurante XYZ, Centro",-150.00
2025-01-16,transporte,Uber *Trip,-23.50
2025-01-20,outros,Pagamento recebido,500.00
2025-01-21,casa,Loja Parcelada 03/10,-99.90
"""

INTER_CSV = """Data,Descrição,Valor
15/01/2025,COMPRA LOJA ABC,"150,00"
16/01/2025,SUPERMERCADO DIA,"1.234,56"
17/01/2025,ESTORNO LOJA ABC,"-50,00"
"""


def csv_file(text, name="fatura.csv"):
    return StatementFile(content=text.encode("utf-8"), name=name, media_type="text/csv")


@pytest.fixture
def nubank(categorizer):
    return NubankCSVParser(categorizer)


@pytest.fixture
def inter(categorizer):
    return InterCSVParser(categorizer)


class TestNubankCSVParser:
    """Test Nubank CSV parsing."""

    def test_can_parse(self, nubank, inter):
        file = csv_file(NUBANK_CSV)
        assert nubank.can_parse(file)
        assert not inter.can_parse(file)

    def test_rejects_other_extension(self, nubank):
        assert not nubank.can_parse(csv_file(NUBANK_CSV, name="fatura.txt"))

    def test_rejects_oversized(self, nubank, monkeypatch):
        monkeypatch.setattr("statement_ingest.parsers.csv_parser.MAX_CSV_SIZE_BYTES", 10)
        assert not nubank.can_parse(csv_file(NUBANK_CSV))

    def test_debits_kept_credits_skipped(self, nubank):
        result = nubank.parse(csv_file(NUBANK_CSV))

        assert result.success is True
        assert result.transaction_count == 3
        assert [t.amount for t in result.transactions] == [
            Decimal("150.00"), Decimal("23.50"), Decimal("99.90")
        ]
        assert result.metadata.bank_name == "Nubank"
        assert result.metadata.total_amount == Decimal("273.40")

    def test_quoted_field_with_comma(self, nubank):
        result = nubank.parse(csv_file(NUBANK_CSV))
        assert result.transactions[0].description == "Restaurante XYZ, Centro"
        assert result.transactions[0].date == date(2025, 1, 15)

    def test_issuer_category_mapped(self, nubank):
        categories = [t.category for t in nubank.parse(csv_file(NUBANK_CSV)).transactions]
        assert categories == ["Food", "Transport", "Housing"]

    def test_unknown_issuer_category_uses_keywords(self, nubank):
        text = "date,category,title,amount\n2025-01-15,outros,Farmacia Sao Paulo,-30.00\n"
        assert nubank.parse(csv_file(text)).transactions[0].category == "Health"

    def test_installment(self, nubank):
        assert nubank.parse(csv_file(NUBANK_CSV)).transactions[2].installment == "3/10"

    def test_bad_lines_reported(self, nubank):
        text = (
            "date,category,title,amount\n"
            "not-a-date,outros,Loja,-10.00\n"
            "2025-01-15,outros,Loja,abc\n"
            "2025-01-16,outros,Loja Boa,-10.00\n"
        )
        result = nubank.parse(csv_file(text))

        assert result.success is True
        assert result.transaction_count == 1
        assert result.errors == ["Line 2: Invalid date: not-a-date", "Line 3: Invalid amount: abc"]

    def test_all_lines_bad_fails(self, nubank):
        result = nubank.parse(csv_file("date,category,title,amount\nnot-a-date,outros,Loja,-10.00\n"))

        assert result.success is False
        assert result.transactions == []

    def test_only_credits_succeeds_empty(self, nubank):
        """No failed lines means success, even without charges."""
        result = nubank.parse(csv_file("date,category,title,amount\n2025-01-20,outros,Pagamento,500.00\n"))

        assert result.success is True
        assert result.transaction_count == 0

    def test_empty_file_fails(self, nubank):
        result = nubank.parse(csv_file("date,category,title,amount\n"))

        assert result.success is False
        assert result.errors == ["Empty or invalid CSV file"]


class TestInterCSVParser:
    """Test Inter CSV parsing."""

    def test_can_parse(self, inter, nubank):
        file = csv_file(INTER_CSV)
        assert inter.can_parse(file)
        assert not nubank.can_parse(file)

    def test_accepts_unaccented_header(self, inter):
        assert inter.can_parse(csv_file(INTER_CSV.replace("Descrição", "Descricao")))

    def test_positive_charges_kept(self, inter):
        result = inter.parse(csv_file(INTER_CSV))

        assert result.success is True
        assert [t.amount for t in result.transactions] == [Decimal("150.00"), Decimal("1234.56")]
        assert result.transactions[0].date == date(2025, 1, 15)
        assert result.transactions[1].category == "Groceries"
        assert result.metadata.bank_name == "Banco Inter"

    def test_dash_separated_dates(self, inter):
        text = "Data,Descrição,Valor\n15-01-2025,PADARIA REAL,\"12,50\"\n"
        assert inter.parse(csv_file(text)).transactions[0].date == date(2025, 1, 15)

    def test_short_row_reported(self, inter):
        """A trailing footer row becomes a line error."""
        result = inter.parse(csv_file(INTER_CSV + "Cartão ****1234\n"))

        assert result.success is True
        assert result.errors == ["Line 5: Not enough fields (1)"]
        assert result.metadata.card_last4 == "1234"

    def test_card_last4(self, inter):
        assert inter.extract_card_last4("Fatura cartão: ****9876") == "9876"
        assert inter.extract_card_last4("sem cartao") is None


class TestParseInterAmount:
    """Test Inter amount parsing."""

    def test_brazilian(self):
        assert parse_inter_amount("1.234,56") == Decimal("1234.56")

    def test_plain_decimal(self):
        assert parse_inter_amount("150.00") == Decimal("150.00")

    def test_currency_marker(self):
        assert parse_inter_amount("R$ 99.90") == Decimal("99.90")

    def test_invalid(self):
        assert parse_inter_amount("abc") is None
