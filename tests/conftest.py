"""Pytest configuration and fixtures."""
from datetime import date
from decimal import Decimal

import pytest

from statement_ingest.categorizer import Categorizer
from statement_ingest.models import ParsedTransaction, StatementFile
from statement_ingest.recognition import RecognitionClient

FIXED_TODAY = date(2025, 3, 15)

OFX_HEADER = """OFXHEADER:100
DATA:OFXSGML
VERSION:102
SECURITY:NONE
ENCODING:USASCII
CHARSET:1252

"""


def build_ofx(blocks, org="Banco Itau", fid="341", acctid="5555444433331234"):
    """Build an SGML-style OFX document from (date, amount, memo) tuples."""
    transactions = "".join(
        f"<STMTTRN>\n<TRNTYPE>{'DEBIT' if amount.startswith('-') else 'CREDIT'}\n"
        f"<DTPOSTED>{posted}\n<TRNAMT>{amount}\n<FITID>{index}\n<MEMO>{memo}\n</STMTTRN>\n"
        for index, (posted, amount, memo) in enumerate(blocks, start=1)
    )
    org_tag = f"<ORG>{org}\n" if org else ""
    fid_tag = f"<FID>{fid}\n" if fid else ""
    return (
        f"{OFX_HEADER}<OFX>\n<SIGNONMSGSRSV1>\n<SONRS>\n<FI>\n{org_tag}{fid_tag}</FI>\n</SONRS>\n"
        f"</SIGNONMSGSRSV1>\n<CREDITCARDMSGSRSV1>\n<CCSTMTTRNRS>\n<CCSTMTRS>\n"
        f"<CCACCTFROM>\n<ACCTID>{acctid}\n</CCACCTFROM>\n<BANKTRANLIST>\n{transactions}"
        f"</BANKTRANLIST>\n</CCSTMTRS>\n</CCSTMTTRNRS>\n</CREDITCARDMSGSRSV1>\n</OFX>\n"
    )


def pdf_bytes(*lines):
    """A PDF-like byte stream whose text survives plain decoding."""
    body = "\n".join(("%PDF-1.4", "NUBANK - Fatura do cartao de credito", *lines, "%%EOF"))
    return body.encode("utf-8")


class FakeRecognitionClient(RecognitionClient):
    """Recognition client returning a canned payload (or raising)."""

    name = "Fake Recognition"

    def __init__(self, payload=None, error=None, **kwargs):
        super().__init__(**kwargs)
        self.payload = payload
        self.error = error
        self.calls = 0

    def _fetch_payload(self, file, context):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def today():
    """Fixed reference date callable."""
    return lambda: FIXED_TODAY


@pytest.fixture
def categorizer():
    """Categorizer over the packaged taxonomy."""
    return Categorizer()


@pytest.fixture
def end_to_end_ofx():
    """Two debits and one credit."""
    return StatementFile(
        content=build_ofx([
            ("20250110", "-120.00", "SUPERMARKET X"),
            ("20250112", "-45.00", "UBER"),
            ("20250115", "500.00", "PAYMENT RECEIVED"),
        ]).encode("utf-8"),
        name="fatura.ofx",
        media_type="application/x-ofx",
    )


@pytest.fixture
def statement_pdf():
    """PDF-like statement with three charges and a header line."""
    return StatementFile(
        content=pdf_bytes(
            "DATA DESCRIÇÃO VALOR",
            "15/02/2025 SUPERMERCADO EXTRA R$ 123,45",
            "18/02/2025 UBER TRIP SAO PAULO 32,90",
            "20/02 NETFLIX.COM R$ 39,90",
            "TOTAL DA FATURA R$ 196,25",
        ),
        name="fatura.pdf",
        media_type="application/pdf",
    )


@pytest.fixture
def ocr_payload():
    """Well-formed recognition payload."""
    return {
        "success": True,
        "document_type": "credit_card_statement",
        "confidence": 0.92,
        "data": {
            "empresa": "Nubank",
            "data_emissao": "2025-02-10",
            "data_vencimento": "2025-02-17",
            "valor_total": 165.0,
            "moeda": "BRL",
            "itens": [
                {"descricao": "Supermercado  Extra", "valor": -120.0, "data": "2025-01-20"},
                {"descricao": "Uber *Trip", "valor": 45.0, "data": "22/01/2025"},
            ],
        },
    }


@pytest.fixture
def sample_transaction():
    """Create a sample transaction for testing."""
    return ParsedTransaction(
        date=date(2025, 2, 15),
        description="SUPERMERCADO EXTRA",
        amount=Decimal("123.45"),
        category="Groceries",
    )


@pytest.fixture
def ofx_builder():
    """Factory for OFX documents."""
    return build_ofx


@pytest.fixture
def pdf_factory():
    """Factory for PDF-like statement files."""
    def make(*lines, name="fatura.pdf"):
        return StatementFile(content=pdf_bytes(*lines), name=name, media_type="application/pdf")
    return make


@pytest.fixture
def fake_recognition():
    """The FakeRecognitionClient class."""
    return FakeRecognitionClient
