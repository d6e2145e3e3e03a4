"""
PDF statement parser backed by a recognition (OCR) service.

Works with any issuer's layout since no templates are involved, at the
cost of a network round trip. Requires a configured RecognitionClient.
"""

import logging
from datetime import date
from typing import Optional, Tuple

from ..categorizer import Categorizer
from ..config.settings import MAX_FILE_SIZE_BYTES
from ..models import FailureKind, ParseContext, ParsedTransaction, ParseResult, StatementFile, StatementMetadata
from ..recognition import RecognitionClient, RecognizedStatement
from ..utils import detect_installment, format_br_date, format_currency
from .base_parser import BaseStatementParser

logger = logging.getLogger(__name__)

PERIOD_UNKNOWN = "Period not identified"


def reference_period(issued: Optional[date], due: Optional[date]) -> Tuple[Optional[int], Optional[int]]:
    """
    Competency (month, year) implied by the statement dates.

    The issue date's month wins; otherwise the month before the due date.
    """
    if issued:
        return issued.month, issued.year

    if due:
        if due.month == 1:
            return 12, due.year - 1
        return due.month - 1, due.year

    return None, None


def format_statement_period(issued: Optional[date], due: Optional[date]) -> str:
    """Human-readable statement period from issue and due dates."""
    if issued and due:
        return f"{format_br_date(issued)} - {format_br_date(due)}"
    if due:
        return f"Due: {format_br_date(due)}"
    if issued:
        return f"Issued: {format_br_date(issued)}"
    return PERIOD_UNKNOWN


class OcrStatementParser(BaseStatementParser):
    """Parser delegating PDF reading to a recognition service."""

    name = "OCR Parser (AI-Powered)"

    def __init__(self, recognition_client: RecognitionClient, categorizer: Optional[Categorizer] = None):
        """
        Initialize OCR parser.

        Args:
            recognition_client: Service client used to read the PDF
            categorizer: Shared keyword categorizer
        """
        super().__init__(categorizer)
        self.recognition_client = recognition_client

    def can_parse(self, file: StatementFile) -> bool:
        """Accept non-empty PDFs up to the upload size limit."""
        if not file.is_pdf:
            return False

        if file.size == 0:
            logger.warning(f"Empty PDF: {file.name}")
            return False

        if file.size > MAX_FILE_SIZE_BYTES:
            logger.warning(f"PDF too large for recognition: {file.size} bytes")
            return False

        return True

    def parse(self, file: StatementFile, context: Optional[ParseContext] = None) -> ParseResult:
        """
        Recognize the PDF and map recognized items to transactions.

        Args:
            file: PDF statement
            context: Deadline/cancellation forwarded to the recognition client

        Returns:
            ParseResult; an unreachable service yields CAPABILITY_UNAVAILABLE
        """
        if context is not None and context.cancelled:
            return self._failure(["Parsing cancelled"], FailureKind.CANCELLED)

        logger.info(f"Starting OCR processing: {file.name}")
        recognition = self.recognition_client.recognize(file, context)

        if context is not None and context.cancelled:
            return self._failure(["Parsing cancelled"], FailureKind.CANCELLED)

        if not recognition.success or recognition.data is None:
            kind = FailureKind.CAPABILITY_UNAVAILABLE if recognition.unavailable else FailureKind.PARSE_FAILED
            return self._failure(
                [recognition.error or "OCR failed to process the PDF", *recognition.warnings],
                kind
            )

        statement = recognition.data
        transactions = [
            ParsedTransaction(
                date=item.date,
                description=item.description,
                amount=item.amount,
                category=self.categorizer.categorize(item.description),
                installment=detect_installment(item.description),
                raw_data={
                    'source': 'ocr',
                    'ocr_index': index,
                    'confidence': statement.confidence,
                },
            )
            for index, item in enumerate(statement.items)
        ]

        logger.info(f"OCR extracted {len(transactions)} transactions")

        return ParseResult(
            success=True,
            transactions=transactions,
            notices=self._notices(statement, len(transactions), recognition.warnings),
            metadata=self._metadata(statement),
            parser_name=self.name,
        )

    @staticmethod
    def _metadata(statement: RecognizedStatement) -> StatementMetadata:
        reference_month, reference_year = reference_period(statement.issued_date, statement.due_date)

        return StatementMetadata(
            bank_name=statement.bank_name,
            total_amount=statement.total_amount,
            statement_period=format_statement_period(statement.issued_date, statement.due_date),
            closing_date=statement.issued_date.isoformat() if statement.issued_date else None,
            due_date=statement.due_date.isoformat() if statement.due_date else None,
            reference_month=reference_month,
            reference_year=reference_year,
            confidence=statement.confidence,
        )

    @staticmethod
    def _notices(statement: RecognizedStatement, count: int, warnings) -> list:
        if warnings:
            return [
                f"OCR processed successfully ({count} transactions)",
                *warnings,
                "Review the data before saving",
            ]

        return [
            f"OCR processed with {statement.confidence * 100:.0f}% confidence",
            f"{count} transactions extracted",
            f"Total: {format_currency(statement.total_amount, statement.currency)}",
            f"Bank: {statement.bank_name}",
        ]
