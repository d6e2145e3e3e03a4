"""Heuristic PDF statement parser.

Recovers text straight from the PDF byte stream and extracts transactions
line by line with regular expressions. No content-stream decompression or
font decoding is attempted: statements whose text is not readable this way
fail with an "encrypted or empty" diagnostic and the user is pointed at
another export format.

Pipeline:
1. Text recovery (UTF-8, Latin-1 fallback)
2. Control-character and whitespace normalization
3. Issuer detection (metadata only)
4. Line extraction: date, last amount on the line, remaining text
5. Categorization
6. Deduplication on (date, description, amount)
7. Plausibility filtering
"""

import logging
import re
from datetime import date
from typing import Callable, List, Optional

from ..categorizer import Categorizer
from ..config import TaxonomyLoader, get_taxonomy_loader
from ..config.settings import MAX_DESCRIPTION_LENGTH, MAX_TRANSACTION_AMOUNT, MIN_DESCRIPTION_LENGTH
from ..models import ParseContext, ParsedTransaction, ParseResult, StatementFile, StatementMetadata
from ..utils import collapse_whitespace, detect_installment, parse_brazilian_amount, parse_slash_date
from ..validators import PlausibilityFilter, remove_duplicates
from .base_parser import BaseStatementParser

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 100
MIN_LINE_LENGTH = 10
SHORT_LINE_LENGTH = 50

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F]')
HORIZONTAL_SPACE = re.compile(r'[ \t]+')
BLANK_LINES = re.compile(r'\n\s*\n')
CURRENCY_MARKER = re.compile(r'R\$', re.IGNORECASE)


def recover_text(content: bytes) -> str:
    """
    Decode a PDF byte stream as text, best effort.

    UTF-8 is tried first; if the result contains replacement characters or
    is implausibly short, Latin-1 is used instead.
    """
    text = content.decode('utf-8', errors='replace')

    if '\ufffd' in text or len(text) < MIN_TEXT_LENGTH:
        text = content.decode('latin-1')

    return normalize_text(text)


def normalize_text(text: str) -> str:
    """Strip control characters and collapse spaces, keeping line structure."""
    text = CONTROL_CHARS.sub(' ', text)
    text = HORIZONTAL_SPACE.sub(' ', text)
    text = BLANK_LINES.sub('\n', text)
    return text


class PDFParser(BaseStatementParser):
    """Parser for PDF card statements whose text survives in the byte stream."""

    name = "PDF Parser (Heuristic)"

    # Most specific first; the first pattern found on a line decides the date
    DATE_PATTERNS = [
        re.compile(r'(?<![\d/])\d{2}/\d{2}/\d{4}(?![\d/])'),  # DD/MM/YYYY
        re.compile(r'(?<![\d/])\d{2}/\d{2}/\d{2}(?![\d/])'),  # DD/MM/YY
        re.compile(r'(?<![\d/])\d{2}/\d{2}(?![\d/])'),        # DD/MM
    ]

    VALUE_PATTERNS = [
        re.compile(r'R\$\s*(\d{1,3}(?:\.\d{3})*,\d{2})', re.IGNORECASE),  # R$ 1.234,56
        re.compile(r'(?<![\d.,])(\d{1,3}(?:\.\d{3})*,\d{2})(?![\d,])'),   # 1.234,56
    ]

    SKIP_KEYWORDS = [
        'TOTAL', 'SALDO', 'PAGAMENTO', 'RESUMO', 'FATURA',
        'VENCIMENTO', 'FECHAMENTO', 'LIMITE', 'CARTÃO',
        'DATA', 'DESCRIÇÃO', 'VALOR', 'ESTABELECIMENTO'
    ]

    def __init__(
        self,
        categorizer: Optional[Categorizer] = None,
        taxonomy: Optional[TaxonomyLoader] = None,
        today: Optional[Callable[[], date]] = None
    ):
        """
        Initialize PDF parser.

        Args:
            categorizer: Shared keyword categorizer
            taxonomy: Issuer identifiers for bank detection
            today: Callable returning the reference date for year defaults and plausibility
        """
        super().__init__(categorizer)
        self.taxonomy = taxonomy or get_taxonomy_loader()
        self.today = today or date.today
        self.plausibility = PlausibilityFilter(today=self.today)

    def can_parse(self, file: StatementFile) -> bool:
        """Accept anything declared or named as a PDF."""
        return file.is_pdf

    def parse(self, file: StatementFile, context: Optional[ParseContext] = None) -> ParseResult:
        """
        Parse a PDF statement heuristically.

        Args:
            file: Uploaded PDF
            context: Unused; parsing is local and bounded

        Returns:
            ParseResult with validated, deduplicated transactions
        """
        logger.info(f"Parsing PDF file: {file.name}")

        text = recover_text(file.content)
        logger.debug(f"Recovered {len(text)} characters of text")

        if len(text.strip()) < MIN_TEXT_LENGTH:
            return self._failure([
                "PDF appears to be empty or may be encrypted.",
                "Try exporting the PDF again from the bank's app.",
                "Check that the PDF is not password protected.",
            ])

        bank_name = self.taxonomy.detect_bank(text)
        logger.info(f"Detected bank: {bank_name}")

        candidates = self.extract_transactions(text)
        unique = remove_duplicates(candidates)
        outcome = self.plausibility.filter(unique)
        dropped = len(candidates) - len(outcome.kept)

        logger.info(
            f"PDF: {len(candidates)} candidate lines, {len(unique)} unique, "
            f"{len(outcome.kept)} plausible"
        )

        if not outcome.kept:
            return self._failure(
                [
                    "Could not extract transactions from the PDF.",
                    "Make sure the PDF contains a credit card statement.",
                    f"Detected bank: {bank_name}",
                    "Try the CSV or OFX export if available.",
                ],
                metadata=StatementMetadata(bank_name=bank_name, dropped_count=dropped)
            )

        transactions = outcome.kept
        metadata = StatementMetadata(
            bank_name=bank_name,
            total_amount=self._sum_amounts(transactions),
            statement_period=self._period_from_transactions(transactions),
            dropped_count=dropped,
        )

        return ParseResult(
            success=True,
            transactions=transactions,
            notices=[
                "PDF processed successfully.",
                f"{len(transactions)} transactions found.",
                "Review the data before saving.",
            ],
            metadata=metadata,
            parser_name=self.name,
        )

    def extract_transactions(self, text: str) -> List[ParsedTransaction]:
        """
        Extract candidate transactions from every non-trivial line.

        No deduplication or plausibility filtering happens here.
        """
        transactions = []

        for line_number, raw_line in enumerate(text.split('\n'), start=1):
            line = raw_line.strip()
            if len(line) < MIN_LINE_LENGTH:
                continue

            transaction = self.parse_line(line, line_number)
            if transaction:
                logger.debug(f"Line {line_number}: {transaction.description} {transaction.amount}")
                transactions.append(transaction)

        return transactions

    def _is_header_line(self, line: str) -> bool:
        # Long lines may legitimately mention these words in a merchant name
        upper = line.upper()
        return len(line) < SHORT_LINE_LENGTH and any(keyword in upper for keyword in self.SKIP_KEYWORDS)

    def parse_line(self, line: str, line_number: int = 0) -> Optional[ParsedTransaction]:
        """
        Try to read one transaction from a statement line.

        Args:
            line: Trimmed line text
            line_number: Position in the recovered text, kept as provenance

        Returns:
            ParsedTransaction or None if the line is not a transaction
        """
        if self._is_header_line(line):
            return None

        date_str = None
        for pattern in self.DATE_PATTERNS:
            match = pattern.search(line)
            if match:
                date_str = match.group(0)
                break

        if not date_str:
            return None

        transaction_date = parse_slash_date(date_str, default_year=self.today().year)
        if transaction_date is None:
            return None

        amount_str = None
        for pattern in self.VALUE_PATTERNS:
            matches = list(pattern.finditer(line))
            if matches:
                # Statements put the charged amount at the end of the line
                amount_str = matches[-1].group(1)
                break

        if not amount_str:
            return None

        amount = parse_brazilian_amount(amount_str)
        if amount is None or amount <= 0 or amount > MAX_TRANSACTION_AMOUNT:
            return None

        description = self._extract_description(line, date_str, amount_str)
        if not MIN_DESCRIPTION_LENGTH <= len(description) <= MAX_DESCRIPTION_LENGTH:
            return None

        return ParsedTransaction(
            date=transaction_date,
            description=description,
            amount=amount,
            category=self.categorizer.categorize(description),
            installment=detect_installment(description),
            raw_data={'source': 'pdf', 'line_number': line_number},
        )

    @staticmethod
    def _extract_description(line: str, date_str: str, amount_str: str) -> str:
        """Text left after removing the date and cutting at the amount."""
        description = line.replace(date_str, '', 1)

        amount_index = description.rfind(amount_str)
        if amount_index > 0:
            description = description[:amount_index]

        description = CURRENCY_MARKER.sub('', description)
        return collapse_whitespace(description).strip(' -|')
