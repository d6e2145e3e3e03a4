"""Shared machinery for issuer-specific CSV exports."""

import csv
import io
import logging
from abc import abstractmethod
from typing import Dict, List, Optional, Sequence

from ..config.settings import MAX_CSV_SIZE_BYTES
from ..models import ParseContext, ParsedTransaction, ParseResult, StatementFile, StatementMetadata
from ..utils import strip_accents
from .base_parser import BaseStatementParser

logger = logging.getLogger(__name__)


class CSVStatementParser(BaseStatementParser):
    """
    Base class for CSV exports with a known header.

    Subclasses declare ``COLUMNS`` (field name -> accepted header keywords)
    and implement ``parse_row``. Columns are located by keyword, so extra or
    reordered columns are tolerated.
    """

    bank_name: str = "Unknown Bank"
    COLUMNS: Dict[str, Sequence[str]] = {}
    SNIFF_BYTES = 500

    def can_parse(self, file: StatementFile) -> bool:
        """Accept .csv files up to 5 MB whose first line carries every expected column."""
        if file.extension != '.csv':
            return False

        if file.size > MAX_CSV_SIZE_BYTES:
            logger.debug(f"CSV file too large: {file.size} bytes")
            return False

        lines = file.head(self.SNIFF_BYTES).lstrip('\ufeff').split('\n')
        if len(lines) < 2:
            return False

        header = next(csv.reader([lines[0]]), [])
        return self._locate_columns(header) is not None

    def _locate_columns(self, header: Sequence[str]) -> Optional[Dict[str, int]]:
        """Map each expected field to a header index, or None if any is missing."""
        normalized = [strip_accents(cell.strip().lower()) for cell in header]
        positions = {}

        for field_name, keywords in self.COLUMNS.items():
            for index, cell in enumerate(normalized):
                if any(keyword in cell for keyword in keywords):
                    positions[field_name] = index
                    break
            else:
                return None

        return positions

    def parse(self, file: StatementFile, context: Optional[ParseContext] = None) -> ParseResult:
        """
        Parse every data row; bad rows become ``Line N: ...`` errors.

        Args:
            file: Uploaded CSV file
            context: Unused; CSV parsing is local and bounded

        Returns:
            ParseResult, successful when any row parsed or no row failed
        """
        logger.info(f"Parsing {self.bank_name} CSV file: {file.name}")

        text = file.text('utf-8-sig')
        lines = [line for line in text.splitlines() if line.strip()]
        if len(lines) < 2:
            return self._failure(["Empty or invalid CSV file"])

        rows = list(csv.reader(io.StringIO('\n'.join(lines))))
        positions = self._locate_columns(rows[0])
        if positions is None:
            return self._failure([f"CSV header does not match the {self.bank_name} export format"])

        transactions: List[ParsedTransaction] = []
        errors: List[str] = []

        for line_number, row in enumerate(rows[1:], start=2):
            try:
                transaction = self.parse_row(self._pick(row, positions), line_number)
            except ValueError as e:
                errors.append(f"Line {line_number}: {e}")
                continue

            if transaction:
                transactions.append(transaction)

        logger.debug(f"{self.bank_name} CSV: {len(transactions)} transactions, {len(errors)} errors")

        metadata = StatementMetadata(
            bank_name=self.bank_name,
            card_last4=self.extract_card_last4(text),
            total_amount=self._sum_amounts(transactions),
            statement_period=self._period_from_transactions(transactions),
        )

        if errors and not transactions:
            return self._failure(errors, metadata=metadata)

        return ParseResult(
            success=True,
            transactions=transactions,
            errors=errors,
            metadata=metadata,
            parser_name=self.name,
        )

    @staticmethod
    def _pick(row: Sequence[str], positions: Dict[str, int]) -> Dict[str, str]:
        if len(row) <= max(positions.values()):
            raise ValueError(f"Not enough fields ({len(row)})")
        return {name: row[index].strip() for name, index in positions.items()}

    def extract_card_last4(self, text: str) -> Optional[str]:
        """Card digits printed in the export, when the issuer includes them."""
        return None

    @abstractmethod
    def parse_row(self, fields: Dict[str, str], line_number: int) -> Optional[ParsedTransaction]:
        """
        Build a transaction from one row.

        Args:
            fields: Cell values keyed by column name
            line_number: 1-based line in the file (header is line 1)

        Returns:
            ParsedTransaction, or None for rows that are not charges

        Raises:
            ValueError: If a cell cannot be parsed
        """
        pass
