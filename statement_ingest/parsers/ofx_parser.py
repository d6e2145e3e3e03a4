"""OFX/QFX statement parser.

OFX is the semi-structured financial exchange format most Brazilian banks
export (Itaú, Bradesco, Santander, ...). Files start with either an SGML
header (``OFXHEADER:100``) or an XML prolog, followed by an ``<OFX>`` body.

Format characteristics:
- One ``<STMTTRN>...</STMTTRN>`` aggregate per transaction
- Leaf tags may or may not be closed (SGML vs XML flavour)
- ``DTPOSTED`` as ``YYYYMMDD[HHMMSS[.XXX][TZ]]``
- ``TRNAMT`` signed, negative for debits

Only debits are kept: this parser feeds card-bill ingestion, not account
reconciliation.
"""

import html
import logging
import re
from typing import List, Optional

from ..config.settings import MAX_FILE_SIZE_BYTES
from ..models import ParseContext, ParsedTransaction, ParseResult, StatementFile, StatementMetadata
from ..utils import detect_installment, parse_decimal_amount, parse_ofx_date
from .base_parser import BaseStatementParser

logger = logging.getLogger(__name__)

GENERIC_BANK = "Generic Bank"
UNTITLED = "Untitled transaction"


class OFXParser(BaseStatementParser):
    """Parser for OFX and QFX statement exports."""

    name = "Generic OFX Parser"

    VALID_EXTENSIONS = {'.ofx', '.qfx'}
    HEADER_MARKERS = ('<OFX>', 'OFXHEADER')
    SNIFF_BYTES = 1000

    TRANSACTION_PATTERN = re.compile(r'<STMTTRN>(.*?)</STMTTRN>', re.IGNORECASE | re.DOTALL)
    ORG_PATTERN = re.compile(r'<ORG>\s*([^<\r\n]+)', re.IGNORECASE)
    FID_PATTERN = re.compile(r'<FID>\s*([^<\r\n]+)', re.IGNORECASE)
    ACCOUNT_PATTERN = re.compile(r'<ACCTID>\s*([^<\r\n]+)', re.IGNORECASE)

    def can_parse(self, file: StatementFile) -> bool:
        """
        Accept .ofx/.qfx files up to the size limit whose first bytes carry an OFX marker.
        """
        if file.extension not in self.VALID_EXTENSIONS:
            return False

        if file.size > MAX_FILE_SIZE_BYTES:
            logger.debug(f"OFX file too large: {file.size} bytes")
            return False

        head = file.head(self.SNIFF_BYTES)
        return any(marker in head for marker in self.HEADER_MARKERS)

    def parse(self, file: StatementFile, context: Optional[ParseContext] = None) -> ParseResult:
        """
        Parse OFX transactions.

        Args:
            file: Uploaded OFX/QFX file
            context: Unused; OFX parsing is local and bounded

        Returns:
            ParseResult with debit transactions
        """
        logger.info(f"Parsing OFX file: {file.name}")
        text = self._decode(file)

        body_start = text.find('<OFX>')
        if body_start == -1:
            return self._failure(["Invalid OFX file: <OFX> tag not found"])

        body = text[body_start:]
        bank_name = self._extract_bank_name(body)

        transactions: List[ParsedTransaction] = []
        errors: List[str] = []
        credits_skipped = 0

        for index, match in enumerate(self.TRANSACTION_PATTERN.finditer(body), start=1):
            try:
                transaction = self._parse_block(match.group(1))
            except ValueError as e:
                errors.append(f"Error processing transaction {index}: {e}")
                logger.warning(f"Skipping OFX transaction {index}: {e}")
                continue

            if transaction is None:
                credits_skipped += 1
                continue

            transactions.append(transaction)

        logger.debug(f"OFX: {len(transactions)} debits, {credits_skipped} credits skipped, {len(errors)} errors")

        if not transactions:
            errors.append("No transactions found in OFX file")
            return self._failure(errors, metadata=StatementMetadata(bank_name=bank_name))

        metadata = StatementMetadata(
            bank_name=bank_name,
            card_last4=self._extract_account_last4(body),
            total_amount=self._sum_amounts(transactions),
            statement_period=self._period_from_transactions(transactions),
        )

        logger.info(f"Parsed {len(transactions)} OFX transactions from {bank_name}")

        return ParseResult(
            success=True,
            transactions=transactions,
            errors=errors,
            metadata=metadata,
            parser_name=self.name,
        )

    @staticmethod
    def _decode(file: StatementFile) -> str:
        """Decode as UTF-8, falling back to Windows-1252 (common for OFX 1.x)."""
        text = file.text('utf-8')
        if '\ufffd' in text:
            text = file.content.decode('cp1252', errors='replace')
        return text

    @staticmethod
    def _extract_tag(content: str, tag: str) -> str:
        """Get a leaf tag value; works with and without closing tags."""
        match = re.search(rf'<{tag}>\s*([^<\r\n]*)', content, re.IGNORECASE)
        return html.unescape(match.group(1).strip()) if match else ''

    def _parse_block(self, content: str) -> Optional[ParsedTransaction]:
        """
        Parse one STMTTRN aggregate.

        Returns:
            ParsedTransaction for debits, None for credits

        Raises:
            ValueError: If the date or amount cannot be parsed
        """
        date_str = self._extract_tag(content, 'DTPOSTED')
        posted = parse_ofx_date(date_str)
        if posted is None:
            raise ValueError(f"Invalid date: {date_str!r}")

        amount_str = self._extract_tag(content, 'TRNAMT')
        amount = parse_decimal_amount(amount_str)
        if amount is None:
            raise ValueError(f"Invalid amount: {amount_str!r}")

        # Credits (payments, refunds) are not part of the bill
        if amount >= 0:
            return None

        description = (
            self._extract_tag(content, 'MEMO')
            or self._extract_tag(content, 'NAME')
            or UNTITLED
        )

        return ParsedTransaction(
            date=posted,
            description=description,
            amount=abs(amount),
            category=self.categorizer.categorize(description),
            installment=detect_installment(description),
            raw_data={
                'source': 'ofx',
                'trn_type': self._extract_tag(content, 'TRNTYPE'),
                'original_amount': amount,
                'fit_id': self._extract_tag(content, 'FITID'),
            }
        )

    def _extract_bank_name(self, body: str) -> str:
        org_match = self.ORG_PATTERN.search(body)
        if org_match and org_match.group(1).strip():
            return org_match.group(1).strip()

        fid_match = self.FID_PATTERN.search(body)
        if fid_match and fid_match.group(1).strip():
            return f"Bank (FID: {fid_match.group(1).strip()})"

        return GENERIC_BANK

    def _extract_account_last4(self, body: str) -> Optional[str]:
        match = self.ACCOUNT_PATTERN.search(body)
        if not match:
            return None

        digits = re.sub(r'\D', '', match.group(1))
        return digits[-4:] if len(digits) >= 4 else None
