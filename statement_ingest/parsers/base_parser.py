"""Base statement parser with shared utilities for every strategy.

Each supported file format gets one parser class implementing the same
capability contract:

- ``name``: human-readable identifier
- ``can_parse(file)``: cheap acceptance predicate, never raises for bad input
- ``parse(file, context)``: full parse, encoding failures in the result

Parsers hold configuration only (regex tables, categorizer, limits). All
per-call state lives in local variables, so one instance can serve
concurrent parses.
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, List, Optional

from ..categorizer import Categorizer, get_categorizer
from ..models import (
    FailureKind,
    ParseContext,
    ParsedTransaction,
    ParseResult,
    StatementFile,
    StatementMetadata,
)
from ..utils.date_parser import format_month_period

logger = logging.getLogger(__name__)


class BaseStatementParser(ABC):
    """
    Abstract base class for statement parsing strategies.

    Subclasses must implement:
    - can_parse(): acceptance predicate
    - parse(): parsing logic for their format
    """

    name: str = "Base Parser"

    def __init__(self, categorizer: Optional[Categorizer] = None):
        """
        Initialize the parser.

        Args:
            categorizer: Shared keyword categorizer (defaults to the packaged taxonomy)
        """
        self.categorizer = categorizer or get_categorizer()

    @abstractmethod
    def can_parse(self, file: StatementFile) -> bool:
        """
        Check if this parser can handle the given file.

        Args:
            file: Uploaded statement

        Returns:
            True if this parser should be used for the file
        """
        pass

    @abstractmethod
    def parse(self, file: StatementFile, context: Optional[ParseContext] = None) -> ParseResult:
        """
        Parse the file into transactions.

        Args:
            file: Uploaded statement
            context: Optional deadline/cancellation for the call

        Returns:
            ParseResult; malformed input is reported in the result, not raised
        """
        pass

    def _failure(
        self,
        errors: List[str],
        failure_kind: FailureKind = FailureKind.PARSE_FAILED,
        metadata: Optional[StatementMetadata] = None
    ) -> ParseResult:
        """Build a hard-failure result tagged with this parser's name."""
        logger.info(f"{self.name} failed: {errors[0] if errors else failure_kind.value}")
        return ParseResult.failure(
            errors,
            failure_kind=failure_kind,
            metadata=metadata,
            parser_name=self.name
        )

    @staticmethod
    def _sum_amounts(transactions: Iterable[ParsedTransaction]) -> Decimal:
        return sum((t.amount for t in transactions), Decimal("0"))

    @staticmethod
    def _period_from_transactions(transactions: List[ParsedTransaction]) -> str:
        """Month span covered by the extracted transactions ("" when none)."""
        return format_month_period(t.date for t in transactions)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
