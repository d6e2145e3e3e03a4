"""Parse result model."""
import threading
import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from .transaction import ParsedTransaction


class FailureKind(Enum):
    """Why a parse did not succeed."""
    NONE = "none"
    UNSUPPORTED_FORMAT = "unsupported_format"
    PARSE_FAILED = "parse_failed"
    CAPABILITY_UNAVAILABLE = "capability_unavailable"
    CANCELLED = "cancelled"
    INTERNAL_ERROR = "internal_error"


@dataclass
class StatementMetadata:
    """
    Optional, parser-dependent enrichment of a parse result.

    Attributes:
        bank_name: Detected issuer
        card_last4: Last four digits of the card
        total_amount: Sum of returned transactions, or the statement's own total
        statement_period: Human-readable period description
        closing_date: Statement closing/issue date (ISO)
        due_date: Statement due date (ISO)
        reference_month: Competency month inferred from the statement
        reference_year: Competency year inferred from the statement
        dropped_count: Parsed items discarded by plausibility checks or deduplication
        confidence: Recognition confidence (0-1) when a recognition service was used
    """
    bank_name: Optional[str] = None
    card_last4: Optional[str] = None
    total_amount: Optional[Decimal] = None
    statement_period: Optional[str] = None
    closing_date: Optional[str] = None
    due_date: Optional[str] = None
    reference_month: Optional[int] = None
    reference_year: Optional[int] = None
    dropped_count: int = 0
    confidence: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert metadata to dictionary, omitting unset fields."""
        payload = {
            'bank_name': self.bank_name,
            'card_last4': self.card_last4,
            'total_amount': str(self.total_amount) if self.total_amount is not None else None,
            'statement_period': self.statement_period,
            'closing_date': self.closing_date,
            'due_date': self.due_date,
            'reference_month': self.reference_month,
            'reference_year': self.reference_year,
            'dropped_count': self.dropped_count,
            'confidence': self.confidence,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass
class ParseResult:
    """
    Output of one parse attempt.

    Attributes:
        success: Whether at least one usable transaction was recovered
        transactions: Recovered transactions (always empty on failure)
        errors: Failure diagnostics and per-item soft failures
        notices: Informational annotations for the end user
        metadata: Optional enrichment
        failure_kind: Category of failure; NONE on success
        parser_name: Strategy that produced the result
    """
    success: bool
    transactions: List[ParsedTransaction] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)
    metadata: StatementMetadata = field(default_factory=StatementMetadata)
    failure_kind: FailureKind = FailureKind.NONE
    parser_name: Optional[str] = None

    def __post_init__(self):
        """Enforce the failure invariants."""
        if not self.success:
            if self.transactions:
                raise ValueError("a failed ParseResult cannot carry transactions")
            if self.failure_kind is FailureKind.NONE:
                self.failure_kind = FailureKind.PARSE_FAILED

    @classmethod
    def failure(
        cls,
        errors: List[str],
        failure_kind: FailureKind = FailureKind.PARSE_FAILED,
        metadata: Optional[StatementMetadata] = None,
        parser_name: Optional[str] = None
    ) -> "ParseResult":
        """Build a hard-failure result."""
        return cls(
            success=False,
            errors=list(errors),
            metadata=metadata or StatementMetadata(),
            failure_kind=failure_kind,
            parser_name=parser_name
        )

    @property
    def transaction_count(self) -> int:
        """Get number of transactions."""
        return len(self.transactions)

    @property
    def total_amount(self) -> Decimal:
        """Sum of the returned transaction amounts."""
        return sum((t.amount for t in self.transactions), Decimal("0"))

    @property
    def messages(self) -> List[str]:
        """Errors followed by notices, as a single list for display."""
        return self.errors + self.notices

    def to_dict(self) -> dict:
        """Convert parse result to dictionary."""
        return {
            'success': self.success,
            'parser': self.parser_name,
            'failure_kind': self.failure_kind.value,
            'transaction_count': self.transaction_count,
            'transactions': [t.to_dict() for t in self.transactions],
            'errors': self.errors,
            'notices': self.notices,
            'metadata': self.metadata.to_dict(),
        }


@dataclass
class ParseContext:
    """
    Per-call deadline and cancellation for a parse.

    Attributes:
        cancel_event: Set by the caller to abandon the parse
        timeout: Overall time budget in seconds (None for no deadline)
    """
    cancel_event: Optional[threading.Event] = None
    timeout: Optional[float] = None
    started_at: float = field(default_factory=time.monotonic)

    @property
    def cancelled(self) -> bool:
        """Whether the caller asked to abandon the parse."""
        return self.cancel_event is not None and self.cancel_event.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when unbounded."""
        if self.timeout is None:
            return None
        return max(0.0, self.timeout - (time.monotonic() - self.started_at))

    @property
    def expired(self) -> bool:
        """Whether the deadline has passed."""
        remaining = self.remaining()
        return remaining is not None and remaining <= 0
