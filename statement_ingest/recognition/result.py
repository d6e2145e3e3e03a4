"""Normalized output of a recognition service call."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional


@dataclass
class RecognizedItem:
    """One statement line as read by the recognition service."""
    date: date
    description: str
    amount: Decimal


@dataclass
class RecognizedStatement:
    """
    Statement-level data read by the recognition service.

    Attributes:
        bank_name: Issuer name, or a placeholder when not identified
        total_amount: Declared statement total, or the sum of items
        confidence: Service confidence in [0, 1]
        issued_date: Statement issue (closing) date
        due_date: Payment due date
        currency: ISO currency code
        items: Recognized charges, amounts always positive
        raw_text: Full text returned by the service, if any
    """
    bank_name: str
    total_amount: Decimal
    confidence: float
    issued_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: str = "BRL"
    items: List[RecognizedItem] = field(default_factory=list)
    raw_text: Optional[str] = None


@dataclass
class RecognitionResult:
    """
    Outcome of a recognition call.

    Attributes:
        success: Whether usable statement data came back
        data: Statement data on success
        error: Main failure message
        warnings: Review hints (low confidence, total mismatch, skipped items)
        unavailable: True when the service could not be reached or timed out
    """
    success: bool
    data: Optional[RecognizedStatement] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    unavailable: bool = False

    @classmethod
    def failed(cls, error: str, warnings: Optional[List[str]] = None, unavailable: bool = False) -> "RecognitionResult":
        return cls(success=False, error=error, warnings=list(warnings or []), unavailable=unavailable)
