"""Data models for statement ingestion."""
from .transaction import ParsedTransaction, DEFAULT_CATEGORY
from .statement_file import StatementFile
from .parse_result import FailureKind, ParseContext, ParseResult, StatementMetadata
from .invoice import CalculatedDates, CardDates, InvoiceCompetency, InvoiceDraft

__all__ = [
    'ParsedTransaction',
    'DEFAULT_CATEGORY',
    'StatementFile',
    'FailureKind',
    'ParseContext',
    'ParseResult',
    'StatementMetadata',
    'CalculatedDates',
    'CardDates',
    'InvoiceCompetency',
    'InvoiceDraft',
]
