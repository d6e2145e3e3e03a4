"""Exceptions raised inside the ingestion core."""


class StatementIngestError(Exception):
    """Base exception for statement ingestion."""
    pass


class RecognitionError(StatementIngestError):
    """
    A recognition service call failed.

    Attributes:
        unavailable: True when the service could not be reached or timed out
        warnings: Extra hints to show alongside the error
    """

    def __init__(self, message: str, unavailable: bool = False, warnings=None):
        super().__init__(message)
        self.unavailable = unavailable
        self.warnings = list(warnings or [])


class InvoiceDateError(StatementIngestError, ValueError):
    """Invalid day, month or year given to the invoice date calculator."""
    pass
