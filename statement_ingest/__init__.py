"""Statement ingestion and invoice date tooling for credit-card bills."""

__version__ = "0.1.0"
