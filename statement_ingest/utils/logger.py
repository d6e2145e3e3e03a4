"""Logging setup for the CLI and the per-dispatch audit trail."""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config.settings import LOG_LEVEL, LOG_FILE

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s %(levelname)-8s [%(name)s:%(lineno)d] %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str = "statement_ingest", log_file: Optional[Path] = LOG_FILE) -> logging.Logger:
    """
    Attach console and file handlers to the package logger.

    Calling it again returns the already-configured logger. The console
    shows INFO and above; the log file keeps DEBUG detail.

    Args:
        name: Logger name
        log_file: Destination for DEBUG output (None to skip file logging)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is None:
        return logger

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not set up file logging: {e}")

    return logger


def log_parse_audit(
    file_name: str,
    parser_name: Optional[str],
    success: bool,
    transaction_count: int = 0,
    failure_kind: Optional[str] = None,
    error: Optional[str] = None
) -> None:
    """
    Log one audit line per dispatched statement.

    Args:
        file_name: Name of the uploaded file
        parser_name: Strategy that handled the file (None if none accepted it)
        success: Whether parsing succeeded
        transaction_count: Number of transactions returned
        failure_kind: FailureKind value when parsing failed
        error: First error message if failed
    """
    logger = logging.getLogger("statement_ingest.audit")

    audit_data = {
        "timestamp": datetime.now().isoformat(),
        "file": file_name,
        "parser": parser_name or "-",
        "success": success,
        "transactions": transaction_count,
    }

    if failure_kind:
        audit_data["failure_kind"] = failure_kind
    if error:
        audit_data["error"] = error

    audit_message = " | ".join(f"{k}={v}" for k, v in audit_data.items())
    logger.info(f"AUDIT: {audit_message}")
