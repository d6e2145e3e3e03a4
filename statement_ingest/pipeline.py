"""
Statement ingestion pipeline: strategy selection and dispatch.

The ordered strategy list is always passed in by the caller; there is no
module-level registry. ``default_parsers`` builds the standard priority
order for callers that do not need their own.
"""
import logging
import time
from typing import Optional, Sequence

from .categorizer import Categorizer, get_categorizer
from .config.settings import MAX_FILE_SIZE_BYTES, MAX_FILE_SIZE_MB
from .models import FailureKind, ParseContext, ParseResult, StatementFile
from .parsers import (
    BaseStatementParser,
    InterCSVParser,
    NubankCSVParser,
    OcrStatementParser,
    OFXParser,
    PDFParser,
)
from .recognition import RecognitionClient
from .utils import log_parse_audit

logger = logging.getLogger(__name__)


def default_parsers(
    recognition_client: Optional[RecognitionClient] = None,
    categorizer: Optional[Categorizer] = None
) -> list:
    """
    Build the standard strategy list in priority order.

    Order: Nubank CSV, Inter CSV, OFX/QFX, OCR (only with a recognition
    client), heuristic PDF. All strategies share one categorizer.

    Args:
        recognition_client: Recognition service for PDF statements
        categorizer: Shared categorizer (defaults to the packaged taxonomy)

    Returns:
        List of parser instances
    """
    categorizer = categorizer or get_categorizer()

    parsers = [
        NubankCSVParser(categorizer),
        InterCSVParser(categorizer),
        OFXParser(categorizer),
    ]
    if recognition_client is not None:
        parsers.append(OcrStatementParser(recognition_client, categorizer))
    parsers.append(PDFParser(categorizer))

    return parsers


def check_file_size(file: StatementFile) -> Optional[str]:
    """Return an error for empty or oversized uploads, else None."""
    if file.size == 0:
        return "Empty file"
    if file.size > MAX_FILE_SIZE_BYTES:
        return f"File too large (max {MAX_FILE_SIZE_MB}MB)"
    return None


def select_parser(file: StatementFile, parsers: Sequence[BaseStatementParser]) -> Optional[BaseStatementParser]:
    """
    Return the first parser whose acceptance predicate is true.

    A predicate that raises counts as "not accepted".
    """
    for parser in parsers:
        try:
            if parser.can_parse(file):
                logger.debug(f"{parser.name} accepted {file.name}")
                return parser
        except Exception as e:
            logger.warning(f"{parser.name} raised while probing {file.name}: {e}")

    return None


def dispatch(
    file: StatementFile,
    parsers: Sequence[BaseStatementParser],
    context: Optional[ParseContext] = None
) -> ParseResult:
    """
    Parse a statement with the first accepting strategy.

    Never raises: unexpected faults inside a strategy become an
    INTERNAL_ERROR result, so callers always get a ParseResult.

    Args:
        file: Uploaded statement
        parsers: Strategies in priority order
        context: Deadline/cancellation for the call

    Returns:
        ParseResult from the selected strategy, or an UNSUPPORTED_FORMAT failure
    """
    logger.info(f"Dispatching {file.name} ({file.size} bytes, {file.media_type or 'no media type'})")
    start_time = time.monotonic()

    size_error = check_file_size(file)
    parser = None if size_error else select_parser(file, parsers)

    if size_error:
        logger.warning(f"Rejected {file.name}: {size_error}")
        result = ParseResult.failure([size_error])
    elif parser is None:
        result = ParseResult.failure(
            [f"Unsupported file format: {file.name}. Supported: CSV (Nubank, Inter), OFX/QFX and PDF"],
            failure_kind=FailureKind.UNSUPPORTED_FORMAT,
        )
    elif context is not None and context.cancelled:
        result = ParseResult.failure(["Parsing cancelled"], FailureKind.CANCELLED, parser_name=parser.name)
    else:
        try:
            result = parser.parse(file, context)
        except Exception as e:
            logger.exception(f"{parser.name} failed unexpectedly on {file.name}")
            result = ParseResult.failure(
                [f"Unexpected error while processing the file: {e}"],
                failure_kind=FailureKind.INTERNAL_ERROR,
                parser_name=parser.name,
            )

        if result.parser_name is None:
            result.parser_name = parser.name

    elapsed = time.monotonic() - start_time
    logger.info(f"Finished {file.name} in {elapsed:.2f}s: success={result.success}")

    log_parse_audit(
        file_name=file.name,
        parser_name=result.parser_name,
        success=result.success,
        transaction_count=result.transaction_count,
        failure_kind=None if result.success else result.failure_kind.value,
        error=None if result.success or not result.errors else result.errors[0],
    )

    return result
