"""Base class for recognition service clients."""
import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from ..config.settings import MAX_FILE_SIZE_BYTES, OCR_MIN_CONFIDENCE
from ..exceptions import RecognitionError
from ..models import ParseContext, StatementFile
from .normalizer import normalize_response
from .result import RecognitionResult
from .schema import OcrResponse

logger = logging.getLogger(__name__)


class RecognitionClient(ABC):
    """
    Abstract recognition capability: PDF bytes in, statement data out.

    Subclasses only fetch the raw payload. Validation against the wire
    schema and normalization are shared, so every provider yields the same
    RecognitionResult shape.
    """

    name: str = "Recognition"

    def __init__(self, min_confidence: float = OCR_MIN_CONFIDENCE, today: Optional[Callable[[], date]] = None):
        self.min_confidence = min_confidence
        self.today = today

    @abstractmethod
    def _fetch_payload(self, file: StatementFile, context: Optional[ParseContext]) -> Dict[str, Any]:
        """
        Send the file to the service and return the decoded JSON payload.

        Raises:
            RecognitionError: If the service cannot be reached or rejects the file
        """
        pass

    def validate_file(self, file: StatementFile) -> Optional[str]:
        """Return an error message if the file cannot be sent, else None."""
        if not file.is_pdf:
            return "Only PDF files are supported for recognition"

        if file.size == 0:
            return "PDF file is empty"

        if file.size > MAX_FILE_SIZE_BYTES:
            size_mb = file.size / (1024 * 1024)
            max_mb = MAX_FILE_SIZE_BYTES / (1024 * 1024)
            return f"File too large ({size_mb:.2f}MB). Maximum allowed: {max_mb:.0f}MB"

        return None

    def recognize(self, file: StatementFile, context: Optional[ParseContext] = None) -> RecognitionResult:
        """
        Recognize a PDF statement.

        Args:
            file: PDF statement
            context: Deadline/cancellation for the call

        Returns:
            RecognitionResult; failures are reported, not raised
        """
        error = self.validate_file(file)
        if error:
            return RecognitionResult.failed(error)

        logger.info(f"Sending {file.name} ({file.size / 1024:.2f} KB) to {self.name}")

        try:
            payload = self._fetch_payload(file, context)
            response = OcrResponse.model_validate(payload)
        except RecognitionError as e:
            logger.error(f"{self.name} failed: {e}")
            return RecognitionResult.failed(str(e), warnings=e.warnings, unavailable=e.unavailable)
        except ValidationError as e:
            logger.error(f"{self.name} returned an invalid payload: {e}")
            return RecognitionResult.failed(
                "Recognition response has an invalid format",
                warnings=[
                    f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ],
            )

        return normalize_response(response, self.min_confidence, self.today)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
