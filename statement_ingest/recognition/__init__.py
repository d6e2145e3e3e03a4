"""Recognition (OCR) capability used by the OCR statement parser."""
import logging
from typing import Optional

from ..config.settings import RECOGNITION_PROVIDER
from .base_client import RecognitionClient
from .http_client import OcrApiClient
from .normalizer import extract_items_from_raw_text, normalize_description, normalize_response
from .result import RecognitionResult, RecognizedItem, RecognizedStatement
from .schema import OcrData, OcrItem, OcrResponse

logger = logging.getLogger(__name__)

PROVIDERS = ('http', 'anthropic', 'none')


def build_recognition_client(provider: Optional[str] = None) -> Optional[RecognitionClient]:
    """
    Build the configured recognition client.

    Args:
        provider: "http", "anthropic" or "none" (defaults to RECOGNITION_PROVIDER)

    Returns:
        Client instance, or None when recognition is disabled

    Raises:
        ValueError: For an unknown provider or a missing API key
    """
    provider = (provider or RECOGNITION_PROVIDER).strip().lower()

    if provider == 'none':
        logger.info("Recognition disabled")
        return None

    if provider == 'http':
        return OcrApiClient()

    if provider == 'anthropic':
        from .anthropic_client import AnthropicRecognitionClient
        return AnthropicRecognitionClient()

    raise ValueError(f"Unknown recognition provider: {provider!r} (expected one of {', '.join(PROVIDERS)})")


__all__ = [
    'PROVIDERS',
    'RecognitionClient',
    'OcrApiClient',
    'RecognitionResult',
    'RecognizedItem',
    'RecognizedStatement',
    'OcrData',
    'OcrItem',
    'OcrResponse',
    'build_recognition_client',
    'extract_items_from_raw_text',
    'normalize_description',
    'normalize_response',
]
