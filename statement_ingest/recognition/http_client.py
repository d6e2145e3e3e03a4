"""Client for the hosted OCR extraction API."""
import logging
import time
from typing import Any, Dict, Optional

import requests

from ..config.settings import (
    OCR_API_ENDPOINT,
    OCR_API_URL,
    OCR_HEALTH_ENDPOINT,
    OCR_HEALTH_TIMEOUT_SECONDS,
    OCR_MAX_RETRIES,
    OCR_RETRY_DELAY_SECONDS,
    OCR_TIMEOUT_SECONDS,
)
from ..exceptions import RecognitionError
from ..models import ParseContext, StatementFile
from .base_client import RecognitionClient

logger = logging.getLogger(__name__)

TIMEOUT_HINTS = [
    "The OCR service may be warming up (the first request is slower)",
    "Wait 30 seconds and try again",
    "Check your internet connection",
]
CONNECTION_HINTS = [
    "Could not reach the OCR service",
    "Check your internet connection",
    "The service may be temporarily unavailable",
]
REJECTION_HINTS = [
    "The OCR service rejected the file",
    "Check that the PDF is not corrupted",
    "Try exporting the PDF again from the bank's app",
]


class OcrApiClient(RecognitionClient):
    """
    Recognition through the hosted OCR API.

    The service is probed first (``200`` ready, ``503`` still loading), then
    the PDF is posted as multipart form data. Timeouts are retried; other
    failures are not.
    """

    name = "OCR API"

    def __init__(
        self,
        base_url: str = OCR_API_URL,
        endpoint: str = OCR_API_ENDPOINT,
        health_endpoint: Optional[str] = OCR_HEALTH_ENDPOINT,
        timeout: float = OCR_TIMEOUT_SECONDS,
        max_retries: int = OCR_MAX_RETRIES,
        retry_delay: float = OCR_RETRY_DELAY_SECONDS,
        health_timeout: float = OCR_HEALTH_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip('/')
        self.endpoint = endpoint
        self.health_endpoint = health_endpoint
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.health_timeout = health_timeout
        self.session = session or requests.Session()

    def check_health(self) -> bool:
        """
        Probe the readiness endpoint.

        Returns:
            False only when the service reports it is still loading or
            answers with an unexpected status; an unreachable probe counts
            as ready so the real request surfaces the error.
        """
        if not self.health_endpoint:
            return True

        try:
            response = self.session.get(f"{self.base_url}{self.health_endpoint}", timeout=self.health_timeout)
        except requests.RequestException as e:
            logger.warning(f"OCR health check failed: {e}")
            return True

        if response.status_code == 200:
            logger.debug("OCR API is ready")
            return True

        if response.status_code == 503:
            logger.info("OCR API is still loading")
        return False

    def _wait(self, seconds: float, context: Optional[ParseContext]) -> None:
        if context is not None and context.cancel_event is not None:
            context.cancel_event.wait(seconds)
        else:
            time.sleep(seconds)

    def _attempt_timeout(self, context: Optional[ParseContext]) -> float:
        remaining = context.remaining() if context else None
        if remaining is None:
            return self.timeout
        if remaining <= 0:
            raise RecognitionError("Deadline reached before the OCR request could be sent", unavailable=True)
        return min(self.timeout, remaining)

    def _fetch_payload(self, file: StatementFile, context: Optional[ParseContext]) -> Dict[str, Any]:
        if not self.check_health():
            logger.warning("OCR API not ready, waiting before sending")
            self._wait(self.retry_delay, context)

        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            if context is not None and context.cancelled:
                raise RecognitionError("Recognition cancelled")

            timeout = self._attempt_timeout(context)
            logger.debug(f"OCR attempt {attempt}/{attempts} with {timeout:.0f}s timeout")

            try:
                response = self.session.post(
                    f"{self.base_url}{self.endpoint}",
                    files={'file': (file.name, file.content, 'application/pdf')},
                    timeout=timeout,
                )
            except requests.Timeout:
                logger.warning(f"OCR timeout on attempt {attempt}/{attempts}")
                if attempt < attempts:
                    self._wait(self.retry_delay, context)
                    continue
                raise RecognitionError(
                    f"OCR service did not respond within {timeout:.0f} seconds "
                    f"after {attempts} attempts",
                    unavailable=True,
                    warnings=TIMEOUT_HINTS,
                )
            except requests.RequestException as e:
                raise RecognitionError(
                    f"Connection error with the OCR service: {e}",
                    unavailable=True,
                    warnings=CONNECTION_HINTS,
                )

            return self._decode_response(response)

        # Only reached when max_retries is negative
        raise RecognitionError("OCR request was not attempted", unavailable=True)

    @staticmethod
    def _decode_response(response: requests.Response) -> Dict[str, Any]:
        if not response.ok:
            message = f"OCR service returned error {response.status_code}"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = body.get('error') or body.get('message') or message

            raise RecognitionError(
                message,
                unavailable=response.status_code >= 500,
                warnings=REJECTION_HINTS,
            )

        try:
            return response.json()
        except ValueError:
            raise RecognitionError("OCR service returned a response that is not JSON")
