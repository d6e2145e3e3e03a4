"""Recognition using the Anthropic Messages API."""
import base64
import json
import logging
from typing import Any, Dict, Optional

import anthropic

from ..config.settings import ANTHROPIC_API_KEY, VISION_API_MODEL
from ..exceptions import RecognitionError
from ..models import ParseContext, StatementFile
from .base_client import RecognitionClient

logger = logging.getLogger(__name__)


class AnthropicRecognitionClient(RecognitionClient):
    """
    Read a PDF card statement with Claude.

    The PDF goes up whole as a base64 document block and the model is asked
    to answer in the same JSON shape the OCR API returns, so both providers
    share validation and normalization.
    """

    name = "Anthropic Vision"

    EXTRACTION_PROMPT = """Analyze this Brazilian credit card statement and extract ALL charges.

Return a JSON object with this EXACT structure:
{
  "success": true,
  "document_type": "credit_card_statement",
  "confidence": 0.0,
  "data": {
    "empresa": "Card issuer name",
    "cnpj": "Issuer CNPJ or null",
    "data_emissao": "YYYY-MM-DD (closing date) or null",
    "data_vencimento": "YYYY-MM-DD (due date) or null",
    "valor_total": 0.00,
    "moeda": "BRL",
    "itens": [
      {"descricao": "Charge description", "valor": 0.00, "data": "YYYY-MM-DD"}
    ]
  }
}

CRITICAL RULES:
1. Extract EVERY charge - do not skip any
2. Do NOT include payments, refunds or credits
3. Dates must be in YYYY-MM-DD format
4. Amounts are positive numbers with a dot as decimal separator
5. Keep installment markers such as "02/12" in the description
6. "confidence" is your own estimate between 0 and 1
7. If the document is not a card statement, return {"success": false, "error": "reason"}
8. Return ONLY valid JSON - no explanatory text"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = VISION_API_MODEL,
        max_tokens: int = 8192,
        client: Optional[anthropic.Anthropic] = None,
        **kwargs
    ):
        """
        Initialize Anthropic recognition client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY)
            model: Model used for extraction
            max_tokens: Reply token limit
            client: Preconfigured SDK client
        """
        super().__init__(**kwargs)

        self.api_key = api_key or ANTHROPIC_API_KEY
        if client is None and not self.api_key:
            raise ValueError(
                "Anthropic API key required. Set ANTHROPIC_API_KEY environment variable "
                "or pass api_key parameter"
            )

        self.client = client or anthropic.Anthropic(api_key=self.api_key)
        self.model = model
        self.max_tokens = max_tokens

        logger.info(f"Anthropic recognition client initialized ({self.model})")

    def _fetch_payload(self, file: StatementFile, context: Optional[ParseContext]) -> Dict[str, Any]:
        document = base64.standard_b64encode(file.content).decode('ascii')

        options = {}
        remaining = context.remaining() if context else None
        if remaining is not None:
            if remaining <= 0:
                raise RecognitionError("Deadline reached before the recognition request could be sent", unavailable=True)
            options['timeout'] = remaining

        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "document",
                                "source": {
                                    "type": "base64",
                                    "media_type": "application/pdf",
                                    "data": document,
                                },
                            },
                            {
                                "type": "text",
                                "text": self.EXTRACTION_PROMPT
                            }
                        ],
                    }
                ],
                **options
            )
        except anthropic.APIConnectionError as e:
            raise RecognitionError(f"Could not reach the Anthropic API: {e}", unavailable=True)
        except anthropic.APIStatusError as e:
            raise RecognitionError(
                f"Anthropic API returned error {e.status_code}",
                unavailable=e.status_code >= 500 or e.status_code == 429,
            )

        response_text = ''.join(
            block.text for block in message.content if getattr(block, 'type', None) == 'text'
        )

        try:
            return json.loads(self._extract_json(response_text))
        except ValueError:
            logger.debug(f"Unparseable reply: {response_text[:200]!r}")
            raise RecognitionError("Recognition reply is not valid JSON")

    @staticmethod
    def _extract_json(text: str) -> str:
        """
        Extract JSON from response text (handles markdown code blocks).

        Args:
            text: Response text that may contain JSON

        Returns:
            Clean JSON string
        """
        if '```json' in text:
            start = text.find('```json') + 7
            end = text.find('```', start)
            return text[start:end].strip()
        elif '```' in text:
            start = text.find('```') + 3
            end = text.find('```', start)
            return text[start:end].strip()
        else:
            return text.strip()
