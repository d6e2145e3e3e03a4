"""
Turn a validated recognition payload into a RecognitionResult.

Also recovers items from the service's raw text when it returned text but
no structured items.
"""
import logging
import re
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional

from ..config.settings import DEFAULT_CURRENCY, MAX_DESCRIPTION_LENGTH, MIN_DESCRIPTION_LENGTH, OCR_MIN_CONFIDENCE
from ..utils import collapse_whitespace, format_currency, parse_brazilian_amount, parse_flexible_date
from .result import RecognitionResult, RecognizedItem, RecognizedStatement
from .schema import OcrItem, OcrResponse

logger = logging.getLogger(__name__)

UNIDENTIFIED_BANK = "Unidentified bank"
TOTAL_TOLERANCE = Decimal("0.01")
TWO_PLACES = Decimal("0.01")

EXPORT_HINT = "Try a PDF exported directly from the bank's app"

PT_MONTHS = {
    'JAN': 1, 'FEV': 2, 'MAR': 3, 'ABR': 4, 'MAI': 5, 'JUN': 6,
    'JUL': 7, 'AGO': 8, 'SET': 9, 'OUT': 10, 'NOV': 11, 'DEZ': 12,
}
_MONTH_ALTERNATION = '|'.join(PT_MONTHS)

# DD MMM •••• NNNN DESCRIPTION R$ 1.234,56
CARD_LINE_PATTERN = re.compile(
    rf'^(\d{{1,2}})\s+({_MONTH_ALTERNATION})\s+[•*]+\s*\d{{4}}\s+(.+?)\s+R\$\s*([\d.,]+)$',
    re.IGNORECASE
)
# DD MMM ... R$ 1.234,56
LOOSE_LINE_PATTERN = re.compile(
    rf'(\d{{1,2}})\s+({_MONTH_ALTERNATION})\s+.*?R\$\s*([\d.,]+)',
    re.IGNORECASE
)
YEAR_PATTERN = re.compile(r'20\d{2}')
CARD_MASK_PATTERN = re.compile(r'[•*]{4}\s*\d{4}')
FRAGMENT_PATTERN = re.compile(r'^(a|de|em|para)\s+\d{1,2}\s+[A-Z]{3}', re.IGNORECASE)
UNSAFE_CHARS = re.compile(r'[^\w\s\-/*]')

RAW_TEXT_SKIP_MARKERS = ('TRANSAÇÕES', 'Pagamentos e Financiamentos', '---')


def normalize_description(description: str) -> str:
    """Collapse whitespace, drop unusual punctuation and cap the length."""
    cleaned = collapse_whitespace(description)
    cleaned = UNSAFE_CHARS.sub('', cleaned)
    return collapse_whitespace(cleaned)[:MAX_DESCRIPTION_LENGTH]


def _skip_raw_line(line: str) -> bool:
    if len(line) < 10:
        return True
    if any(marker in line for marker in RAW_TEXT_SKIP_MARKERS):
        return True
    if line.startswith('Página'):
        return True
    if re.match(r'^Total de compras', line, re.IGNORECASE):
        return True
    return bool(re.search(r'cartões.*R\$', line, re.IGNORECASE))


def extract_items_from_raw_text(raw_text: str, today: Optional[Callable[[], date]] = None) -> List[OcrItem]:
    """
    Recover charges from unstructured statement text.

    Lines shaped ``DD MMM [•••• NNNN] DESCRIPTION R$ 1.234,56`` with
    Portuguese month abbreviations are read; the year is the first
    ``20xx`` found anywhere in the text.

    Args:
        raw_text: Text returned by the recognition service
        today: Reference date callable, used when the text has no year

    Returns:
        Items in the service's own schema, ready for normalization
    """
    year_match = YEAR_PATTERN.search(raw_text)
    year = int(year_match.group(0)) if year_match else (today or date.today)().year

    items = []
    for raw_line in raw_text.split('\n'):
        line = raw_line.strip()
        if _skip_raw_line(line):
            continue

        match = CARD_LINE_PATTERN.match(line)
        if match:
            day, month_name, description, amount_str = match.groups()
        else:
            match = LOOSE_LINE_PATTERN.search(line)
            if not match:
                continue
            day, month_name, amount_str = match.groups()
            description = line[match.end(2):line.rfind('R$')]

        description = collapse_whitespace(CARD_MASK_PATTERN.sub('', description))
        if len(description) < MIN_DESCRIPTION_LENGTH or FRAGMENT_PATTERN.match(description):
            continue

        amount = parse_brazilian_amount(amount_str)
        if amount is None or amount <= 0:
            continue

        month = PT_MONTHS[month_name.upper()]
        items.append(OcrItem(
            descricao=description,
            valor=amount,
            data=f"{year:04d}-{month:02d}-{int(day):02d}",
        ))

    logger.info(f"Recovered {len(items)} items from raw text")
    return items


def normalize_response(
    response: OcrResponse,
    min_confidence: float = OCR_MIN_CONFIDENCE,
    today: Optional[Callable[[], date]] = None
) -> RecognitionResult:
    """
    Normalize a validated recognition payload.

    Args:
        response: Schema-validated payload
        min_confidence: Below this confidence a review warning is added
        today: Reference date callable for the raw-text year fallback

    Returns:
        RecognitionResult with positive amounts and parsed dates
    """
    if not response.success:
        return RecognitionResult.failed(
            response.error or response.message or "Recognition failed without an error message"
        )

    data = response.data
    if data is None:
        return RecognitionResult.failed(
            "Recognition returned no data",
            warnings=["The PDF may be empty, low quality or in an unsupported layout", EXPORT_HINT],
        )

    raw_items = list(data.itens)
    if not raw_items:
        if not response.raw_text:
            return RecognitionResult.failed(
                "No transactions were recognized in the PDF",
                warnings=["The PDF may be empty, low quality or in an unsupported layout", EXPORT_HINT],
            )

        logger.info("No structured items, falling back to raw text")
        raw_items = extract_items_from_raw_text(response.raw_text, today)
        if not raw_items:
            return RecognitionResult.failed(
                "No transactions were recognized in the PDF",
                warnings=[
                    "The service returned text but could not structure the transactions",
                    "The PDF layout may not be supported",
                    EXPORT_HINT,
                ],
            )

    warnings = []
    confidence = response.confidence if response.confidence is not None else 0.0
    if confidence < min_confidence:
        warnings.append(
            f"Low confidence ({confidence * 100:.0f}%). Review the data carefully before saving."
        )

    items = []
    for index, raw_item in enumerate(raw_items, start=1):
        item_date = parse_flexible_date(raw_item.data)
        if item_date is None:
            warnings.append(f"Item {index} skipped: unreadable date {raw_item.data!r}")
            continue

        description = normalize_description(raw_item.descricao)
        amount = abs(raw_item.valor).quantize(TWO_PLACES)
        if not description or amount == 0:
            warnings.append(f"Item {index} skipped: missing description or amount")
            continue

        items.append(RecognizedItem(date=item_date, description=description, amount=amount))

    if not items:
        return RecognitionResult.failed("No usable transactions were recognized in the PDF", warnings=warnings)

    item_total = sum((item.amount for item in items), Decimal("0"))
    total = abs(data.valor_total) if data.valor_total else item_total

    if data.valor_total and abs(total - item_total) > TOTAL_TOLERANCE:
        warnings.append(
            f"Statement total ({format_currency(total)}) differs from the sum of items "
            f"({format_currency(item_total)})"
        )

    statement = RecognizedStatement(
        bank_name=data.empresa or UNIDENTIFIED_BANK,
        total_amount=total,
        confidence=confidence,
        issued_date=parse_flexible_date(data.data_emissao) if data.data_emissao else None,
        due_date=parse_flexible_date(data.data_vencimento) if data.data_vencimento else None,
        currency=data.moeda or DEFAULT_CURRENCY,
        items=items,
        raw_text=response.raw_text,
    )

    return RecognitionResult(success=True, data=statement, warnings=warnings)
