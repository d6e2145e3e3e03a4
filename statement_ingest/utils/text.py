"""Text helpers shared by the statement parsers."""
import re
import unicodedata
from typing import Optional

INSTALLMENT_PATTERN = re.compile(r'(?<![\d/])(\d{1,2})\s*/\s*(\d{1,2})(?![\d/])')


def strip_accents(text: str) -> str:
    """Remove diacritics, e.g. "Farmácia" -> "Farmacia"."""
    normalized = unicodedata.normalize('NFKD', text)
    return ''.join(ch for ch in normalized if not unicodedata.combining(ch))


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return re.sub(r'\s+', ' ', text).strip()


def detect_installment(description: str) -> Optional[str]:
    """
    Detect an installment marker such as "PARC 02/12".

    Args:
        description: Transaction description

    Returns:
        "n/m" when 1 <= n <= m, otherwise None
    """
    if not description:
        return None

    for match in INSTALLMENT_PATTERN.finditer(description):
        current, total = int(match.group(1)), int(match.group(2))
        if 1 <= current <= total and total > 1:
            return f"{current}/{total}"

    return None
