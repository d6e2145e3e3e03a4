"""Turn a successful parse into an invoice draft for a card and competency."""
import logging
from datetime import date
from typing import Optional

from ..exceptions import StatementIngestError
from ..models import CardDates, CalculatedDates, InvoiceCompetency, InvoiceDraft, ParseResult
from .dates import calculate_invoice_dates, validate_competency

logger = logging.getLogger(__name__)


def _statement_dates(result: ParseResult) -> Optional[CalculatedDates]:
    """Use the statement's own closing/due dates when both were extracted."""
    metadata = result.metadata
    if not metadata.closing_date or not metadata.due_date:
        return None

    try:
        closing = date.fromisoformat(metadata.closing_date[:10])
        due = date.fromisoformat(metadata.due_date[:10])
    except ValueError:
        logger.warning(
            f"Ignoring unparseable statement dates: {metadata.closing_date!r}, {metadata.due_date!r}"
        )
        return None

    return CalculatedDates(
        closing_date=closing,
        due_date=due,
        closing_date_iso=closing.isoformat(),
        due_date_iso=due.isoformat(),
    )


def build_invoice_draft(
    result: ParseResult,
    card_id: str,
    card_dates: CardDates,
    competency: InvoiceCompetency,
    prefer_statement_dates: bool = True
) -> InvoiceDraft:
    """
    Build the invoice the repository layer will persist.

    Args:
        result: Successful parse result
        card_id: Target card identifier
        card_dates: The card's closing/due days
        competency: Target invoice month and year
        prefer_statement_dates: Use dates printed on the statement when available

    Returns:
        InvoiceDraft with dates, items and total

    Raises:
        StatementIngestError: If the parse failed or returned no transactions
        InvoiceDateError: If the competency or card days are out of range
    """
    if not result.success or not result.transactions:
        raise StatementIngestError("Cannot build an invoice from a failed or empty parse")

    validate_competency(competency)

    dates = calculate_invoice_dates(card_dates, competency)
    from_statement = False

    if prefer_statement_dates:
        statement_dates = _statement_dates(result)
        if statement_dates:
            dates = statement_dates
            from_statement = True

    draft = InvoiceDraft(
        card_id=card_id,
        competency=competency,
        dates=dates,
        items=list(result.transactions),
        dates_from_statement=from_statement,
    )

    logger.info(
        f"Invoice draft for card {card_id} {competency.month:02d}/{competency.year}: "
        f"{len(draft.items)} items, total {draft.total_amount}, "
        f"closing {dates.closing_date_iso}, due {dates.due_date_iso}"
    )
    return draft
