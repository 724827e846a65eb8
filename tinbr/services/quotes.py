"""
Exchange-rate quote storage

Quotes are fetched by an external job; this module is the sink it writes
to. At most one quote is kept per date.
"""

from datetime import date
from typing import Optional, Union

from sqlmodel import Session
import structlog

from tinbr.services.collections import COTACOES
from tinbr.models.document import utc_now
from tinbr.services.repository import CollectionRepository

logger = structlog.get_logger(__name__)


def store_quote(
    session: Session,
    quote_date: Union[date, str],
    rate: float,
) -> Optional[str]:
    """Insert the quote of ``quote_date`` unless one is already stored.

    Returns the new document id, or None when the date already has a quote.
    The check is not backed by a unique index.
    """
    if isinstance(quote_date, date):
        quote_date = quote_date.isoformat()

    quotes = CollectionRepository(session, COTACOES)
    if quotes.find_one(None, {"data": quote_date}) is not None:
        logger.info("Quote already stored", data=quote_date)
        return None

    quote_id = quotes.create(
        None,
        {
            "data": quote_date,
            "valor": float(rate),
            "criadoEm": utc_now().isoformat(),
        },
        allow_read_only=True,
    )
    logger.info("Quote stored", data=quote_date, valor=rate, quote_id=quote_id)
    return quote_id
