"""
Exchange-rate quote endpoint
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlmodel import Session
import structlog

from tinbr.core.database import get_session
from tinbr.schemas.quote import QuoteCreate
from tinbr.services.quotes import store_quote

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_quote(
    quote_data: QuoteCreate,
    session: Session = Depends(get_session),
):
    """Store the quote of a date, once"""
    quote_id = store_quote(session, quote_data.data, quote_data.valor)
    if quote_id is None:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"id": None, "inserted": False},
        )
    return {"id": quote_id, "inserted": True}
