"""
Pydantic schemas for exchange-rate quotes
"""

from pydantic import BaseModel, Field
from datetime import date


class QuoteCreate(BaseModel):
    data: date = Field(..., description="Quote date")
    valor: float = Field(..., gt=0, description="Exchange rate")
