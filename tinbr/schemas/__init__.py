"""
Schemas for API responses and requests
"""

from tinbr.schemas.auth import LoginRequest, LoginResponse
from tinbr.schemas.owner import BlockRequest, UnblockRequest, CascadeResponse
from tinbr.schemas.quote import QuoteCreate

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "BlockRequest",
    "UnblockRequest",
    "CascadeResponse",
    "QuoteCreate",
]
