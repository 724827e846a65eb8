"""
Pydantic schemas for login
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class LoginRequest(BaseModel):
    """Login by email or document number"""
    login: str = Field(..., min_length=1, max_length=255, description="Email or document number")
    senha: str = Field(..., min_length=1, max_length=128)
    cliente_id: Optional[str] = Field(default=None, description="Restrict the login to one tenant")


class LoginResponse(BaseModel):
    success: bool = True
    user: Dict[str, Any]
