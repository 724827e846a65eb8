"""
Pydantic schemas for owner block / unblock
"""

from pydantic import BaseModel, Field
from typing import Optional


class BlockRequest(BaseModel):
    motivo: Optional[str] = Field(default=None, max_length=1000, description="Reason for the block")
    usuario: Optional[str] = Field(default=None, max_length=255, description="Who is blocking")
    cliente_id: Optional[str] = None


class UnblockRequest(BaseModel):
    usuario: Optional[str] = Field(default=None, max_length=255, description="Who is unblocking")
    cliente_id: Optional[str] = None


class CascadeResponse(BaseModel):
    proprietario_id: str
    status: str
    propriedades_afetadas: int
    historico_id: str
