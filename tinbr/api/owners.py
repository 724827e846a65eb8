"""
Owner block / unblock endpoints
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import Optional
import structlog

from tinbr.core.database import get_session
from tinbr.core.tenancy import resolve_tenant_id
from tinbr.schemas.owner import BlockRequest, CascadeResponse, UnblockRequest
from tinbr.services.owner_status import block_owner, unblock_owner

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/{owner_id}/bloquear", response_model=CascadeResponse)
def block(
    owner_id: str,
    block_data: BlockRequest,
    tenant_id: Optional[str] = Depends(resolve_tenant_id),
    session: Session = Depends(get_session),
):
    """Block an owner and all of its properties"""
    result = block_owner(
        session,
        owner_id,
        tenant_id or block_data.cliente_id,
        reason=block_data.motivo,
        actor=block_data.usuario,
    )
    return result.to_dict()


@router.post("/{owner_id}/desbloquear", response_model=CascadeResponse)
def unblock(
    owner_id: str,
    unblock_data: UnblockRequest,
    tenant_id: Optional[str] = Depends(resolve_tenant_id),
    session: Session = Depends(get_session),
):
    """Reactivate an owner and all of its properties"""
    result = unblock_owner(
        session,
        owner_id,
        tenant_id or unblock_data.cliente_id,
        actor=unblock_data.usuario,
    )
    return result.to_dict()
