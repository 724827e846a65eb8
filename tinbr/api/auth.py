"""
Login endpoint
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session
import structlog

from tinbr.core.database import get_session
from tinbr.schemas.auth import LoginRequest, LoginResponse
from tinbr.services.auth import authenticate

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login_user(
    login_data: LoginRequest,
    session: Session = Depends(get_session),
):
    """Login by email or document number"""
    user = authenticate(
        session,
        login_data.login,
        login_data.senha,
        tenant_id=login_data.cliente_id,
    )
    return LoginResponse(success=True, user=user)
