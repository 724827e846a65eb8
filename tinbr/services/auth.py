"""
Login resolution

Unknown login and wrong password fail with the same error and message so
the endpoint cannot be used to enumerate users.
"""

from typing import Any, Dict, Optional

from sqlmodel import Session, select
import structlog

from tinbr.core.errors import InvalidCredentialsError
from tinbr.core.security import dummy_hash, login_lookup, verify_password
from tinbr.core.tenancy import TenantScope, clean_tenant_id
from tinbr.models.document import Document
from tinbr.services.collections import USERS

logger = structlog.get_logger(__name__)


def authenticate(
    session: Session,
    login: str,
    password: str,
    tenant_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Return the user matching ``login`` and ``password``, without its password hash"""
    field, value = login_lookup(login)
    if not value or not password:
        raise InvalidCredentialsError()

    # The same login may exist in several tenants unless the caller names one
    scope = TenantScope(collection=USERS.name, tenant_id=clean_tenant_id(tenant_id))
    candidates = session.exec(
        scope.apply(select(Document))
        .where(Document.data[field].as_string() == value)
        .order_by(Document.created_at.asc())
    ).all()

    if not candidates:
        verify_password(password, dummy_hash())
        logger.info("Login failed", field=field)
        raise InvalidCredentialsError()

    for user in candidates:
        if verify_password(password, user.data.get(USERS.password_field)):
            logger.info("User logged in", user_id=user.id, cliente_id=user.cliente_id)
            result = user.to_dict()
            result.pop(USERS.password_field, None)
            return result

    logger.info("Login failed", field=field)
    raise InvalidCredentialsError()
