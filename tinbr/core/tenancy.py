"""
Tenant scoping for multi-tenant isolation

Repositories never build a query by hand: they start from a TenantScope,
which is only handed out by ``require_tenant``. A tenant-scoped collection
therefore cannot be queried without its ``cliente_id`` predicate.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from fastapi import Request
import structlog

from tinbr.core.config import get_settings
from tinbr.core.errors import MissingTenantError
from tinbr.models.document import Document

if TYPE_CHECKING:
    from tinbr.services.collections import CollectionConfig

logger = structlog.get_logger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class TenantScope:
    """Tenant predicate applied to every statement of a repository"""

    collection: str
    tenant_id: Optional[str] = None

    def apply(self, statement):
        statement = statement.where(Document.collection == self.collection)
        if self.tenant_id is not None:
            statement = statement.where(Document.cliente_id == self.tenant_id)
        return statement


def clean_tenant_id(tenant_id) -> Optional[str]:
    if tenant_id is None:
        return None
    tenant_id = str(tenant_id).strip()
    return tenant_id or None


def require_tenant(
    config: "CollectionConfig",
    tenant_id,
    *,
    read: bool = False,
) -> TenantScope:
    """Build the scope of an operation, failing when the tenant is missing"""
    if not config.tenant_scoped:
        return TenantScope(collection=config.name)

    tenant_id = clean_tenant_id(tenant_id)
    if tenant_id is None:
        if read and config.shared_read:
            return TenantScope(collection=config.name)
        logger.warning("Missing tenant", collection=config.name)
        raise MissingTenantError(f"{settings.TENANT_FIELD} is required for {config.name}")

    return TenantScope(collection=config.name, tenant_id=tenant_id)


def resolve_tenant_id(request: Request) -> Optional[str]:
    """Tenant declared by the request: query string first, then header"""
    tenant_id = request.query_params.get(settings.TENANT_FIELD)
    if not tenant_id:
        tenant_id = request.headers.get(settings.TENANT_HEADER)
    return clean_tenant_id(tenant_id)
