"""
Owner block / unblock with cascade to the owner's properties

A transition updates the owner, fans the new status out to every property
of that owner in the same tenant and appends one audit entry to
``historico``. The three writes share the session transaction and are
committed together.
"""

from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session
import structlog

from tinbr.core.config import get_settings
from tinbr.services.collections import (
    HISTORICO,
    PROPRIEDADES,
    PROPRIETARIOS,
    STATUS_ACTIVE,
    STATUS_BLOCKED,
)
from tinbr.models.document import utc_now
from tinbr.services.repository import CollectionRepository

logger = structlog.get_logger(__name__)
settings = get_settings()

ACTION_BLOCK = "bloqueio"
ACTION_UNBLOCK = "desbloqueio"

BLOCK_METADATA = ("motivo_bloqueio", "bloqueado_por", "bloqueado_em")


@dataclass
class CascadeResult:
    owner_id: str
    status: str
    affected: int
    history_id: str

    def to_dict(self):
        return {
            "proprietario_id": self.owner_id,
            "status": self.status,
            "propriedades_afetadas": self.affected,
            "historico_id": self.history_id,
        }


def _append_history(
    session: Session,
    tenant_id: str,
    owner_id: str,
    action: str,
    reason: Optional[str],
    actor: Optional[str],
    affected: int,
    when: str,
) -> str:
    history = CollectionRepository(session, HISTORICO)
    return history.create(
        tenant_id,
        {
            "proprietario_id": owner_id,
            "acao": action,
            "motivo": reason,
            "usuario": actor,
            "data": when,
            "propriedades_afetadas": affected,
        },
        commit=False,
        allow_read_only=True,
    )


def block_owner(
    session: Session,
    owner_id: str,
    tenant_id: Optional[str],
    reason: Optional[str],
    actor: Optional[str],
) -> CascadeResult:
    """Block an owner and every property it owns in the tenant"""
    owners = CollectionRepository(session, PROPRIETARIOS)
    properties = CollectionRepository(session, PROPRIEDADES)
    now = utc_now().isoformat()

    try:
        owner = owners.update(
            tenant_id,
            owner_id,
            {
                "status": STATUS_BLOCKED,
                "motivo_bloqueio": reason,
                "bloqueado_por": actor,
                "bloqueado_em": now,
            },
            commit=False,
        )
        scoped_tenant = owner[settings.TENANT_FIELD]
        affected = properties.update_many(
            scoped_tenant,
            {"proprietario_id": owner["_id"]},
            {"status": STATUS_BLOCKED, "motivo_bloqueio": reason},
            commit=False,
        )
        history_id = _append_history(
            session, scoped_tenant, owner["_id"], ACTION_BLOCK, reason, actor, affected, now
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        "Owner blocked",
        proprietario_id=owner_id,
        cliente_id=scoped_tenant,
        propriedades_afetadas=affected,
    )
    return CascadeResult(owner_id=owner["_id"], status=STATUS_BLOCKED, affected=affected, history_id=history_id)


def unblock_owner(
    session: Session,
    owner_id: str,
    tenant_id: Optional[str],
    actor: Optional[str],
) -> CascadeResult:
    """Reactivate an owner and every property it owns in the tenant"""
    owners = CollectionRepository(session, PROPRIETARIOS)
    properties = CollectionRepository(session, PROPRIEDADES)
    now = utc_now().isoformat()

    try:
        owner = owners.update(
            tenant_id,
            owner_id,
            {
                "status": STATUS_ACTIVE,
                "desbloqueado_por": actor,
                "desbloqueado_em": now,
            },
            unset=BLOCK_METADATA,
            commit=False,
        )
        scoped_tenant = owner[settings.TENANT_FIELD]
        affected = properties.update_many(
            scoped_tenant,
            {"proprietario_id": owner["_id"]},
            {"status": STATUS_ACTIVE},
            unset=("motivo_bloqueio",),
            commit=False,
        )
        history_id = _append_history(
            session, scoped_tenant, owner["_id"], ACTION_UNBLOCK, None, actor, affected, now
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        "Owner unblocked",
        proprietario_id=owner_id,
        cliente_id=scoped_tenant,
        propriedades_afetadas=affected,
    )
    return CascadeResult(owner_id=owner["_id"], status=STATUS_ACTIVE, affected=affected, history_id=history_id)
