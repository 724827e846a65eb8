"""
Per-tenant uniqueness of document fields
"""

import hashlib
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
import structlog

from tinbr.core.errors import DuplicateFieldError
from tinbr.models.document import Document
from tinbr.models.unique_key import GLOBAL_SCOPE, MAX_KEY_LENGTH, UniqueKey
from tinbr.services.collections import CollectionConfig

logger = structlog.get_logger(__name__)

DIGEST_PREFIX = "sha256:"


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def key_value(value: Any) -> str:
    """Stored form of a unique value; long values are replaced by their digest"""
    value = str(value).strip()
    if len(value) > MAX_KEY_LENGTH or value.startswith(DIGEST_PREFIX):
        return DIGEST_PREFIX + hashlib.sha256(value.encode("utf-8")).hexdigest()
    return value


def key_scope(config: CollectionConfig, tenant_id: Optional[str]) -> str:
    """Tenant id for per-tenant uniqueness, the global scope otherwise"""
    if config.tenant_scoped and tenant_id:
        return tenant_id
    return GLOBAL_SCOPE


def check_unique(
    session: Session,
    config: CollectionConfig,
    tenant_id: Optional[str],
    candidates: Mapping[str, Any],
    exclude_id: Optional[str] = None,
) -> None:
    """Raise DuplicateFieldError for the first unique field already taken.

    Fields are checked in the order the collection declares them; empty
    values are never considered duplicates.
    """
    scope = key_scope(config, tenant_id)
    for field in config.unique_fields:
        value = candidates.get(field)
        if is_empty(value):
            continue

        statement = select(UniqueKey).where(
            UniqueKey.collection == config.name,
            UniqueKey.scope == scope,
            UniqueKey.field == field,
            UniqueKey.value == key_value(value),
        )
        if exclude_id is not None:
            statement = statement.where(UniqueKey.document_id != exclude_id)

        if session.exec(statement).first() is not None:
            logger.info("Duplicate field", collection=config.name, field=field, scope=scope)
            raise DuplicateFieldError(field)


def sync_unique_keys(
    session: Session,
    config: CollectionConfig,
    document: Document,
    fields: Mapping[str, Any],
) -> None:
    """Write the unique key rows of the fields present in ``fields``.

    Each key is flushed on its own so that a violation of the storage
    unique index names the field that caused it.
    """
    scope = key_scope(config, document.cliente_id)
    for field in config.unique_fields:
        if field not in fields:
            continue

        existing = session.exec(
            select(UniqueKey).where(
                UniqueKey.document_id == document.id,
                UniqueKey.field == field,
            )
        ).first()
        value = fields[field]

        if is_empty(value):
            if existing is not None:
                session.delete(existing)
            continue

        if existing is not None:
            existing.value = key_value(value)
            session.add(existing)
        else:
            session.add(UniqueKey(
                document_id=document.id,
                collection=config.name,
                scope=scope,
                field=field,
                value=key_value(value),
            ))

        try:
            session.flush()
        except IntegrityError as e:
            session.rollback()
            logger.warning(
                "Unique index rejected write",
                collection=config.name,
                field=field,
                error=str(e.orig),
            )
            raise DuplicateFieldError(field) from e


def delete_unique_keys(session: Session, document: Document) -> None:
    keys = session.exec(select(UniqueKey).where(UniqueKey.document_id == document.id)).all()
    for key in keys:
        session.delete(key)
