"""
Generic collection repository

Every write goes through the same steps: normalize the payload, resolve the
tenant scope, check per-tenant uniqueness, stamp timestamps. Collections only
differ by their CollectionConfig.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select
import structlog

from tinbr.core.config import get_settings
from tinbr.core.errors import (
    NotFoundError,
    ReadOnlyCollectionError,
    StorageError,
    TinbrError,
    ValidationError,
    WeakPasswordError,
)
from tinbr.core.normalizer import canonical_key, normalize_payload
from tinbr.core.security import hash_password, validate_strength
from tinbr.core.tenancy import TenantScope, clean_tenant_id, require_tenant
from tinbr.models.document import Document, utc_now
from tinbr.services.collections import CollectionConfig
from tinbr.services.uniqueness import (
    check_unique,
    delete_unique_keys,
    is_empty,
    sync_unique_keys,
)

logger = structlog.get_logger(__name__)
settings = get_settings()

ASCENDING = 1
DESCENDING = -1

# Fields clients can never write directly
PROTECTED_FIELDS = ("_id", settings.TENANT_FIELD, "createdAt", "updatedAt")

COLUMN_FIELDS = {
    "_id": Document.id,
    "createdAt": Document.created_at,
    "updatedAt": Document.updated_at,
    settings.TENANT_FIELD: Document.cliente_id,
}


def get_path(data: Mapping[str, Any], path: str) -> Any:
    value: Any = data
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def set_path(data: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    target = data
    for part in parts[:-1]:
        target = target[part]
    target[parts[-1]] = value


@contextmanager
def storage_errors(session: Session, action: str, collection: str):
    """Wrap unexpected storage failures in StorageError, without retrying"""
    try:
        yield
    except TinbrError:
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Storage failure during {action}", collection=collection, error=str(e))
        raise StorageError() from e


class CollectionRepository:
    """Scoped CRUD over one collection"""

    def __init__(self, session: Session, config: CollectionConfig):
        self.session = session
        self.config = config

    # ------------------------------------------------------------------
    # Scoping and query helpers
    # ------------------------------------------------------------------

    def scope(self, tenant_id: Optional[str], *, read: bool = False) -> TenantScope:
        return require_tenant(self.config, tenant_id, read=read)

    def _filter_clause(self, field: str, value: Any):
        if field in COLUMN_FIELDS:
            return COLUMN_FIELDS[field] == value
        element = Document.data[field]
        if value is None:
            return element.as_string().is_(None)
        if isinstance(value, bool):
            return element.as_boolean() == value
        if isinstance(value, int):
            return element.as_integer() == value
        if isinstance(value, float):
            return element.as_float() == value
        return element.as_string() == str(value)

    def _sort_clause(self, field: str, direction: int):
        column = COLUMN_FIELDS.get(field)
        if column is None:
            column = Document.data[field].as_string()
        return column.desc() if direction == DESCENDING else column.asc()

    def _scoped_statement(self, scope: TenantScope, filters: Optional[Mapping[str, Any]]):
        statement = scope.apply(select(Document))
        for field, value in self._prepare_filters(filters).items():
            statement = statement.where(self._filter_clause(field, value))
        return statement

    def _prepare_filters(self, filters: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        prepared: Dict[str, Any] = {}
        for key, value in (filters or {}).items():
            field = canonical_key(str(key))
            if field == settings.TENANT_FIELD:
                # Carried by the scope
                continue
            if isinstance(value, str):
                value = value.strip()
            transform = self.config.transforms.get(field)
            prepared[field] = transform(value) if transform else value
        return prepared

    def _get_document(self, scope: TenantScope, document_id: str) -> Document:
        document = self.session.exec(
            scope.apply(select(Document)).where(Document.id == str(document_id))
        ).first()
        if document is None:
            raise NotFoundError(f"{self.config.name} document not found")
        return document

    def _check_writable(self, allow_read_only: bool) -> None:
        if self.config.read_only and not allow_read_only:
            raise ReadOnlyCollectionError(f"{self.config.name} is read-only")

    def _prepare_data(self, payload: Mapping[str, Any]) -> Tuple[Optional[str], Dict[str, Any]]:
        """Normalize a write payload; returns the tenant declared in it and the clean data"""
        data = normalize_payload(payload)
        declared_tenant = clean_tenant_id(data.get(settings.TENANT_FIELD))
        for field in PROTECTED_FIELDS:
            data.pop(field, None)
        for field, transform in self.config.transforms.items():
            if field in data and data[field] is not None:
                data[field] = transform(data[field])
        return declared_tenant, data

    def _hash_password(self, data: Dict[str, Any]) -> None:
        path = self.config.password_field
        if not path:
            return
        password = get_path(data, path)
        if password is None:
            return
        if not validate_strength(password):
            raise WeakPasswordError()
        set_path(data, path, hash_password(password))

    def _commit(self, commit: bool) -> None:
        if commit:
            self.session.commit()
        else:
            self.session.flush()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(
        self,
        tenant_id: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Documents matching ``filters``; at most ``limit`` (default LIST_LIMIT)"""
        scope = self.scope(tenant_id, read=True)
        statement = self._scoped_statement(scope, filters)

        if sort:
            for field, direction in sort:
                statement = statement.order_by(self._sort_clause(canonical_key(field), direction))
        else:
            statement = statement.order_by(Document.created_at.asc(), Document.id.asc())

        statement = statement.limit(settings.LIST_LIMIT if limit is None else limit)

        with storage_errors(self.session, "list", self.config.name):
            documents = self.session.exec(statement).all()
        return [document.to_dict() for document in documents]

    def get_by_id(self, tenant_id: Optional[str], document_id: str) -> Dict[str, Any]:
        scope = self.scope(tenant_id, read=True)
        with storage_errors(self.session, "get", self.config.name):
            document = self._get_document(scope, document_id)
        return document.to_dict()

    def find_one(
        self,
        tenant_id: Optional[str],
        filters: Mapping[str, Any],
    ) -> Optional[Dict[str, Any]]:
        documents = self.list(tenant_id, filters, limit=1)
        return documents[0] if documents else None

    def count(self, tenant_id: Optional[str], filters: Optional[Mapping[str, Any]] = None) -> int:
        scope = self.scope(tenant_id, read=True)
        statement = self._scoped_statement(scope, filters).subquery()
        with storage_errors(self.session, "count", self.config.name):
            return self.session.exec(select(func.count()).select_from(statement)).one()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(
        self,
        tenant_id: Optional[str],
        payload: Mapping[str, Any],
        *,
        commit: bool = True,
        allow_read_only: bool = False,
    ) -> str:
        """Insert a document and return its id"""
        self._check_writable(allow_read_only)
        declared_tenant, data = self._prepare_data(payload)
        scope = self.scope(clean_tenant_id(tenant_id) or declared_tenant)

        for field, value in self.config.defaults.items():
            data.setdefault(field, value)

        missing = [field for field in self.config.required_fields if is_empty(get_path(data, field))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if self.config.required_any and all(
            is_empty(get_path(data, field)) for field in self.config.required_any
        ):
            raise ValidationError(f"One of {', '.join(self.config.required_any)} is required")

        self._hash_password(data)
        check_unique(self.session, self.config, scope.tenant_id, data)

        now = utc_now()
        document = Document(
            collection=self.config.name,
            cliente_id=scope.tenant_id,
            data=data,
            created_at=now,
            updated_at=now,
        )
        document_id = document.id

        with storage_errors(self.session, "create", self.config.name):
            self.session.add(document)
            self.session.flush()
            sync_unique_keys(self.session, self.config, document, data)
            self._commit(commit)

        logger.info(
            "Document created",
            collection=self.config.name,
            cliente_id=scope.tenant_id,
            document_id=document_id,
        )
        return document_id

    def update(
        self,
        tenant_id: Optional[str],
        document_id: str,
        payload: Mapping[str, Any],
        *,
        unset: Iterable[str] = (),
        commit: bool = True,
        allow_read_only: bool = False,
    ) -> Dict[str, Any]:
        """Partial update of a scoped document; returns the updated document"""
        self._check_writable(allow_read_only)
        declared_tenant, data = self._prepare_data(payload)
        scope = self.scope(clean_tenant_id(tenant_id) or declared_tenant)
        unset = [canonical_key(field) for field in unset if field not in PROTECTED_FIELDS]

        with storage_errors(self.session, "update", self.config.name):
            document = self._get_document(scope, document_id)

        self._hash_password(data)
        check_unique(self.session, self.config, document.cliente_id, data, exclude_id=document.id)

        merged = {**(document.data or {}), **data}
        for field in unset:
            merged.pop(field, None)

        with storage_errors(self.session, "update", self.config.name):
            # Reassign so the JSON column is flagged as modified
            document.data = merged
            document.updated_at = utc_now()
            self.session.add(document)
            self.session.flush()
            changed_keys = dict(data)
            changed_keys.update({field: None for field in unset})
            sync_unique_keys(self.session, self.config, document, changed_keys)
            result = document.to_dict()
            self._commit(commit)

        logger.info(
            "Document updated",
            collection=self.config.name,
            cliente_id=scope.tenant_id,
            document_id=document_id,
        )
        return result

    def update_many(
        self,
        tenant_id: Optional[str],
        filters: Mapping[str, Any],
        changes: Mapping[str, Any],
        *,
        unset: Iterable[str] = (),
        commit: bool = True,
    ) -> int:
        """Apply ``changes`` to every scoped match; returns how many documents changed"""
        unset = [canonical_key(field) for field in unset]
        touched = set(changes) | set(unset)
        if touched & set(self.config.unique_fields) or touched & set(PROTECTED_FIELDS):
            raise ValidationError("Bulk updates cannot change unique or protected fields")

        scope = self.scope(tenant_id)
        modified = 0
        now = utc_now()

        with storage_errors(self.session, "update_many", self.config.name):
            documents = self.session.exec(self._scoped_statement(scope, filters)).all()
            for document in documents:
                current = document.data or {}
                merged = {**current, **changes}
                for field in unset:
                    merged.pop(field, None)
                if merged == current:
                    continue
                document.data = merged
                document.updated_at = now
                self.session.add(document)
                modified += 1
            self._commit(commit)

        logger.info(
            "Documents updated",
            collection=self.config.name,
            cliente_id=scope.tenant_id,
            matched=len(documents),
            modified=modified,
        )
        return modified

    def delete(
        self,
        tenant_id: Optional[str],
        document_id: str,
        *,
        commit: bool = True,
        allow_read_only: bool = False,
    ) -> None:
        self._check_writable(allow_read_only)
        scope = self.scope(tenant_id)

        with storage_errors(self.session, "delete", self.config.name):
            document = self._get_document(scope, document_id)
            delete_unique_keys(self.session, document)
            self.session.flush()
            self.session.delete(document)
            self._commit(commit)

        logger.info(
            "Document deleted",
            collection=self.config.name,
            cliente_id=scope.tenant_id,
            document_id=document_id,
        )
