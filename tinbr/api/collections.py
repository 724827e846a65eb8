"""
Generic CRUD endpoints, one router per configured collection
"""

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlmodel import Session
from typing import Any, Dict, List, Optional, Tuple
import structlog

from tinbr.core.config import get_settings
from tinbr.core.database import get_session
from tinbr.core.tenancy import resolve_tenant_id
from tinbr.services.collections import CollectionConfig
from tinbr.services.repository import ASCENDING, DESCENDING, CollectionRepository

logger = structlog.get_logger(__name__)
settings = get_settings()

RESERVED_PARAMS = {"sort", "limit", settings.TENANT_FIELD}


def parse_sort(sort: Optional[str]) -> List[Tuple[str, int]]:
    """Parse "nome,-createdAt" into [("nome", 1), ("createdAt", -1)]"""
    if not sort:
        return []
    parsed = []
    for item in sort.split(","):
        item = item.strip()
        if not item:
            continue
        if item.startswith("-"):
            parsed.append((item[1:].strip(), DESCENDING))
        else:
            parsed.append((item.lstrip("+").strip(), ASCENDING))
    return parsed


def public_view(config: CollectionConfig, document: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``document`` without its password hash"""
    if not config.password_field:
        return document
    parts = config.password_field.split(".")
    result = dict(document)
    target = result
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            return result
        target[part] = dict(target[part])
        target = target[part]
    target.pop(parts[-1], None)
    return result


def build_collection_router(config: CollectionConfig) -> APIRouter:
    """Router exposing list/get (and create/update/delete unless read-only)"""
    router = APIRouter()

    @router.get("", response_model=List[Dict[str, Any]])
    def list_documents(
        request: Request,
        sort: Optional[str] = Query(default=None, description="Comma separated fields, '-' for descending"),
        limit: Optional[int] = Query(default=None, ge=1),
        tenant_id: Optional[str] = Depends(resolve_tenant_id),
        session: Session = Depends(get_session),
    ):
        filters = {
            key: value
            for key, value in request.query_params.items()
            if key not in RESERVED_PARAMS
        }
        repository = CollectionRepository(session, config)
        documents = repository.list(tenant_id, filters, parse_sort(sort), limit)
        return [public_view(config, document) for document in documents]

    @router.get("/{document_id}", response_model=Dict[str, Any])
    def get_document(
        document_id: str,
        tenant_id: Optional[str] = Depends(resolve_tenant_id),
        session: Session = Depends(get_session),
    ):
        repository = CollectionRepository(session, config)
        return public_view(config, repository.get_by_id(tenant_id, document_id))

    if config.read_only:
        return router

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_document(
        payload: Dict[str, Any] = Body(...),
        tenant_id: Optional[str] = Depends(resolve_tenant_id),
        session: Session = Depends(get_session),
    ):
        repository = CollectionRepository(session, config)
        document_id = repository.create(tenant_id, payload)
        return {"id": document_id}

    @router.put("/{document_id}", response_model=Dict[str, Any])
    def update_document(
        document_id: str,
        payload: Dict[str, Any] = Body(...),
        tenant_id: Optional[str] = Depends(resolve_tenant_id),
        session: Session = Depends(get_session),
    ):
        repository = CollectionRepository(session, config)
        document = repository.update(tenant_id, document_id, payload)
        return public_view(config, document)

    @router.delete("/{document_id}")
    def delete_document(
        document_id: str,
        tenant_id: Optional[str] = Depends(resolve_tenant_id),
        session: Session = Depends(get_session),
    ):
        repository = CollectionRepository(session, config)
        repository.delete(tenant_id, document_id)
        return {"id": document_id, "deleted": True}

    return router
