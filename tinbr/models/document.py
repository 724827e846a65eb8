"""
Schema-less document model

Every collection (users, clientes, proprietarios, ...) is stored in the same
table. User fields live in the JSON ``data`` column; the tenant identifier is
a real column so that every scoped query can filter on it.
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON, Index
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import uuid


def utc_now() -> datetime:
    """Timezone-aware current time; naive datetimes are rejected on bind"""
    return datetime.now(timezone.utc)


def new_document_id() -> str:
    """Opaque string identifier"""
    return uuid.uuid4().hex


class Document(SQLModel, table=True):
    """A document of any collection"""

    __tablename__ = "documents"
    __table_args__ = (
        Index("idx_documents_collection_cliente", "collection", "cliente_id"),
    )

    id: str = Field(default_factory=new_document_id, primary_key=True, max_length=32)
    collection: str = Field(index=True, max_length=64)
    cliente_id: Optional[str] = Field(
        default=None,
        index=True,
        max_length=64,
        description="Owning tenant; null for collections that are not tenant-scoped",
    )
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Render the document the way clients see it"""
        result: Dict[str, Any] = {"_id": self.id}
        if self.cliente_id is not None:
            result["cliente_id"] = self.cliente_id
        result.update(self.data or {})
        result["createdAt"] = self.created_at
        result["updatedAt"] = self.updated_at
        return result
