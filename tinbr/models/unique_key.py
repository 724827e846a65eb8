"""
Unique key index

One row per (document, unique field). The unique constraint is the
storage-level guarantee behind the per-tenant uniqueness checks: two writes
racing past the pre-check still cannot both commit.
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from typing import Optional

UNIQUE_KEY_CONSTRAINT = "uq_unique_keys_value"

# Scope used for collections whose uniqueness is global (not per tenant)
GLOBAL_SCOPE = ""

MAX_KEY_LENGTH = 255


class UniqueKey(SQLModel, table=True):
    """Value of a unique field, scoped to a collection and a tenant"""

    __tablename__ = "unique_keys"
    __table_args__ = (
        UniqueConstraint("collection", "scope", "field", "value", name=UNIQUE_KEY_CONSTRAINT),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    document_id: str = Field(foreign_key="documents.id", index=True, max_length=32)
    collection: str = Field(max_length=64)
    scope: str = Field(default=GLOBAL_SCOPE, max_length=64)
    field: str = Field(max_length=64)
    value: str = Field(max_length=MAX_KEY_LENGTH)
