"""
Per-collection configuration

Route handlers and repositories are driven entirely by these entries: a
collection name, whether it is tenant-scoped, and which fields must be
unique inside a tenant. Unique fields are checked in the order declared.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from tinbr.core.normalizer import normalize_email, only_digits

STATUS_ACTIVE = "ativo"
STATUS_BLOCKED = "bloqueado"


@dataclass(frozen=True)
class CollectionConfig:
    name: str
    tenant_scoped: bool = True
    # Readable across tenants; the tenant id only narrows the listing
    shared_read: bool = False
    unique_fields: Tuple[str, ...] = ()
    required_fields: Tuple[str, ...] = ()
    # At least one of these must be present, e.g. the login keys of a user
    required_any: Tuple[str, ...] = ()
    # Dotted path of a password to validate and hash, e.g. "responsavel.senha"
    password_field: Optional[str] = None
    transforms: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    defaults: Mapping[str, Any] = field(default_factory=dict)
    # Written only by internal services, never through the CRUD routes
    read_only: bool = False


USERS = CollectionConfig(
    name="users",
    unique_fields=("email", "documento"),
    required_fields=("senha",),
    required_any=("email", "documento"),
    password_field="senha",
    transforms={"email": normalize_email, "documento": only_digits},
    defaults={"nivel": 1},
)

CLIENTES = CollectionConfig(
    name="clientes",
    tenant_scoped=False,
    unique_fields=("documento",),
    required_fields=("documento",),
    password_field="responsavel.senha",
    transforms={"documento": only_digits},
)

PROPRIETARIOS = CollectionConfig(
    name="proprietarios",
    unique_fields=("documento",),
    required_fields=("nome", "documento"),
    transforms={"documento": only_digits},
    defaults={"status": STATUS_ACTIVE},
)

PROPRIEDADES = CollectionConfig(
    name="propriedades",
    unique_fields=("codigo",),
    required_fields=("proprietario_id",),
    defaults={"status": STATUS_ACTIVE},
)

OPERACOES = CollectionConfig(
    name="operacoes",
    unique_fields=("codigo", "transacao_id"),
)

MERCADO = CollectionConfig(
    name="mercado",
    shared_read=True,
    unique_fields=("codigo",),
)

TKS = CollectionConfig(
    name="tks",
    unique_fields=("codigo", "token"),
)

REFERENCIA = CollectionConfig(
    name="referencia",
    unique_fields=("codigo",),
)

PLAYERS = CollectionConfig(
    name="players",
    unique_fields=("email", "documento"),
    transforms={"email": normalize_email, "documento": only_digits},
)

HISTORICO = CollectionConfig(
    name="historico",
    read_only=True,
)

COTACOES = CollectionConfig(
    name="cotacoes",
    tenant_scoped=False,
    required_fields=("data", "valor"),
    read_only=True,
)

COLLECTIONS: Dict[str, CollectionConfig] = {
    config.name: config
    for config in (
        USERS,
        CLIENTES,
        PROPRIETARIOS,
        PROPRIEDADES,
        OPERACOES,
        MERCADO,
        TKS,
        REFERENCIA,
        PLAYERS,
        HISTORICO,
        COTACOES,
    )
}
