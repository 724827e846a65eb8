"""
Unit tests for the owner block / unblock cascade
"""

import pytest
from sqlmodel import Session

from tinbr.core.errors import MissingTenantError, NotFoundError
from tinbr.services.collections import HISTORICO, PROPRIEDADES, PROPRIETARIOS
from tinbr.services.owner_status import block_owner, unblock_owner
from tinbr.services.repository import CollectionRepository


@pytest.fixture
def owners(db: Session):
    return CollectionRepository(db, PROPRIETARIOS)


@pytest.fixture
def properties(db: Session):
    return CollectionRepository(db, PROPRIEDADES)


@pytest.fixture
def history(db: Session):
    return CollectionRepository(db, HISTORICO)


@pytest.fixture
def owner_with_properties(owners, properties):
    """Owner in t1 with three properties, plus a same-id property in t2"""
    owner_id = owners.create("t1", {"nome": "Ana", "documento": "111"})
    for index in range(3):
        properties.create("t1", {"proprietario_id": owner_id, "codigo": f"P{index}"})
    other_owner_id = owners.create("t1", {"nome": "Bia", "documento": "222"})
    properties.create("t1", {"proprietario_id": other_owner_id, "codigo": "P9"})
    properties.create("t2", {"proprietario_id": owner_id, "codigo": "P0"})
    return owner_id


class TestBlock:
    """Test block transition"""

    def test_new_owner_and_properties_are_active(self, owners, properties, owner_with_properties):
        assert owners.get_by_id("t1", owner_with_properties)["status"] == "ativo"
        assert properties.count("t1", {"status": "ativo"}) == 4

    def test_block_cascades_to_properties(self, db, owners, properties, history, owner_with_properties):
        result = block_owner(db, owner_with_properties, "t1", reason="Inadimplente", actor="admin")

        assert result.status == "bloqueado"
        assert result.affected == 3

        owner = owners.get_by_id("t1", owner_with_properties)
        assert owner["status"] == "bloqueado"
        assert owner["motivo_bloqueio"] == "Inadimplente"
        assert owner["bloqueado_por"] == "admin"
        assert owner["bloqueado_em"]

        blocked = properties.list("t1", {"proprietario_id": owner_with_properties})
        assert [item["status"] for item in blocked] == ["bloqueado"] * 3
        assert all(item["motivo_bloqueio"] == "Inadimplente" for item in blocked)

        # Other owners and other tenants are untouched
        assert properties.count("t1", {"status": "ativo"}) == 1
        assert properties.count("t2", {"status": "ativo"}) == 1

        entries = history.list("t1")
        assert len(entries) == 1
        assert entries[0]["acao"] == "bloqueio"
        assert entries[0]["proprietario_id"] == owner_with_properties
        assert entries[0]["propriedades_afetadas"] == 3
        assert entries[0]["motivo"] == "Inadimplente"
        assert entries[0]["usuario"] == "admin"
        assert entries[0]["_id"] == result.history_id

    def test_block_owner_without_properties(self, db, owners, history):
        owner_id = owners.create("t1", {"nome": "Caio", "documento": "333"})

        result = block_owner(db, owner_id, "t1", reason=None, actor="admin")

        assert result.affected == 0
        assert history.list("t1")[0]["propriedades_afetadas"] == 0

    def test_block_in_other_tenant(self, db, owners, history, owner_with_properties):
        with pytest.raises(NotFoundError):
            block_owner(db, owner_with_properties, "t2", reason="x", actor="admin")

        assert owners.get_by_id("t1", owner_with_properties)["status"] == "ativo"
        assert history.list("t2") == []

    def test_block_without_tenant(self, db, owner_with_properties):
        with pytest.raises(MissingTenantError):
            block_owner(db, owner_with_properties, None, reason="x", actor="admin")

    def test_block_is_rolled_back_when_history_fails(self, db, owners, properties, history, owner_with_properties, monkeypatch):
        def failing_history(*args, **kwargs):
            raise RuntimeError("history unavailable")

        monkeypatch.setattr("tinbr.services.owner_status._append_history", failing_history)

        with pytest.raises(RuntimeError):
            block_owner(db, owner_with_properties, "t1", reason="x", actor="admin")

        assert owners.get_by_id("t1", owner_with_properties)["status"] == "ativo"
        assert properties.count("t1", {"status": "bloqueado"}) == 0
        assert history.list("t1") == []


class TestUnblock:
    """Test unblock transition"""

    def test_unblock_restores_owner_and_properties(self, db, owners, properties, history, owner_with_properties):
        block_owner(db, owner_with_properties, "t1", reason="Inadimplente", actor="admin")

        result = unblock_owner(db, owner_with_properties, "t1", actor="gerente")

        assert result.status == "ativo"
        assert result.affected == 3

        owner = owners.get_by_id("t1", owner_with_properties)
        assert owner["status"] == "ativo"
        assert "motivo_bloqueio" not in owner
        assert "bloqueado_por" not in owner
        assert owner["desbloqueado_por"] == "gerente"

        restored = properties.list("t1", {"proprietario_id": owner_with_properties})
        assert [item["status"] for item in restored] == ["ativo"] * 3
        assert all("motivo_bloqueio" not in item for item in restored)

        entries = history.list("t1", sort=[("createdAt", 1)])
        assert [entry["acao"] for entry in entries] == ["bloqueio", "desbloqueio"]
        assert entries[1]["propriedades_afetadas"] == 3
        assert entries[1]["usuario"] == "gerente"

    def test_unblock_active_owner_affects_nothing(self, db, owner_with_properties):
        result = unblock_owner(db, owner_with_properties, "t1", actor="admin")

        assert result.affected == 0

    def test_unblock_unknown_owner(self, db):
        with pytest.raises(NotFoundError):
            unblock_owner(db, "missing", "t1", actor="admin")
