"""
Unit tests for the plaintext password conversion job
"""

from sqlmodel import Session, select

from tinbr.core.security import hash_password, verify_password
from tinbr.models.document import Document
from tinbr.scripts.convert_passwords import convert_plaintext_passwords


def add_user(db: Session, tenant_id: str, senha: str) -> Document:
    user = Document(collection="users", cliente_id=tenant_id, data={"nome": "x", "senha": senha})
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def test_convert_only_targets(db):
    first = add_user(db, "t1", "123456")
    second = add_user(db, "t1", "outra")

    converted = convert_plaintext_passwords(db, ["123456", "senhaboa"])

    assert converted == 1
    db.refresh(first)
    db.refresh(second)
    assert verify_password("123456", first.data["senha"])
    assert second.data["senha"] == "outra"


def test_convert_all_plaintext(db):
    hashed = hash_password("Abcdef1!")
    plain = add_user(db, "t1", "senhaboa")
    already = add_user(db, "t2", hashed)

    converted = convert_plaintext_passwords(db)

    assert converted == 1
    db.refresh(plain)
    db.refresh(already)
    assert verify_password("senhaboa", plain.data["senha"])
    assert already.data["senha"] == hashed


def test_other_collections_are_untouched(db):
    owner = Document(collection="proprietarios", cliente_id="t1", data={"senha": "123456"})
    db.add(owner)
    db.commit()

    assert convert_plaintext_passwords(db, ["123456"]) == 0
    assert db.exec(select(Document)).one().data["senha"] == "123456"
