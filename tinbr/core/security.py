"""
Password hashing and credential helpers
"""

import re
from functools import lru_cache
from typing import Optional, Tuple

from passlib.context import CryptContext

from tinbr.core.config import get_settings
from tinbr.core.normalizer import normalize_email, only_digits

settings = get_settings()
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

_LOWER = re.compile(r"[a-z]")
_UPPER = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"\d")
_SPECIAL = re.compile(r"[^A-Za-z0-9]")


def validate_strength(password: Optional[str]) -> bool:
    """At least 8 characters with lowercase, uppercase, digit and special character"""
    if not isinstance(password, str) or len(password) < 8:
        return False
    return all(
        pattern.search(password)
        for pattern in (_LOWER, _UPPER, _DIGIT, _SPECIAL)
    )


def hash_password(password: str) -> str:
    """Salted bcrypt hash, a fresh salt on every call"""
    return pwd_context.hash(password)


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not password or not hashed:
        return False
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        # Stored value is not a recognizable hash
        return False


def is_password_hash(value: Optional[str]) -> bool:
    if not isinstance(value, str) or not value:
        return False
    return pwd_context.identify(value) is not None


@lru_cache()
def dummy_hash() -> str:
    """Hash verified against when no user matches, so both failures cost the same"""
    return pwd_context.hash("tinbr-dummy-password")


def login_lookup(login: str) -> Tuple[str, str]:
    """Map a login string to the user field it identifies"""
    login = (login or "").strip()
    if "@" in login:
        return "email", normalize_email(login)
    return "documento", only_digits(login)
