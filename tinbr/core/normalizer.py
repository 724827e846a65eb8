"""
Input field normalization

Clients send the same field under several spellings ("e-mail", "função",
" código "). Payloads are mapped to canonical keys before anything else
touches them.
"""

import re
import unicodedata
from typing import Any, Dict, Mapping

from tinbr.core.config import get_settings

settings = get_settings()

FIELD_ALIASES: Dict[str, str] = {
    "e-mail": "email",
    "E-mail": "email",
    "função": "funcao",
    "responsável": "responsavel",
    "código": "codigo",
    "nível": "nivel",
    "endereço": "endereco",
    "município": "municipio",
    "descrição": "descricao",
    "situação": "situacao",
    "operação": "operacao",
}


def strip_accents(text: str) -> str:
    """Remove diacritics ("função" -> "funcao")"""
    return unicodedata.normalize("NFKD", text).encode("ASCII", "ignore").decode("ASCII")


def canonical_key(key: str) -> str:
    key = key.strip()
    if key in FIELD_ALIASES:
        return FIELD_ALIASES[key]
    return strip_accents(key).strip()


def normalize_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a new mapping with canonical keys and trimmed string values"""
    normalized: Dict[str, Any] = {}
    for key, value in payload.items():
        name = canonical_key(str(key))
        if name == settings.TENANT_FIELD and value is not None:
            value = str(value).strip()
        elif isinstance(value, str):
            value = value.strip()
        elif isinstance(value, Mapping):
            # Sub-documents such as "responsavel" follow the same rules
            value = normalize_payload(value)
        normalized[name] = value
    return normalized


def only_digits(value: Any) -> Any:
    """Keep only the digits of a document number"""
    if value is None:
        return None
    return re.sub(r"\D", "", str(value))


def normalize_email(value: Any) -> Any:
    if value is None:
        return None
    return str(value).strip().lower()
