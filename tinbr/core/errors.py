"""
Domain errors

Every error carries a machine-readable code and the HTTP status the API
layer answers with. Messages are safe to return to clients.
"""

from typing import Any, Dict, Optional
from fastapi import status


class TinbrError(Exception):
    """Base class for domain errors"""

    code = "ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unexpected error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


class MissingTenantError(TinbrError):
    code = "MISSING_TENANT"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "cliente_id is required"


class ValidationError(TinbrError):
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid payload"


class WeakPasswordError(TinbrError):
    code = "WEAK_PASSWORD"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = (
        "Password must have at least 8 characters, including uppercase, "
        "lowercase, digit and special character"
    )


class DuplicateFieldError(TinbrError):
    code = "DUPLICATE_FIELD"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"{field} already registered")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        return data


class NotFoundError(TinbrError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Document not found"


class InvalidCredentialsError(TinbrError):
    code = "INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid login or password"


class ReadOnlyCollectionError(TinbrError):
    code = "READ_ONLY"
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    default_message = "Collection is read-only"


class StorageError(TinbrError):
    code = "STORAGE_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Storage operation failed"
