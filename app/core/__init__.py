"""Core utilities and security modules."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.core.security import (
    create_access_token,
    create_token_for_user,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
    "create_access_token",
    "create_token_for_user",
    "verify_token",
]
