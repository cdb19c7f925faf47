"""
Core module - Security, errors and logging utilities.
"""
from secretstack.core.exceptions import (
    DuplicateUsername,
    ExternalIdentityFailure,
    InvalidCredentials,
    InvalidInput,
    SecretStackError,
    StoreUnavailable,
    Unauthenticated,
)
from secretstack.core.security import (
    hash_password,
    verify_password,
    password_needs_rehash,
)

__all__ = [
    "SecretStackError",
    "InvalidInput",
    "DuplicateUsername",
    "InvalidCredentials",
    "Unauthenticated",
    "ExternalIdentityFailure",
    "StoreUnavailable",
    "hash_password",
    "verify_password",
    "password_needs_rehash",
]
