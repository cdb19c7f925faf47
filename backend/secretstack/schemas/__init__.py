"""
Request schemas and view projections.
"""
from secretstack.schemas.auth import CredentialsForm, SecretForm
from secretstack.schemas.user import UserSecrets

__all__ = [
    "CredentialsForm",
    "SecretForm",
    "UserSecrets",
]
