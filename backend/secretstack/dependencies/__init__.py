"""
Dependencies for dependency injection in routes.
"""
from secretstack.dependencies.auth import (
    Context,
    CurrentUser,
    OptionalUser,
    get_context,
    get_current_user,
    get_optional_user,
)

__all__ = [
    "Context",
    "CurrentUser",
    "OptionalUser",
    "get_context",
    "get_current_user",
    "get_optional_user",
]
