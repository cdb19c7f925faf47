"""
Authentication dependencies for route protection.
"""
from typing import Annotated, Optional

from fastapi import Depends, Request

from secretstack.context import AppContext
from secretstack.core.exceptions import Unauthenticated
from secretstack.models.user import User


def get_context(request: Request) -> AppContext:
    """Dependency returning the AppContext built at startup."""
    return request.app.state.context


Context = Annotated[AppContext, Depends(get_context)]


async def get_optional_user(request: Request, ctx: Context) -> Optional[User]:
    """
    Dependency resolving the session cookie to a User, or None.

    Never raises for a missing or stale session.
    """
    token = ctx.sessions.token_from(request)
    return await ctx.sessions.resolve(token)


async def get_current_user(
    user: Annotated[Optional[User], Depends(get_optional_user)],
) -> User:
    """
    Dependency requiring an authenticated session.

    Raises:
        Unauthenticated: Turned into a redirect to /login by the app handler
    """
    if user is None:
        raise Unauthenticated("Login required")
    return user


# Type aliases for cleaner route signatures
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]
CurrentUser = Annotated[User, Depends(get_current_user)]
