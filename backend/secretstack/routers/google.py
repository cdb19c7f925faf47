"""
Google sign-in routes.
"""
from typing import Optional

from fastapi import APIRouter, Request

from secretstack.core.exceptions import ExternalIdentityFailure
from secretstack.dependencies.auth import Context
from secretstack.views import redirect_to

router = APIRouter(prefix="/auth/google", tags=["Google"])


@router.get("", summary="Start Google sign-in")
async def google_login(ctx: Context):
    """Redirect to Google requesting the profile scope."""
    try:
        url = await ctx.identity.authorization_url()
    except ExternalIdentityFailure:
        return redirect_to("/login")
    return redirect_to(url)


@router.get("/secrets", summary="Google OAuth2 callback")
async def google_callback(
    request: Request,
    ctx: Context,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
):
    """
    Exchange the authorization code, bind the user to a new session and
    continue to /secrets. Failures go back to /login without detail.
    """
    try:
        user = await ctx.identity.complete(code, state, error)
    except ExternalIdentityFailure:
        return redirect_to("/login")

    await ctx.sessions.destroy(ctx.sessions.token_from(request))
    token = await ctx.sessions.create(user)
    response = redirect_to("/secrets")
    ctx.sessions.set_cookie(response, request, token)
    return response
