"""
Local account routes: registration, login and logout.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from secretstack.core.exceptions import DuplicateUsername, InvalidCredentials, InvalidInput
from secretstack.dependencies.auth import Context, OptionalUser
from secretstack.schemas.auth import CredentialsForm
from secretstack.views import redirect_to

router = APIRouter(tags=["Authentication"])

Credentials = Annotated[CredentialsForm, Depends(CredentialsForm.as_form)]


@router.get("/register", summary="Registration form")
async def register_form(request: Request, ctx: Context, user: OptionalUser):
    """Render the registration form, or skip it for a signed-in browser."""
    if user is not None:
        return redirect_to("/secrets")
    return ctx.views.render(request, "register")


@router.post("/register", summary="Create a local account")
async def register(request: Request, ctx: Context, form: Credentials):
    """
    Register a new local account and sign it in.

    - **username**: must be unique
    - **password**: must not be empty
    """
    try:
        user = await ctx.credentials.register(form.username, form.password)
    except InvalidInput as e:
        return ctx.views.render(
            request, "error", {"message": e.message}, status_code=status.HTTP_400_BAD_REQUEST
        )
    except DuplicateUsername as e:
        return ctx.views.render(
            request, "error", {"message": e.message}, status_code=status.HTTP_409_CONFLICT
        )

    # Replace any session the browser already carried
    await ctx.sessions.destroy(ctx.sessions.token_from(request))
    token = await ctx.sessions.create(user)
    response = redirect_to("/secrets")
    ctx.sessions.set_cookie(response, request, token)
    return response


@router.get("/login", summary="Login form")
async def login_form(request: Request, ctx: Context, user: OptionalUser):
    """Render the login form, or skip it for a signed-in browser."""
    if user is not None:
        return redirect_to("/secrets")
    return ctx.views.render(request, "login")


@router.post("/login", summary="Sign in with username and password")
async def login(request: Request, ctx: Context, form: Credentials):
    """Authenticate and start a session; any failure returns to the form."""
    try:
        user = await ctx.credentials.authenticate(form.username, form.password)
    except InvalidCredentials:
        return redirect_to("/login")

    # Replace any session the browser already carried
    await ctx.sessions.destroy(ctx.sessions.token_from(request))
    token = await ctx.sessions.create(user)
    response = redirect_to("/secrets")
    ctx.sessions.set_cookie(response, request, token)
    return response


@router.get("/logout", summary="End the session")
async def logout(request: Request, ctx: Context):
    await ctx.sessions.destroy(ctx.sessions.token_from(request))
    response = redirect_to("/")
    ctx.sessions.clear_cookie(response)
    return response
