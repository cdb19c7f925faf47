"""
Secrets routes: listing and submission. All require a session.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from secretstack.core.exceptions import Unauthenticated
from secretstack.dependencies.auth import Context, CurrentUser
from secretstack.schemas.auth import SecretForm
from secretstack.views import redirect_to

router = APIRouter(tags=["Secrets"])


@router.get("/secrets", summary="List every user's secrets")
async def list_secrets(request: Request, ctx: Context, user: CurrentUser):
    users_with_secrets = await ctx.users.list_secrets()
    return ctx.views.render(
        request,
        "secrets",
        {"users_with_secrets": users_with_secrets},
    )


@router.get("/submit", summary="Secret submission form")
async def submit_form(request: Request, ctx: Context, user: CurrentUser):
    return ctx.views.render(request, "submit")


@router.post("/submit", summary="Append a secret")
async def submit(
    ctx: Context,
    user: CurrentUser,
    form: Annotated[SecretForm, Depends(SecretForm.as_form)],
):
    """Append the posted secret to the signed-in user's list."""
    if not await ctx.users.append_secret(user.id, form.secret):
        # User vanished between session resolve and the update
        raise Unauthenticated("User no longer exists")
    return redirect_to("/secrets")
