"""
Public pages.
"""
from fastapi import APIRouter, Request

from secretstack.dependencies.auth import Context

router = APIRouter(tags=["Pages"])


@router.get("/", summary="Home page")
async def home(request: Request, ctx: Context):
    return ctx.views.render(request, "home")
