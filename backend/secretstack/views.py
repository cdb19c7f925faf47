"""
Jinja2 view rendering.
"""
from pathlib import Path
from typing import Any, Optional

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"


class ViewRenderer:
    """Render page templates; holds no business logic."""

    def __init__(self, directory: Path = TEMPLATES_DIR):
        self.templates = Jinja2Templates(directory=str(directory))

    def render_html(self, name: str, context: Optional[dict[str, Any]] = None) -> str:
        """Render a page to an HTML string."""
        template = self.templates.get_template(f"{name}.html")
        return template.render(**(context or {}))

    def render(
        self,
        request: Request,
        name: str,
        context: Optional[dict[str, Any]] = None,
        status_code: int = 200,
    ):
        """TemplateResponse for a page name such as "home" or "secrets"."""
        return self.templates.TemplateResponse(
            request,
            f"{name}.html",
            context or {},
            status_code=status_code,
        )


def redirect_to(url: str) -> RedirectResponse:
    """302 redirect so a POST is always followed by a GET."""
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)
