"""
HTML rendering through Jinja2 templates.

Views are addressed by name ("apikeys" → templates/apikeys.html).
"""

import pathlib
from typing import Any

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from verifyadmin.core.config import settings

_TEMPLATES_DIR = pathlib.Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))
templates.env.globals["app_name"] = settings.APP_NAME


def render_html(
    request: Request,
    view: str,
    context: dict[str, Any],
    status_code: int = 200,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        f"{view}.html",
        context,
        status_code=status_code,
    )
