"""Jinja2 environment shared by embed renderers and widget pages."""

from pathlib import Path
from typing import Any

from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from app.services.widgets.donation_form import format_cents

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _css_text(value: str) -> str:
    # Stored CSS is placed inside a <style> element.
    return Markup((value or "").replace("<", ""))


env.filters["cents"] = format_cents
env.filters["css"] = _css_text


def render_fragment(name: str, **ctx: Any) -> str:
    return env.get_template(name).render(**ctx)


def render_page(name: str, status_code: int = 200, **ctx: Any) -> HTMLResponse:
    return HTMLResponse(render_fragment(name, **ctx), status_code=status_code)
