"""Embed code generation for the dashboard and CMS plugins."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from markupsafe import escape
from sqlalchemy.orm import Session

from app.api.v1.security import _authorize, ensure_can_manage
from app.api.v1.widget_schemas import (
    EmbedSnippetView,
    EmbedStyle,
    ShortcodeExpandRequest,
    ShortcodeExpandResponse,
)
from app.core.config import settings
from app.db.session import get_db
from app.security.auth.jwt_handler import Principal
from app.services.embed.adapters import expand_shortcodes
from app.services.embed.renderers import EmbedOptions, render_embed
from app.services.widgets.store import WidgetConfigStore
from app.utils.error_handler import WidgetNotFoundError

router = APIRouter(prefix="/embeds", tags=["embeds"])


def script_tag() -> str:
    src = f"{settings.PUBLIC_BASE_URL.rstrip('/')}/embed/passiton-embed.js"
    return f'<script src="{escape(src)}" async></script>'


def host_markup(slug: str, style: str, options: EmbedOptions) -> str:
    attrs = [("data-passiton-widget", slug), ("data-style", style)]
    if style == "inline":
        attrs += [("data-width", options.width), ("data-height", options.height)]
    if style == "modal":
        attrs.append(("data-button-text", options.button_text))
    if style == "sidebar":
        attrs.append(("data-tab-text", options.tab_text))
    if options.domain:
        attrs.append(("data-domain", options.domain))
    rendered = " ".join(f'{name}="{escape(value)}"' for name, value in attrs)
    return f"<div {rendered}></div>"


@router.get("/{slug}/snippet", response_model=EmbedSnippetView, response_model_by_alias=True)
def get_embed_snippet(
    slug: str,
    style: EmbedStyle = "inline",
    width: Optional[str] = None,
    height: Optional[str] = None,
    button_text: Optional[str] = Query(default=None, alias="buttonText"),
    tab_text: Optional[str] = Query(default=None, alias="tabText"),
    domain: Optional[str] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
) -> EmbedSnippetView:
    """Copy-paste embed code for one of the caller's widgets."""
    widget = WidgetConfigStore(db).get_widget_by_slug(slug)
    if widget is None:
        raise WidgetNotFoundError(slug)
    ensure_can_manage(principal, widget.organization_id)

    options = EmbedOptions.build(
        width=width,
        height=height,
        button_text=button_text,
        tab_text=tab_text,
        domain=domain,
    )
    rendered = render_embed(slug, style, options)
    return EmbedSnippetView(
        widget_id=rendered.widget_id,
        style=rendered.style,
        html=rendered.html,
        script_tag=script_tag(),
        host_markup=host_markup(slug, rendered.style, options),
    )


@router.post("/expand", response_model=ShortcodeExpandResponse)
def expand(request: ShortcodeExpandRequest) -> ShortcodeExpandResponse:
    """Server-side shortcode/token expansion for CMS integrations."""
    return ShortcodeExpandResponse(
        html=expand_shortcodes(request.text, request.syntax, request.domain)
    )
