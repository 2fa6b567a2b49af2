"""
Host-page embed renderers.

Each renderer is a pure function of (slug, options) returning markup for one
embed instance. The iframe ``src`` is the only link to live data, and every
call mints a fresh element id so any number of embeds can share a host page.
"""

import re
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Optional
from urllib.parse import quote

from app.core.config import settings
from app.services.widget_metrics import get_widget_metrics
from app.utils.logger import get_logger
from app.web.templating import render_fragment

logger = get_logger(__name__)
metrics = get_widget_metrics()

DEFAULT_STYLE = "inline"
DEFAULT_WIDTH = "100%"
DEFAULT_HEIGHT = "600px"
DEFAULT_BUTTON_TEXT = "Donate Now"
DEFAULT_TAB_TEXT = "Donate"
IFRAME_TITLE = "PassItOn Donation Widget"
WIDGET_ID_PREFIX = "passiton-widget-"

_CSS_LENGTH = re.compile(r"^\d+(\.\d+)?(px|%|em|rem|vh|vw)?$")
_DOMAIN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9.-]*[A-Za-z0-9])?(?::\d{1,5})?$")


def _css_length(value: Optional[str], default: str) -> str:
    value = (value or "").strip()
    if not value:
        return default
    if not _CSS_LENGTH.match(value):
        logger.info("Ignoring invalid embed dimension", value=value, fallback=default)
        return default
    # A bare number means pixels.
    return f"{value}px" if value[-1].isdigit() else value


def _domain(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return None
    if value.startswith(("https://", "http://")):
        value = value.split("://", 1)[1]
    value = value.rstrip("/")
    if not _DOMAIN.match(value):
        logger.warning("Ignoring invalid embed domain", domain=value)
        return None
    return value


@dataclass(frozen=True)
class EmbedOptions:
    """Per-instance embed options; invalid values fall back to defaults."""

    width: str = DEFAULT_WIDTH
    height: str = DEFAULT_HEIGHT
    button_text: str = DEFAULT_BUTTON_TEXT
    tab_text: str = DEFAULT_TAB_TEXT
    domain: Optional[str] = None

    @classmethod
    def build(
        cls,
        width: Optional[str] = None,
        height: Optional[str] = None,
        button_text: Optional[str] = None,
        tab_text: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> "EmbedOptions":
        return cls(
            width=_css_length(width, DEFAULT_WIDTH),
            height=_css_length(height, DEFAULT_HEIGHT),
            button_text=(button_text or "").strip() or DEFAULT_BUTTON_TEXT,
            tab_text=(tab_text or "").strip() or DEFAULT_TAB_TEXT,
            domain=_domain(domain),
        )

    def with_domain(self, domain: Optional[str]) -> "EmbedOptions":
        if self.domain is not None:
            return self
        return replace(self, domain=_domain(domain))


@dataclass(frozen=True)
class RenderedEmbed:
    widget_id: str
    style: str
    src: str
    html: str = field(repr=False)

    def __str__(self) -> str:
        return self.html


def generate_widget_id() -> str:
    return f"{WIDGET_ID_PREFIX}{uuid.uuid4().hex[:12]}"


def widget_url(slug: str, domain: Optional[str] = None) -> str:
    """Public widget page URL the embed iframe loads."""
    path = f"/widget/{quote(slug, safe='')}"
    host = _domain(domain) or _domain(settings.EMBED_DEFAULT_DOMAIN)
    if host:
        return f"https://{host}{path}"
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}{path}"


def _render(style: str, slug: str, options: Optional[EmbedOptions]) -> RenderedEmbed:
    options = options or EmbedOptions()
    widget_id = generate_widget_id()
    src = widget_url(slug, options.domain)
    html = render_fragment(
        f"embed/{style}.html",
        widget_id=widget_id,
        slug=slug,
        src=src,
        title=IFRAME_TITLE,
        options=options,
    )
    metrics.increment_embed_render(style)
    return RenderedEmbed(widget_id=widget_id, style=style, src=src, html=html)


def render_inline(slug: str, options: Optional[EmbedOptions] = None) -> RenderedEmbed:
    """Iframe sized by the options, placed where the host element is."""
    return _render("inline", slug, options)


def render_modal(slug: str, options: Optional[EmbedOptions] = None) -> RenderedEmbed:
    """Trigger button plus a hidden overlay holding the iframe."""
    return _render("modal", slug, options)


def render_sidebar(slug: str, options: Optional[EmbedOptions] = None) -> RenderedEmbed:
    """Fixed side panel with a pull tab."""
    return _render("sidebar", slug, options)


RENDERERS: Dict[str, Callable[[str, Optional[EmbedOptions]], RenderedEmbed]] = {
    "inline": render_inline,
    "modal": render_modal,
    "sidebar": render_sidebar,
}


def render_embed(
    slug: str, style: Optional[str] = DEFAULT_STYLE, options: Optional[EmbedOptions] = None
) -> RenderedEmbed:
    """Render ``slug`` in ``style``; unknown styles render inline."""
    key = (style or DEFAULT_STYLE).strip().lower()
    renderer = RENDERERS.get(key)
    if renderer is None:
        logger.info("Unknown embed style, rendering inline", style=style, slug=slug)
        renderer = render_inline
    return renderer(slug, options)
