"""
CMS adapters: expand WordPress shortcodes and Drupal tokens into embed markup.

    [passiton_widget slug="spring-drive" style="modal" width="400px"]
    [passiton-widget:spring-drive:inline:100%:700px]

Both delegate to ``render_embed``; only defaults and syntax differ.
"""

import re
from typing import Dict, Optional

from .renderers import EmbedOptions, render_embed

WORDPRESS_DEFAULT_STYLE = "modal"
DRUPAL_DEFAULT_STYLE = "inline"

_WORDPRESS_SHORTCODE = re.compile(r"\[passiton_widget(?P<attrs>\s[^\]]*)?\s*/?\]")
_SHORTCODE_ATTR = re.compile(
    r"""(?P<key>[A-Za-z_][\w-]*)\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'\]]+))"""
)
_DRUPAL_TOKEN = re.compile(
    r"\[passiton-widget:(?P<slug>[^:\]]+)"
    r"(?::(?P<style>[^:\]]+))?"
    r"(?::(?P<width>[^:\]]+))?"
    r"(?::(?P<height>[^:\]]+))?\]"
)

MISSING_SLUG_HTML = (
    '<p class="passiton-error" style="color: red;">'
    'Error: Widget slug is required. Usage: [passiton_widget slug="your-widget-slug"]'
    "</p>"
)


def parse_shortcode_attributes(raw: Optional[str]) -> Dict[str, str]:
    attrs: Dict[str, str] = {}
    for match in _SHORTCODE_ATTR.finditer(raw or ""):
        value = next(
            v for v in (match.group("dq"), match.group("sq"), match.group("bare"), "")
            if v is not None
        )
        attrs[match.group("key").lower().replace("-", "_")] = value
    return attrs


def expand_wordpress_shortcodes(text: str, domain: Optional[str] = None) -> str:
    """Replace every ``[passiton_widget ...]`` shortcode in ``text``."""

    def _expand(match: re.Match) -> str:
        attrs = parse_shortcode_attributes(match.group("attrs"))
        slug = attrs.get("slug", "").strip()
        if not slug:
            return MISSING_SLUG_HTML
        options = EmbedOptions.build(
            width=attrs.get("width"),
            height=attrs.get("height"),
            button_text=attrs.get("button_text"),
            domain=attrs.get("domain"),
        ).with_domain(domain)
        return render_embed(slug, attrs.get("style") or WORDPRESS_DEFAULT_STYLE, options).html

    return _WORDPRESS_SHORTCODE.sub(_expand, text)


def expand_drupal_tokens(text: str, domain: Optional[str] = None) -> str:
    """Replace every ``[passiton-widget:slug[:style[:width[:height]]]]`` token."""

    def _expand(match: re.Match) -> str:
        slug = match.group("slug").strip()
        if not slug:
            return MISSING_SLUG_HTML
        options = EmbedOptions.build(
            width=match.group("width"),
            height=match.group("height"),
            domain=domain,
        )
        return render_embed(slug, match.group("style") or DRUPAL_DEFAULT_STYLE, options).html

    return _DRUPAL_TOKEN.sub(_expand, text)


def render_drupal_block(
    slug: Optional[str],
    style: Optional[str] = None,
    width: Optional[str] = None,
    height: Optional[str] = None,
    button_text: Optional[str] = None,
    domain: Optional[str] = None,
) -> str:
    """Markup for the configurable Drupal block."""
    if not (slug or "").strip():
        return MISSING_SLUG_HTML
    options = EmbedOptions.build(
        width=width, height=height, button_text=button_text, domain=domain
    )
    return render_embed(slug.strip(), style or DRUPAL_DEFAULT_STYLE, options).html


EXPANDERS = {
    "wordpress": expand_wordpress_shortcodes,
    "drupal": expand_drupal_tokens,
}


def expand_shortcodes(text: str, syntax: str, domain: Optional[str] = None) -> str:
    return EXPANDERS[syntax](text, domain)
