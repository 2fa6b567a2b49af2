"""
Embed delivery for third-party host pages.

- ``renderers``: inline, modal and sidebar markup around the widget iframe.
- ``messages``: the cross-frame message contract and the host-side model of
  open overlays.
- ``adapters``: WordPress shortcode and Drupal token expansion.
"""

from .renderers import EmbedOptions, render_embed, render_inline, render_modal, render_sidebar

__all__ = [
    "EmbedOptions",
    "render_embed",
    "render_inline",
    "render_modal",
    "render_sidebar",
]
