import re

from app.services.embed.adapters import (
    MISSING_SLUG_HTML,
    expand_drupal_tokens,
    expand_wordpress_shortcodes,
    parse_shortcode_attributes,
    render_drupal_block,
)

IFRAME_SRC = re.compile(r'<iframe src="([^"]+)"')


def test_parse_shortcode_attributes_handles_quoting_styles():
    attrs = parse_shortcode_attributes(""" slug="a-b" style='inline' width=400px button-text="Give" """)

    assert attrs == {"slug": "a-b", "style": "inline", "width": "400px", "button_text": "Give"}


class TestWordPress:
    def test_defaults_to_modal(self):
        html = expand_wordpress_shortcodes('<p>Hi</p>[passiton_widget slug="spring-drive"]<p>Bye</p>')

        assert html.startswith("<p>Hi</p>")
        assert html.endswith("<p>Bye</p>")
        assert "passiton-donate-btn" in html
        assert IFRAME_SRC.search(html).group(1).endswith("/widget/spring-drive")

    def test_inline_with_dimensions_and_domain(self):
        html = expand_wordpress_shortcodes(
            '[passiton_widget slug="spring-drive" style="inline" width="400px" height="500px" domain="give.example.org"]'
        )

        assert "width: 400px; height: 500px;" in html
        assert IFRAME_SRC.search(html).group(1) == "https://give.example.org/widget/spring-drive"

    def test_request_domain_used_when_shortcode_has_none(self):
        html = expand_wordpress_shortcodes('[passiton_widget slug="s-1" style="sidebar"]', domain="cms.example.org")

        assert IFRAME_SRC.search(html).group(1) == "https://cms.example.org/widget/s-1"

    def test_missing_slug(self):
        assert expand_wordpress_shortcodes("[passiton_widget]") == MISSING_SLUG_HTML
        assert expand_wordpress_shortcodes('[passiton_widget style="inline"]') == MISSING_SLUG_HTML

    def test_each_shortcode_gets_its_own_id(self):
        html = expand_wordpress_shortcodes('[passiton_widget slug="a-1"] [passiton_widget slug="a-1"]')

        ids = re.findall(r'id="(passiton-widget-[0-9a-f]{12})"', html)
        assert len(set(ids)) == 2

    def test_text_without_shortcodes_is_untouched(self):
        assert expand_wordpress_shortcodes("[gallery ids=1,2]") == "[gallery ids=1,2]"


class TestDrupal:
    def test_defaults_to_inline(self):
        html = expand_drupal_tokens("[passiton-widget:spring-drive]")

        assert "passiton-widget-container" in html
        assert "width: 100%; height: 600px;" in html

    def test_positional_options(self):
        html = expand_drupal_tokens("[passiton-widget:spring-drive:inline:300px:450px]", domain="give.example.org")

        assert "width: 300px; height: 450px;" in html
        assert IFRAME_SRC.search(html).group(1) == "https://give.example.org/widget/spring-drive"

    def test_modal_style(self):
        assert "passiton-modal" in expand_drupal_tokens("[passiton-widget:spring-drive:modal]")

    def test_block_without_slug(self):
        assert render_drupal_block("") == MISSING_SLUG_HTML

    def test_block_renders_configured_style(self):
        assert "passiton-sidebar-widget" in render_drupal_block("spring-drive", style="sidebar")
