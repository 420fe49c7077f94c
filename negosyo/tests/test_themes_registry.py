"""Color schemes, font pairings and template selection."""

import pytest

from negosyo.core.exceptions import TemplateConfigError
from negosyo.schemas.content import PhotoRef
from negosyo.sites import list_templates, select_template
from negosyo.sites.registry import DEFAULT_TEMPLATE, get_template
from negosyo.sites.themes import (
    AUTO_FALLBACK,
    COLOR_SCHEMES,
    FONT_PAIRINGS,
    contrast_color,
    font_links,
    get_font_pairing,
    normalize_hex,
    resolve_palette,
    theme_css,
)


class TestColorMath:
    def test_normalize_hex(self):
        assert normalize_hex("#abc") == "#AABBCC"
        assert normalize_hex("1e40af") == "#1E40AF"
        assert normalize_hex("not-a-color") is None
        assert normalize_hex("") is None

    def test_contrast_uses_yiq_threshold(self):
        assert contrast_color("#FFFFFF") == "#000000"
        assert contrast_color("#000000") == "#FFFFFF"
        assert contrast_color("#F59E0B") == "#000000"
        assert contrast_color("#1E40AF") == "#FFFFFF"


class TestPaletteResolution:
    def test_named_schemes(self):
        for name, palette in COLOR_SCHEMES.items():
            assert resolve_palette(name, []) == palette

    def test_unknown_scheme_falls_back_to_default(self):
        assert resolve_palette("neon", []) == COLOR_SCHEMES["default"]

    def test_green_is_the_default_palette(self):
        assert resolve_palette("green", []) == COLOR_SCHEMES["default"]

    def test_unknown_font_pairing_falls_back_to_modern(self):
        assert get_font_pairing("serif") == FONT_PAIRINGS["modern"]

    def test_auto_without_colors_uses_fallback(self):
        photos = [PhotoRef(url="https://cdn.test/a.jpg")]
        assert resolve_palette("auto", photos) == AUTO_FALLBACK

    def test_auto_uses_first_photo_with_a_color(self):
        photos = [
            PhotoRef(url="https://cdn.test/a.jpg"),
            PhotoRef(url="https://cdn.test/b.jpg", dominant_color="#336699"),
            PhotoRef(url="https://cdn.test/c.jpg", dominant_color="#FF0000"),
        ]
        assert resolve_palette("auto", photos).primary == "#336699"

    def test_auto_on_dark_template_is_dark(self):
        palette = resolve_palette("auto", [], dark_template=True)
        assert palette.dark is True
        assert palette.primary == AUTO_FALLBACK.primary

    def test_named_scheme_is_not_darkened(self):
        assert resolve_palette("blue", [], dark_template=True) == COLOR_SCHEMES["blue"]

    def test_theme_css_sets_button_text_from_contrast(self):
        css = theme_css(COLOR_SCHEMES["orange"], FONT_PAIRINGS["modern"])
        assert "--primary: #F97316;" in css
        assert f"--button-text: {contrast_color('#F97316')};" in css
        assert "'Space Grotesk'" in css


class TestFonts:
    def test_catalog(self):
        assert set(FONT_PAIRINGS) == {
            "modern", "classic", "elegant", "bold", "minimal",
            "professional", "creative", "tech", "friendly", "luxury",
        }

    def test_same_family_requested_once(self):
        links = font_links(FONT_PAIRINGS["minimal"])
        assert links.count("family=DM+Sans") == 1


class TestRegistry:
    def test_get_template(self):
        assert get_template("studio").dark is True
        with pytest.raises(TemplateConfigError):
            get_template("missing")

    @pytest.mark.parametrize("business_type, expected", [
        ("restaurant", "atelier"),
        ("Beauty Salon", "atelier"),
        ("auto repair", "studio"),
        ("medical clinic", "studio"),
        ("", DEFAULT_TEMPLATE),
        (None, DEFAULT_TEMPLATE),
        ("sari-sari store", DEFAULT_TEMPLATE),
    ])
    def test_select_template(self, business_type, expected):
        assert select_template(business_type).name == expected

    def test_list_templates(self):
        names = [t["name"] for t in list_templates()]
        assert names == ["atelier", "studio"]
        atelier = list_templates()[0]
        assert atelier["variants"]["hero"] == ["1", "2", "3", "4", "5"]
        assert atelier["color_scheme"] == "light"
