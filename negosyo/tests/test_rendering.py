"""Rendering engine: determinism, variants, graceful degradation and content sources."""

import pytest

from negosyo.core.exceptions import TemplateConfigError, ValidationError
from negosyo.schemas.content import (
    DEFAULT_CUSTOMIZATIONS,
    ContactInfo,
    Customizations,
    PhotoRef,
    ServiceItem,
    WebsiteContentData,
)
from negosyo.sites import Legacy, Normalized, normalize, render
from negosyo.sites.injector import allocate_images
from negosyo.sites.registry import TEMPLATES
from negosyo.sites.sections import SECTION_RENDERERS

PHOTOS = [
    {"url": "https://cdn.test/a.jpg", "dominant_color": "#8B4513"},
    {"url": "https://cdn.test/b.jpg"},
    {"url": "https://cdn.test/c.jpg"},
]


def _content(**overrides) -> WebsiteContentData:
    fields = {
        "business_name": "Kape ni Juan",
        "business_type": "cafe",
        "tagline": "Brewed with love",
        "about": "A neighborhood coffee shop in Marikina.",
        "highlights": ["Fresh beans", "Friendly baristas"],
        "services": [ServiceItem(name="Espresso", description="Double shot")],
        "contact": ContactInfo(phone="09171234567", email="hello@kape.test"),
    }
    fields.update(overrides)
    return WebsiteContentData(**fields)


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------

class TestDeterminism:
    def test_identical_inputs_render_identical_output(self):
        first = render("atelier", _content(), {"hero_style": "2"}, PHOTOS)
        second = render("atelier", _content(), {"hero_style": "2"}, PHOTOS)
        assert first == second

    def test_dict_and_model_customizations_render_the_same(self):
        as_dict = render("atelier", _content(), {"heroStyle": "3", "colorScheme": "blue"}, PHOTOS)
        as_model = render("atelier", _content(), Customizations(hero_style="3", color_scheme="blue"), PHOTOS)
        assert as_dict == as_model

    def test_output_is_a_complete_document_without_placeholders(self):
        html = render("atelier", _content(), None, PHOTOS)
        assert html.startswith("<!DOCTYPE html>")
        assert "</html>" in html
        assert "{{" not in html
        assert "\n\n" not in html

    def test_business_name_is_escaped(self):
        html = render("atelier", _content(business_name="<script>alert(1)</script>"), None)
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_unsafe_links_are_neutralized(self):
        html = render("atelier", _content(hero_cta_label="Order", hero_cta_link="javascript:alert(1)"), None)
        assert "javascript:" not in html


# ---------------------------------------------------------------------------
# Variants and config errors
# ---------------------------------------------------------------------------

class TestVariants:
    @pytest.mark.parametrize("template_name", sorted(TEMPLATES))
    def test_every_supported_variant_renders(self, template_name):
        template = TEMPLATES[template_name]
        for section, variant_ids in template.variants.items():
            for variant in variant_ids:
                html = render(template_name, _content(), {f"{section}_style": variant}, PHOTOS)
                assert f"{section}-v{variant}" in html

    def test_renderers_cover_every_advertised_variant(self):
        for template in TEMPLATES.values():
            for section, variant_ids in template.variants.items():
                assert set(variant_ids) <= set(SECTION_RENDERERS[section])

    def test_unknown_template_fails_fast(self):
        with pytest.raises(TemplateConfigError):
            render("nonexistent", _content(), None)

    def test_unknown_variant_fails_fast(self):
        with pytest.raises(TemplateConfigError, match="hero variant '99'"):
            render("atelier", _content(), {"hero_style": "99"})

    def test_variant_not_supported_by_template_fails(self):
        # studio only ships hero variants 1-3
        with pytest.raises(TemplateConfigError):
            render("studio", _content(), {"hero_style": "5"})

    def test_unknown_color_scheme_and_font_fall_back_to_defaults(self):
        expected = render("atelier", _content(), {"color_scheme": "default", "font_pairing": "modern"})
        assert render("atelier", _content(), {"color_scheme": "neon", "font_pairing": "serif"}) == expected

    def test_green_renders_like_default(self):
        assert render("atelier", _content(), {"colorScheme": "green"}) == render(
            "atelier", _content(), {"colorScheme": "default"}
        )

    def test_template_config_error_is_a_validation_error(self):
        assert issubclass(TemplateConfigError, ValidationError)
        assert TemplateConfigError("x").status_code == 400

    def test_defaults_apply_for_missing_keys(self):
        assert Customizations().resolved() == DEFAULT_CUSTOMIZATIONS


# ---------------------------------------------------------------------------
# Degradation
# ---------------------------------------------------------------------------

class TestDegradation:
    def test_renders_with_no_photos(self):
        html = render("atelier", _content(), {"hero_style": "1", "gallery_style": "1"}, [])
        assert "<img" not in html
        assert "Kape ni Juan" in html

    def test_renders_with_only_a_business_name(self):
        html = render("studio", WebsiteContentData(business_name="Solo"), None)
        assert "Solo" in html

    def test_no_photos_leaves_every_slot_empty(self):
        allocation = allocate_images(_content(), [])
        assert all(urls == () for urls in allocation.values())

    def test_fewer_photos_than_slots_reuses_photos(self):
        one = [PhotoRef(url="https://cdn.test/only.jpg")]
        allocation = allocate_images(_content(), one)
        assert allocation["hero"] == ("https://cdn.test/only.jpg",)
        assert allocation["about"] == ("https://cdn.test/only.jpg",)
        assert allocation["gallery"] == ("https://cdn.test/only.jpg",)

    def test_explicit_section_images_win(self):
        content = _content(images={"about": ["https://cdn.test/chosen.jpg"]})
        allocation = allocate_images(content, [PhotoRef(**p) for p in PHOTOS])
        assert allocation["about"] == ("https://cdn.test/chosen.jpg",)


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------

class TestVisibility:
    def test_hidden_section_is_omitted_but_data_kept(self):
        content = _content(visibility={"services": False})
        html = render("atelier", content, None, PHOTOS)
        assert 'id="services"' not in html
        assert "Espresso" not in html
        assert content.services[0].name == "Espresso"

    def test_hidden_element_inside_visible_section(self):
        content = _content(visibility={"about_highlights": False})
        html = render("atelier", content, None, PHOTOS)
        assert 'id="about"' in html
        assert "Fresh beans" not in html

    def test_visible_by_default(self):
        assert _content().is_visible("hero") is True


# ---------------------------------------------------------------------------
# Content sources
# ---------------------------------------------------------------------------

LEGACY_BLOB = {
    "business_name": "Mang Tomas Auto Repair",
    "tagline": "Fixed right the first time",
    "about_description": "Family-run garage since 1998.",
    "hero_sub_headline": "Trusted mechanics",
    "unique_selling_points": ["Honest quotes", "Same-day service"],
    "services": ["Oil change", {"title": "Brake repair", "description": "Pads and rotors"}],
    "featured_products": [
        {"title": "Engine overhaul", "tags": ["Engine"], "testimonial": {"quote": "Runs like new", "author": "Ben"}},
    ],
    "contact": {"phone": 9171234567, "email": "shop@tomas.test"},
    "footer": {"brand_blurb": "Serving Pasig", "social_links": [{"platform": "Facebook", "url": "https://fb.test/tomas"}]},
    "visibility": {"hero_section": True, "gallery_section": False},
}


class TestContentSources:
    def test_legacy_blob_normalizes(self):
        data = normalize(Legacy(LEGACY_BLOB))
        assert data.business_name == "Mang Tomas Auto Repair"
        assert data.about == "Family-run garage since 1998."
        assert data.hero_subheadline == "Trusted mechanics"
        assert data.highlights == ["Honest quotes", "Same-day service"]
        assert [s.name for s in data.services] == ["Oil change", "Brake repair"]
        assert data.featured_items[0].testimonial.author == "Ben"
        assert data.contact.phone == "9171234567"
        assert data.footer_description == "Serving Pasig"
        assert data.social_links[0].label == "Facebook"
        assert data.visibility == {"hero": True, "gallery": False}

    def test_legacy_and_normalized_sources_render_the_same(self):
        normalized = normalize(Legacy(LEGACY_BLOB))
        from_legacy = render("studio", Legacy(LEGACY_BLOB), None, PHOTOS)
        from_normalized = render("studio", Normalized(normalized), None, PHOTOS)
        assert from_legacy == from_normalized

    def test_empty_legacy_blob_still_renders(self):
        html = render("atelier", Legacy({}), None)
        assert "<!DOCTYPE html>" in html

    @pytest.mark.parametrize("visibility", [["hero"], "hero", 1])
    def test_malformed_legacy_visibility_is_ignored(self, visibility):
        data = normalize(Legacy({"business_name": "Sari-Sari ni Aling Rosa", "visibility": visibility}))
        assert data.visibility == {}
        assert "Sari-Sari ni Aling Rosa" in render("atelier", Legacy({"business_name": "Sari-Sari ni Aling Rosa", "visibility": visibility}), None)

    def test_unsupported_source_type(self):
        with pytest.raises(TypeError):
            normalize({"business_name": "raw dict"})
