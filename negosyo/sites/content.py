"""Content sources accepted by the renderer and their normalization.

Older websites store one unstructured JSON blob on the website row; newer ones
have a ``WebsiteContent`` record. Both are wrapped in a ``ContentSource`` and
converted to ``WebsiteContentData`` before rendering so the section renderers
only ever see the normalized shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from negosyo.schemas.content import (
    BusinessContent,
    ContactInfo,
    FeaturedItem,
    NavLink,
    ServiceItem,
    Testimonial,
    WebsiteContentData,
)


@dataclass(frozen=True)
class Legacy:
    blob: dict[str, Any]


@dataclass(frozen=True)
class Normalized:
    content: WebsiteContentData


ContentSource = Union[Legacy, Normalized]

# Legacy visibility keys -> normalized keys.
_LEGACY_VISIBILITY = {
    "navbar": "navbar",
    "hero_section": "hero",
    "about_section": "about",
    "services_section": "services",
    "featured_section": "featured",
    "gallery_section": "gallery",
    "footer_section": "footer",
    "hero_badge": "hero_badge",
    "hero_button": "hero_button",
    "hero_testimonial": "hero_testimonial",
    "services_list": "services_list",
    "featured_products": "featured",
    "footer_contact": "footer_contact",
    "footer_social": "footer_social",
}

DEFAULT_NAV_LINKS = (
    NavLink(label="About", href="#about"),
    NavLink(label="Services", href="#services"),
    NavLink(label="Featured", href="#featured"),
    NavLink(label="Contact", href="#contact"),
)


def _str(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _services(raw: Any) -> list[ServiceItem]:
    items = []
    for entry in _as_list(raw):
        if isinstance(entry, str):
            items.append(ServiceItem(name=entry))
        elif isinstance(entry, dict):
            items.append(ServiceItem(
                name=_str(entry.get("name") or entry.get("title")) or "",
                description=_str(entry.get("description")) or "",
                icon=_str(entry.get("icon")),
            ))
    return items


def _featured(raw: Any) -> list[FeaturedItem]:
    items = []
    for entry in _as_list(raw):
        if not isinstance(entry, dict):
            continue
        quote = entry.get("testimonial")
        testimonial = None
        if isinstance(quote, dict) and _str(quote.get("quote")):
            testimonial = Testimonial(quote=_str(quote.get("quote")), author=_str(quote.get("author")) or "")
        items.append(FeaturedItem(
            title=_str(entry.get("title")) or "",
            description=_str(entry.get("description")) or "",
            image=_str(entry.get("image")),
            tags=[str(t) for t in _as_list(entry.get("tags")) if t],
            testimonial=testimonial,
        ))
    return items


def _links(raw: Any, label_key: str = "label", href_key: str = "href") -> list[NavLink]:
    links = []
    for entry in _as_list(raw):
        if isinstance(entry, dict):
            label = _str(entry.get(label_key))
            href = _str(entry.get(href_key))
            if label and href:
                links.append(NavLink(label=label, href=href))
    return links


def _images(raw: Any) -> dict[str, list[str]]:
    if not isinstance(raw, dict):
        return {}
    images = {}
    for section, value in raw.items():
        urls = [str(u) for u in _as_list(value) if u]
        if urls:
            images[section] = urls
    return images


def normalize_legacy(blob: dict[str, Any]) -> WebsiteContentData:
    """Map the legacy extracted-content blob onto the normalized shape."""
    contact_raw = blob.get("contact") if isinstance(blob.get("contact"), dict) else None
    footer = blob.get("footer") if isinstance(blob.get("footer"), dict) else {}
    visibility_raw = blob.get("visibility") if isinstance(blob.get("visibility"), dict) else {}
    visibility = {}
    for key, value in visibility_raw.items():
        target = _LEGACY_VISIBILITY.get(key)
        if target and isinstance(value, bool):
            visibility[target] = value

    images = _images(blob.get("images"))
    services_image = _str(blob.get("services_image"))
    if services_image and "services" not in images:
        images["services"] = [services_image]

    return WebsiteContentData(
        business_name=_str(blob.get("business_name")) or "",
        business_type=_str(blob.get("business_type")),
        tagline=_str(blob.get("tagline")),
        about=_str(blob.get("about_description")) or _str(blob.get("about")),
        hero_headline=_str(blob.get("hero_headline")),
        hero_subheadline=_str(blob.get("hero_sub_headline") or blob.get("hero_subheadline")),
        hero_badge=_str(blob.get("hero_badge_text")),
        hero_cta_label=_str(blob.get("hero_cta_label")),
        hero_cta_link=_str(blob.get("hero_cta_link")),
        hero_testimonial=_str(blob.get("hero_testimonial")),
        about_headline=_str(blob.get("about_headline")),
        highlights=[str(h) for h in _as_list(blob.get("unique_selling_points") or blob.get("highlights")) if h],
        services_headline=_str(blob.get("services_headline")),
        services_subheadline=_str(blob.get("services_subheadline")),
        services=_services(blob.get("services")),
        featured_headline=_str(blob.get("featured_headline")),
        featured_subheadline=_str(blob.get("featured_subheadline")),
        featured_items=_featured(blob.get("featured_products")),
        contact=ContactInfo(**{k: _str(v) for k, v in contact_raw.items() if k in ContactInfo.model_fields})
        if contact_raw else None,
        footer_description=_str(footer.get("brand_blurb")),
        social_links=_links(footer.get("social_links"), "platform", "url"),
        navbar_links=_links(blob.get("navbar_links")),
        images=images,
        visibility=visibility,
    )


def normalize(source: ContentSource) -> WebsiteContentData:
    if isinstance(source, Normalized):
        return source.content
    if isinstance(source, Legacy):
        return normalize_legacy(source.blob)
    raise TypeError(f"Unsupported content source: {type(source).__name__}")


# ---------------------------------------------------------------------------
# Defaults for freshly generated sites
# ---------------------------------------------------------------------------

_DEFAULT_SERVICES = (
    ServiceItem(name="Quality Products", description="Carefully selected for everyday needs.", icon="★"),
    ServiceItem(name="Friendly Service", description="A team that knows its regulars by name.", icon="♥"),
    ServiceItem(name="Fair Prices", description="Honest pricing for the neighborhood.", icon="✓"),
)

_FEATURED_TEMPLATES: dict[str, tuple[tuple[str, str, tuple[str, ...]], ...]] = {
    "restaurant": (
        ("Signature Dishes", "The plates regulars keep coming back for at {name}.", ("Menu", "Favorites")),
        ("Dining Area", "A comfortable space at {name} for families and friends.", ("Interior", "Ambience")),
        ("Fresh Ingredients", "Sourced daily so every meal at {name} tastes like home.", ("Fresh", "Local")),
    ),
    "retail": (
        ("Best Sellers", "The most popular picks on the shelves of {name}.", ("Popular", "In Stock")),
        ("New Arrivals", "Fresh stock landing at {name} every week.", ("New",)),
        ("Everyday Essentials", "Reliable basics {name} always keeps on hand.", ("Essentials",)),
    ),
    "default": (
        ("Our Work", "A look at what {name} does best.", ("Featured",)),
        ("Happy Customers", "Service that keeps customers returning to {name}.", ("Service",)),
        ("Behind the Scenes", "The people and care behind {name}.", ("Team",)),
    ),
}

_TESTIMONIAL_AUTHORS = ("Maria Santos", "Juan Dela Cruz", "Ana Reyes", "Carlo Mendoza", "Lisa Garcia")
_TESTIMONIAL_QUOTES = (
    "Excellent service and very accommodating staff. Highly recommended!",
    "We have been coming here for years and the quality never drops.",
    "Great value and a warm, welcoming place. We will be back.",
)


def default_featured_items(business_name: str, business_type: str | None) -> list[FeaturedItem]:
    kind = (business_type or "").lower()
    key = next((k for k in _FEATURED_TEMPLATES if k != "default" and k in kind), "default")
    items = []
    for index, (title, description, tags) in enumerate(_FEATURED_TEMPLATES[key]):
        items.append(FeaturedItem(
            title=title,
            description=description.format(name=business_name),
            tags=list(tags),
            testimonial=Testimonial(
                quote=_TESTIMONIAL_QUOTES[index % len(_TESTIMONIAL_QUOTES)],
                author=_TESTIMONIAL_AUTHORS[index % len(_TESTIMONIAL_AUTHORS)],
            ),
        ))
    return items


def content_from_business(
    *,
    business_name: str,
    business_type: str | None,
    city: str | None,
    extracted: BusinessContent | None,
    contact: ContactInfo | None,
) -> WebsiteContentData:
    """Build initial normalized content from extraction output, filling gaps with defaults."""
    extracted = extracted or BusinessContent()
    merged_contact = contact.model_copy() if contact else ContactInfo()
    for field_name, value in extracted.contact.model_dump(exclude_none=True).items():
        if value:
            setattr(merged_contact, field_name, value)

    kind = business_type or "business"
    about = extracted.about or (f"{business_name} is a {kind} located in {city}." if city else None)
    return WebsiteContentData(
        business_name=business_name,
        business_type=business_type,
        tagline=extracted.tagline or f"Welcome to {business_name}",
        about=about,
        highlights=extracted.highlights or ["Quality", "Reliability", "Service"],
        services=extracted.services or [s.model_copy() for s in _DEFAULT_SERVICES],
        featured_headline="Featured Products",
        featured_items=default_featured_items(business_name, business_type),
        contact=merged_contact,
        footer_description=f"Proudly serving {city}." if city else extracted.tagline,
        navbar_links=[link.model_copy() for link in DEFAULT_NAV_LINKS],
    )
