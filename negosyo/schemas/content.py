"""Content models shared by extraction, editing and rendering."""
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServiceItem(BaseModel):
    name: str = ""
    description: str = ""
    icon: str | None = None


class Testimonial(BaseModel):
    quote: str = ""
    author: str = ""


class FeaturedItem(BaseModel):
    title: str = ""
    description: str = ""
    image: str | None = None
    tags: list[str] = []
    testimonial: Testimonial | None = None


class ContactInfo(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    phone: str | None = None
    email: str | None = None
    address: str | None = None
    whatsapp: str | None = None
    messenger: str | None = None


class NavLink(BaseModel):
    label: str
    href: str


class BusinessContent(BaseModel):
    """Structured content returned by the extraction model."""

    model_config = ConfigDict(extra="ignore")

    tagline: str | None = None
    about: str | None = None
    services: list[ServiceItem] = []
    contact: ContactInfo = Field(default_factory=ContactInfo)
    highlights: list[str] = []

    @field_validator("services", mode="before")
    @classmethod
    def _coerce_services(cls, value):
        # Models sometimes answer with bare strings or {"title": ...} objects.
        if not isinstance(value, list):
            return []
        items = []
        for item in value:
            if isinstance(item, str):
                items.append({"name": item})
            elif isinstance(item, dict):
                items.append({**item, "name": item.get("name") or item.get("title") or ""})
        return items

    @field_validator("highlights", mode="before")
    @classmethod
    def _coerce_highlights(cls, value):
        if not isinstance(value, list):
            return []
        return [str(v) for v in value if v]

    @field_validator("contact", mode="before")
    @classmethod
    def _coerce_contact(cls, value):
        return value if isinstance(value, dict) else {}


SECTIONS = ("navbar", "hero", "about", "services", "featured", "gallery", "footer")

# Element-level switches within a section, on top of the per-section keys.
ELEMENT_FLAGS = (
    "hero_badge",
    "hero_button",
    "hero_testimonial",
    "about_highlights",
    "services_list",
    "featured_testimonials",
    "footer_contact",
    "footer_social",
)


class WebsiteContentData(BaseModel):
    """Normalized content. Every field is optional so partial records render."""

    model_config = ConfigDict(extra="ignore")

    business_name: str = ""
    business_type: str | None = None
    tagline: str | None = None
    about: str | None = None

    hero_headline: str | None = None
    hero_subheadline: str | None = None
    hero_badge: str | None = None
    hero_cta_label: str | None = None
    hero_cta_link: str | None = None
    hero_testimonial: str | None = None

    about_headline: str | None = None
    highlights: list[str] = []

    services_headline: str | None = None
    services_subheadline: str | None = None
    services: list[ServiceItem] = []

    featured_headline: str | None = None
    featured_subheadline: str | None = None
    featured_items: list[FeaturedItem] = []

    contact: ContactInfo | None = None
    footer_description: str | None = None
    social_links: list[NavLink] = []
    navbar_links: list[NavLink] = []

    images: dict[str, list[str]] = {}
    visibility: dict[str, bool] = {}

    def is_visible(self, key: str) -> bool:
        return self.visibility.get(key, True)


class WebsiteContentPatch(WebsiteContentData):
    """Partial update; only fields explicitly sent are applied."""

    business_name: str | None = None


class PhotoRef(BaseModel):
    url: str
    dominant_color: str | None = None


class Customizations(BaseModel):
    """Per-section variant ids plus theme ids.

    Accepts both snake_case and the camelCase keys stored by older clients.
    Unknown keys are ignored; unset keys resolve to ``DEFAULT_CUSTOMIZATIONS``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    navbar_style: str | None = Field(default=None, alias="navbarStyle")
    hero_style: str | None = Field(default=None, alias="heroStyle")
    about_style: str | None = Field(default=None, alias="aboutStyle")
    services_style: str | None = Field(default=None, alias="servicesStyle")
    featured_style: str | None = Field(default=None, alias="featuredStyle")
    gallery_style: str | None = Field(default=None, alias="galleryStyle")
    footer_style: str | None = Field(default=None, alias="footerStyle")
    color_scheme: str | None = Field(default=None, alias="colorScheme")
    font_pairing: str | None = Field(default=None, alias="fontPairing")

    def merged(self, overrides: "Customizations | None") -> "Customizations":
        if overrides is None:
            return self
        data = self.model_dump()
        data.update(overrides.model_dump(exclude_none=True))
        return Customizations(**data)

    def resolved(self) -> dict[str, str]:
        values = dict(DEFAULT_CUSTOMIZATIONS)
        values.update(self.model_dump(exclude_none=True))
        return values


DEFAULT_CUSTOMIZATIONS: dict[str, str] = {
    "navbar_style": "1",
    "hero_style": "1",
    "about_style": "1",
    "services_style": "1",
    "featured_style": "1",
    "gallery_style": "1",
    "footer_style": "1",
    "color_scheme": "auto",
    "font_pairing": "modern",
}
