"""Static template catalog.

A template is a base HTML document with ``{{name}}`` insertion points plus the
variant ids it supports for each section. Lookup is pure; nothing here holds
state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from negosyo.core.exceptions import TemplateConfigError

DEFAULT_TEMPLATE = "atelier"

_BASE_CSS = """
*, *::before, *::after { box-sizing: border-box; }
body { margin: 0; font-family: var(--font-body); color: var(--text); background: var(--background); line-height: 1.6; }
h1, h2, h3, h4, .brand { font-family: var(--font-heading); line-height: 1.2; }
img { max-width: 100%; display: block; border-radius: var(--radius); object-fit: cover; }
a { color: inherit; }
.container { width: min(1120px, 92%); margin: 0 auto; }
.narrow { width: min(760px, 92%); }
.centered { text-align: center; }
.section { padding: 5rem 0; }
.split { display: grid; grid-template-columns: 1fr 1fr; gap: 3rem; align-items: center; }
.split.reverse > :first-child { order: 2; }
.single { display: block; }
.grid { display: grid; gap: 1.5rem; }
.cards { grid-template-columns: repeat(auto-fit, minmax(240px, 1fr)); }
.two-col { grid-template-columns: repeat(2, 1fr); }
.three-col { grid-template-columns: repeat(3, 1fr); }
.gallery { grid-template-columns: repeat(auto-fill, minmax(200px, 1fr)); }
.card { background: var(--surface); border-radius: var(--radius); padding: 1.5rem; box-shadow: 0 1px 3px rgba(0, 0, 0, 0.08); }
.btn { display: inline-block; padding: 0.8rem 1.6rem; border-radius: 999px; background: var(--primary); color: var(--button-text); text-decoration: none; font-weight: 600; }
.btn-small { padding: 0.5rem 1.1rem; }
.badge, .tag { display: inline-block; padding: 0.25rem 0.75rem; border-radius: 999px; background: var(--accent); color: var(--secondary); font-size: 0.8rem; }
.navbar { padding: 1rem 0; background: var(--surface); position: sticky; top: 0; z-index: 10; }
.nav-row { display: flex; align-items: center; justify-content: space-between; gap: 1rem; }
.nav-stack { display: flex; flex-direction: column; align-items: center; gap: 0.5rem; }
.nav-links { display: flex; gap: 1.5rem; list-style: none; margin: 0; padding: 0; }
.brand { font-size: 1.4rem; font-weight: 700; text-decoration: none; }
.topbar { background: var(--secondary); color: var(--light); font-size: 0.85rem; padding: 0.3rem 0; }
.hero { background: var(--hero-bg); color: var(--hero-text); }
.hero-cover { background-size: cover; background-position: center; padding: 8rem 0; }
.hero-band { background: var(--primary); color: var(--button-text); }
.hero-title { font-size: clamp(2.2rem, 5vw, 4rem); margin: 0.5rem 0; }
.display { font-size: clamp(3rem, 8vw, 6rem); }
.photo-strip, .mosaic { display: grid; grid-template-columns: repeat(auto-fit, minmax(160px, 1fr)); gap: 1rem; margin-top: 2rem; }
.scroller { display: flex; gap: 1rem; overflow-x: auto; padding: 0 4%; }
.scroller img { height: 260px; flex: 0 0 auto; }
.testimonial, .hero-quote { border-left: 3px solid var(--primary); margin: 1rem 0 0; padding-left: 1rem; font-style: italic; }
.footer { background: var(--secondary); color: var(--light); padding: 3rem 0 1.5rem; }
.contact-list, .footer-links, .featured-list, .service-list { list-style: none; padding: 0; }
.cta-band { background: var(--primary); color: var(--button-text); padding: 3rem 0; }
@media (max-width: 768px) {
  .split, .two-col, .three-col { grid-template-columns: 1fr; }
  .nav-links { display: none; }
}
""".strip()

_DOCUMENT = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{title}}</title>
<meta name="description" content="{{description}}">
{{fonts}}
{{theme}}
<style>
:root { --radius: {{radius}}; }
{{css}}
</style>
</head>
<body id="top" class="template-{{template}}">
{{navbar}}
<main>
{{hero}}
{{about}}
{{services}}
{{featured}}
{{gallery}}
</main>
{{footer}}
</body>
</html>
"""


def _ids(count: int) -> tuple[str, ...]:
    return tuple(str(i) for i in range(1, count + 1))


@dataclass(frozen=True)
class TemplateDescriptor:
    name: str
    display_name: str
    description: str
    suitable_for: tuple[str, ...]
    dark: bool
    radius: str
    variants: dict[str, tuple[str, ...]] = field(default_factory=dict)
    document: str = _DOCUMENT
    css: str = _BASE_CSS

    def supports(self, section: str, variant: str) -> bool:
        return variant in self.variants.get(section, ())

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "suitable_for": list(self.suitable_for),
            "color_scheme": "dark" if self.dark else "light",
            "variants": {section: list(ids) for section, ids in self.variants.items()},
        }


TEMPLATES: dict[str, TemplateDescriptor] = {
    "atelier": TemplateDescriptor(
        name="atelier",
        display_name="Atelier",
        description="Warm, photo-forward layout for shops, salons and food businesses.",
        suitable_for=("salon", "artisan", "retail", "restaurant", "cafe", "bakery", "boutique"),
        dark=False,
        radius="16px",
        variants={
            "navbar": _ids(4),
            "hero": _ids(5),
            "about": _ids(5),
            "services": _ids(3),
            "featured": _ids(4),
            "gallery": _ids(2),
            "footer": _ids(5),
        },
    ),
    "studio": TemplateDescriptor(
        name="studio",
        display_name="Studio",
        description="Dark, professional layout for service providers and clinics.",
        suitable_for=("auto", "medical", "legal", "fitness", "technology", "repair", "clinic"),
        dark=True,
        radius="6px",
        variants={
            "navbar": _ids(4),
            "hero": _ids(3),
            "about": _ids(5),
            "services": _ids(3),
            "featured": _ids(4),
            "gallery": _ids(2),
            "footer": _ids(5),
        },
    ),
}


def get_template(name: str) -> TemplateDescriptor:
    template = TEMPLATES.get(name)
    if template is None:
        raise TemplateConfigError(f"Unknown template '{name}'")
    return template


def select_template(business_type: str | None) -> TemplateDescriptor:
    """Pick the first template whose suitability tags match the business type."""
    words = (business_type or "").lower().replace("-", " ").replace("/", " ").split()
    for template in TEMPLATES.values():
        if any(tag in words or tag == " ".join(words) for tag in template.suitable_for):
            return template
    return TEMPLATES[DEFAULT_TEMPLATE]


def list_templates() -> list[dict]:
    return [t.to_dict() for t in TEMPLATES.values()]
