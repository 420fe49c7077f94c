"""Render a complete HTML document from template, content, customizations and photos.

``render`` is a pure function: it reads nothing but its arguments, and equal
arguments always produce byte-identical output. Persistence is the caller's job.
"""

from __future__ import annotations

import re
from typing import Sequence

from negosyo.core.exceptions import TemplateConfigError
from negosyo.schemas.content import SECTIONS, Customizations, PhotoRef, WebsiteContentData
from negosyo.sites.content import ContentSource, normalize
from negosyo.sites.registry import TemplateDescriptor, get_template
from negosyo.sites.sections import SECTION_RENDERERS, SectionContext
from negosyo.sites.sections._common import esc
from negosyo.sites.themes import font_links, get_font_pairing, resolve_palette, theme_css

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")

# Sections that take photos, and how many each wants by default.
_IMAGE_SLOTS = {"hero": 3, "about": 2, "services": 1, "featured": 0, "gallery": 0}


def _as_photo(photo: PhotoRef | str | dict) -> PhotoRef:
    if isinstance(photo, PhotoRef):
        return photo
    if isinstance(photo, str):
        return PhotoRef(url=photo)
    return PhotoRef(**photo)


def allocate_images(content: WebsiteContentData, photos: Sequence[PhotoRef]) -> dict[str, tuple[str, ...]]:
    """Assign photo URLs to sections.

    Explicit ``content.images[section]`` wins. Otherwise photos are dealt out in
    order (hero first, then about, then services) and reused from the start
    when the set runs short. Featured items fall back to photos after the
    about slots; the gallery always shows the whole set. With no photos at all
    every section gets an empty tuple and drops its image slots.
    """
    urls = [p.url for p in photos if p.url]
    allocation: dict[str, tuple[str, ...]] = {}
    cursor = 0
    for section, slots in _IMAGE_SLOTS.items():
        explicit = content.images.get(section)
        if explicit:
            allocation[section] = tuple(explicit)
            continue
        if not urls:
            allocation[section] = ()
            continue
        if section == "gallery":
            allocation[section] = tuple(urls)
        elif section == "featured":
            allocation[section] = tuple(urls[cursor:] + urls[:cursor])
        else:
            allocation[section] = tuple(urls[(cursor + i) % len(urls)] for i in range(min(slots, len(urls))))
            cursor += 1 if section == "hero" else slots
    allocation["navbar"] = ()
    allocation["footer"] = ()
    return allocation


def _check_variants(template: TemplateDescriptor, selection: dict[str, str]) -> None:
    for section in SECTIONS:
        variant = selection[f"{section}_style"]
        if variant not in SECTION_RENDERERS[section] or not template.supports(section, variant):
            raise TemplateConfigError(
                f"Template '{template.name}' has no {section} variant '{variant}'"
            )


def render_sections(
    template: TemplateDescriptor,
    content: WebsiteContentData,
    selection: dict[str, str],
    photos: Sequence[PhotoRef],
) -> dict[str, str]:
    allocation = allocate_images(content, photos)
    rendered: dict[str, str] = {}
    for section in SECTIONS:
        if not content.is_visible(section):
            rendered[section] = ""
            continue
        renderer = SECTION_RENDERERS[section][selection[f"{section}_style"]]
        rendered[section] = renderer(SectionContext(content=content, images=allocation[section]))
    return rendered


def render(
    template: str,
    content: ContentSource | WebsiteContentData,
    customizations: Customizations | dict | None,
    photos: Sequence[PhotoRef | str | dict] = (),
) -> str:
    """Render the final HTML document.

    Raises ``TemplateConfigError`` for an unknown template or variant. An
    unknown color scheme or font pairing falls back to the defaults. Missing
    content fields are tolerated.
    """
    descriptor = get_template(template)
    if isinstance(content, WebsiteContentData):
        data = content
    else:
        data = normalize(content)
    if customizations is None:
        customizations = Customizations()
    elif isinstance(customizations, dict):
        customizations = Customizations.model_validate(customizations)
    selection = customizations.resolved()
    _check_variants(descriptor, selection)

    photo_refs = [_as_photo(p) for p in photos]
    palette = resolve_palette(selection["color_scheme"], photo_refs, dark_template=descriptor.dark)
    pairing = get_font_pairing(selection["font_pairing"])

    values = render_sections(descriptor, data, selection, photo_refs)
    values.update({
        "title": esc(data.business_name or "Welcome"),
        "description": esc(data.tagline or data.about or data.business_name),
        "fonts": font_links(pairing),
        "theme": theme_css(palette, pairing),
        "radius": descriptor.radius,
        "css": descriptor.css,
        "template": descriptor.name,
    })
    # Single pass over the base document so inserted content is never re-scanned.
    html = _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), ""), descriptor.document)
    return re.sub(r"\n{2,}", "\n", html)
