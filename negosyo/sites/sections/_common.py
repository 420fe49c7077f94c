"""Helpers shared by the section variant renderers."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

from negosyo.schemas.content import WebsiteContentData


@dataclass(frozen=True)
class SectionContext:
    """Inputs for rendering one section.

    ``images`` are the photo URLs already allocated to this section; it may be
    empty, in which case variants drop their image slots.
    """

    content: WebsiteContentData
    images: tuple[str, ...] = ()

    def image(self, index: int) -> str | None:
        if not self.images:
            return None
        return self.images[index % len(self.images)]

    def show(self, key: str) -> bool:
        return self.content.is_visible(key)


def esc(value: object) -> str:
    if value is None:
        return ""
    return escape(str(value), quote=True)


def safe_href(value: str | None) -> str:
    if not value:
        return "#"
    lowered = value.strip().lower()
    if lowered.startswith(("javascript:", "data:", "vbscript:")):
        return "#"
    return esc(value.strip())


def img(url: str | None, alt: str, css_class: str = "") -> str:
    if not url:
        return ""
    cls = f' class="{css_class}"' if css_class else ""
    return f'<img src="{safe_href(url)}" alt="{esc(alt)}"{cls} loading="lazy">'


def text(tag: str, value: str | None, css_class: str = "") -> str:
    if not value:
        return ""
    cls = f' class="{css_class}"' if css_class else ""
    return f"<{tag}{cls}>{esc(value)}</{tag}>"


def section(section_id: str, variant: str, body: str, css_class: str = "") -> str:
    classes = " ".join(c for c in ("section", f"{section_id}-v{variant}", css_class) if c)
    return f'<section id="{section_id}" class="{classes}">\n{body}\n</section>'


def join(*parts: str) -> str:
    return "\n".join(p for p in parts if p)


def cta_button(label: str | None, href: str | None, css_class: str = "btn") -> str:
    if not label:
        return ""
    return f'<a class="{css_class}" href="{safe_href(href or "#contact")}">{esc(label)}</a>'


def css_url(url: str) -> str:
    """Quote a URL for use inside ``url('...')`` in a style attribute."""
    for char, encoded in (("'", "%27"), ('"', "%22"), ("(", "%28"), (")", "%29"), (" ", "%20")):
        url = url.replace(char, encoded)
    return safe_href(url)
