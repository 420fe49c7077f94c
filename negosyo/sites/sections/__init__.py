"""Section renderers keyed by section name, then variant id."""

from negosyo.sites.sections import about, featured, footer, gallery, hero, navbar, services
from negosyo.sites.sections._common import SectionContext

SECTION_RENDERERS = {
    "navbar": navbar.VARIANTS,
    "hero": hero.VARIANTS,
    "about": about.VARIANTS,
    "services": services.VARIANTS,
    "featured": featured.VARIANTS,
    "gallery": gallery.VARIANTS,
    "footer": footer.VARIANTS,
}

__all__ = ["SECTION_RENDERERS", "SectionContext"]
