"""Photo gallery variants. Without photos the gallery renders an empty shell."""

from negosyo.sites.sections._common import SectionContext, img, join, section, text


def gallery_1(ctx: SectionContext) -> str:
    photos = "".join(img(url, ctx.content.business_name, "gallery-image") for url in ctx.images)
    grid = f'<div class="grid gallery">{photos}</div>' if photos else ""
    return section("gallery", "1", join('<div class="container">', text("h2", "Gallery"), grid, "</div>"))


def gallery_2(ctx: SectionContext) -> str:
    """Horizontal scroller."""
    photos = "".join(img(url, ctx.content.business_name, "scroller-image") for url in ctx.images)
    strip = f'<div class="scroller">{photos}</div>' if photos else ""
    return section("gallery", "2", join(text("h2", "Gallery", "container"), strip))


VARIANTS = {
    "1": gallery_1,
    "2": gallery_2,
}
