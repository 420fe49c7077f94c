"""About section variants."""

from negosyo.sites.sections._common import SectionContext, esc, img, join, section, text


def _headline(ctx: SectionContext) -> str:
    return ctx.content.about_headline or f"About {ctx.content.business_name}".strip()


def _highlights(ctx: SectionContext, css_class: str = "highlights") -> str:
    if not ctx.show("about_highlights") or not ctx.content.highlights:
        return ""
    items = "".join(f"<li>{esc(h)}</li>" for h in ctx.content.highlights)
    return f'<ul class="{css_class}">{items}</ul>'


def _paragraphs(ctx: SectionContext) -> str:
    about = ctx.content.about or ""
    return "".join(f"<p>{esc(p.strip())}</p>" for p in about.split("\n\n") if p.strip())


def about_1(ctx: SectionContext) -> str:
    """Text beside a single photo."""
    photo = img(ctx.image(0), _headline(ctx), "about-image")
    copy = join(text("h2", _headline(ctx)), _paragraphs(ctx), _highlights(ctx))
    layout = "split" if photo else "single"
    return section("about", "1", f'<div class="container {layout}"><div>{copy}</div>{photo}</div>')


def about_2(ctx: SectionContext) -> str:
    """Photo first, text second."""
    photo = img(ctx.image(0), _headline(ctx), "about-image")
    copy = join(text("h2", _headline(ctx)), _paragraphs(ctx), _highlights(ctx))
    layout = "split reverse" if photo else "single"
    return section("about", "2", f'<div class="container {layout}">{photo}<div>{copy}</div></div>')


def about_3(ctx: SectionContext) -> str:
    """Centered text, no imagery."""
    copy = join(text("h2", _headline(ctx)), _paragraphs(ctx), _highlights(ctx, "highlights inline"))
    return section("about", "3", f'<div class="container narrow centered">{copy}</div>')


def about_4(ctx: SectionContext) -> str:
    """Two stacked photos next to the copy; one photo collapses to a single image."""
    photos = [img(ctx.image(i), _headline(ctx), "about-image") for i in range(min(2, len(ctx.images)))]
    mosaic = f'<div class="mosaic">{"".join(photos)}</div>' if photos else ""
    copy = join(text("h2", _headline(ctx)), _paragraphs(ctx), _highlights(ctx))
    layout = "split" if mosaic else "single"
    return section("about", "4", f'<div class="container {layout}"><div>{copy}</div>{mosaic}</div>')


def about_5(ctx: SectionContext) -> str:
    """Highlights as stat cards under the copy."""
    cards = ""
    if ctx.show("about_highlights") and ctx.content.highlights:
        cards = '<div class="grid cards">' + "".join(
            f'<div class="card stat">{esc(h)}</div>' for h in ctx.content.highlights
        ) + "</div>"
    copy = join(
        text("span", ctx.content.business_type, "badge"),
        text("h2", _headline(ctx)),
        _paragraphs(ctx),
    )
    return section("about", "5", join(f'<div class="container">{copy}', cards, "</div>"))


VARIANTS = {
    "1": about_1,
    "2": about_2,
    "3": about_3,
    "4": about_4,
    "5": about_5,
}
