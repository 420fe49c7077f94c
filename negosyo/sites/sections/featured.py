"""Featured items (products or projects) with optional testimonials."""

from negosyo.schemas.content import FeaturedItem
from negosyo.sites.sections._common import SectionContext, esc, img, join, section, text


def _header(ctx: SectionContext) -> str:
    c = ctx.content
    return join(
        text("h2", c.featured_headline or "Featured Products"),
        text("p", c.featured_subheadline, "section-subtitle"),
    )


def _image_for(ctx: SectionContext, item: FeaturedItem, index: int) -> str | None:
    return item.image or ctx.image(index)


def _tags(item: FeaturedItem) -> str:
    if not item.tags:
        return ""
    return '<div class="tags">' + "".join(f'<span class="tag">{esc(t)}</span>' for t in item.tags) + "</div>"


def _testimonial(ctx: SectionContext, item: FeaturedItem) -> str:
    quote = item.testimonial
    if not ctx.show("featured_testimonials") or not quote or not quote.quote:
        return ""
    author = f"<cite>{esc(quote.author)}</cite>" if quote.author else ""
    return f'<blockquote class="testimonial"><p>{esc(quote.quote)}</p>{author}</blockquote>'


def _card(ctx: SectionContext, item: FeaturedItem, index: int, with_quote: bool = True) -> str:
    return join(
        '<article class="card featured-item">',
        img(_image_for(ctx, item, index), item.title, "card-image"),
        text("h3", item.title),
        text("p", item.description),
        _tags(item),
        _testimonial(ctx, item) if with_quote else "",
        "</article>",
    )


def featured_1(ctx: SectionContext) -> str:
    """Three-up card grid."""
    cards = "".join(_card(ctx, item, i) for i, item in enumerate(ctx.content.featured_items))
    grid = f'<div class="grid cards">{cards}</div>' if cards else ""
    return section("featured", "1", join('<div class="container">', _header(ctx), grid, "</div>"))


def featured_2(ctx: SectionContext) -> str:
    """Alternating image/text rows."""
    rows = []
    for i, item in enumerate(ctx.content.featured_items):
        photo = img(_image_for(ctx, item, i), item.title, "row-image")
        layout = ("split reverse" if i % 2 else "split") if photo else "single"
        copy = join(text("h3", item.title), text("p", item.description), _tags(item), _testimonial(ctx, item))
        rows.append(f'<div class="{layout} featured-row">{photo}<div>{copy}</div></div>')
    return section("featured", "2", join('<div class="container">', _header(ctx), "".join(rows), "</div>"))


def featured_3(ctx: SectionContext) -> str:
    """Image cards with testimonials collected into a separate band."""
    items = ctx.content.featured_items
    cards = "".join(_card(ctx, item, i, with_quote=False) for i, item in enumerate(items))
    quotes = "".join(_testimonial(ctx, item) for item in items)
    return section(
        "featured",
        "3",
        join(
            '<div class="container">',
            _header(ctx),
            f'<div class="grid cards">{cards}</div>' if cards else "",
            f'<div class="quotes">{quotes}</div>' if quotes else "",
            "</div>",
        ),
    )


def featured_4(ctx: SectionContext) -> str:
    """First item as a spotlight, the rest as a compact list."""
    items = ctx.content.featured_items
    if not items:
        return section("featured", "4", join('<div class="container">', _header(ctx), "</div>"))
    spotlight = _card(ctx, items[0], 0)
    rest = "".join(
        f'<li>{text("strong", item.title)} {text("span", item.description)}</li>' for item in items[1:]
    )
    return section(
        "featured",
        "4",
        join(
            '<div class="container">',
            _header(ctx),
            f'<div class="spotlight">{spotlight}</div>',
            f'<ul class="featured-list">{rest}</ul>' if rest else "",
            "</div>",
        ),
    )


VARIANTS = {
    "1": featured_1,
    "2": featured_2,
    "3": featured_3,
    "4": featured_4,
}
