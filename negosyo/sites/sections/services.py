"""Services section variants."""

from negosyo.sites.sections._common import SectionContext, esc, img, join, section, text

_DEFAULT_ICON = "&#9733;"


def _header(ctx: SectionContext) -> str:
    c = ctx.content
    return join(
        text("h2", c.services_headline or "Our Services"),
        text("p", c.services_subheadline, "section-subtitle"),
    )


def _items(ctx: SectionContext, with_icons: bool) -> list[str]:
    if not ctx.show("services_list"):
        return []
    items = []
    for service in ctx.content.services:
        icon = ""
        if with_icons:
            icon = f'<span class="icon">{esc(service.icon) if service.icon else _DEFAULT_ICON}</span>'
        items.append(join(
            '<div class="card service">',
            icon,
            text("h3", service.name),
            text("p", service.description),
            "</div>",
        ))
    return items


def services_1(ctx: SectionContext) -> str:
    """Card grid with icons."""
    grid = f'<div class="grid cards">{"".join(_items(ctx, True))}</div>' if ctx.content.services else ""
    return section("services", "1", join('<div class="container">', _header(ctx), grid, "</div>"))


def services_2(ctx: SectionContext) -> str:
    """Numbered list beside an optional image."""
    entries = []
    if ctx.show("services_list"):
        for index, service in enumerate(ctx.content.services, start=1):
            entries.append(
                f'<li><span class="num">{index:02d}</span><div>{text("h3", service.name)}'
                f'{text("p", service.description)}</div></li>'
            )
    listing = f'<ol class="service-list">{"".join(entries)}</ol>' if entries else ""
    photo = img(ctx.image(0), ctx.content.services_headline or "Services", "services-image")
    layout = "split" if photo else "single"
    return section(
        "services",
        "2",
        f'<div class="container {layout}"><div>{join(_header(ctx), listing)}</div>{photo}</div>',
    )


def services_3(ctx: SectionContext) -> str:
    """Compact two-column rows without icons."""
    rows = "".join(_items(ctx, False))
    grid = f'<div class="grid two-col">{rows}</div>' if rows else ""
    return section("services", "3", join('<div class="container">', _header(ctx), grid, "</div>"))


VARIANTS = {
    "1": services_1,
    "2": services_2,
    "3": services_3,
}
