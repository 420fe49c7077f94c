"""Navigation bar variants."""

from negosyo.sites.sections._common import SectionContext, cta_button, esc, join, safe_href


def _links(ctx: SectionContext, css_class: str = "nav-links") -> str:
    links = ctx.content.navbar_links
    if not links:
        return ""
    items = "".join(
        f'<li><a href="{safe_href(link.href)}">{esc(link.label)}</a></li>' for link in links
    )
    return f'<ul class="{css_class}">{items}</ul>'


def _brand(ctx: SectionContext) -> str:
    return f'<a class="brand" href="#top">{esc(ctx.content.business_name)}</a>'


def _contact_button(ctx: SectionContext) -> str:
    return cta_button(ctx.content.hero_cta_label or "Contact Us", "#contact", "btn btn-small")


def navbar_1(ctx: SectionContext) -> str:
    return (
        '<header id="navbar" class="navbar navbar-v1">\n'
        f'<nav class="container nav-row">{join(_brand(ctx), _links(ctx))}</nav>\n'
        "</header>"
    )


def navbar_2(ctx: SectionContext) -> str:
    return (
        '<header id="navbar" class="navbar navbar-v2">\n'
        f'<nav class="container nav-row">{join(_brand(ctx), _links(ctx), _contact_button(ctx))}</nav>\n'
        "</header>"
    )


def navbar_3(ctx: SectionContext) -> str:
    # Centered brand above the links.
    return (
        '<header id="navbar" class="navbar navbar-v3">\n'
        f'<nav class="container nav-stack">{join(_brand(ctx), _links(ctx, "nav-links nav-centered"))}</nav>\n'
        "</header>"
    )


def navbar_4(ctx: SectionContext) -> str:
    phone = ctx.content.contact.phone if ctx.content.contact else None
    topbar = f'<div class="topbar"><div class="container">{esc(phone)}</div></div>' if phone else ""
    return join(
        '<header id="navbar" class="navbar navbar-v4">',
        topbar,
        f'<nav class="container nav-row">{join(_brand(ctx), _links(ctx), _contact_button(ctx))}</nav>',
        "</header>",
    )


VARIANTS = {
    "1": navbar_1,
    "2": navbar_2,
    "3": navbar_3,
    "4": navbar_4,
}
