"""Footer variants, including the contact block anchored at ``#contact``."""

from negosyo.sites.sections._common import SectionContext, esc, join, safe_href, text


def _contact(ctx: SectionContext) -> str:
    contact = ctx.content.contact
    if not ctx.show("footer_contact") or contact is None:
        return ""
    lines = []
    if contact.phone:
        lines.append(f'<li><a href="tel:{esc(contact.phone)}">{esc(contact.phone)}</a></li>')
    if contact.email:
        lines.append(f'<li><a href="mailto:{esc(contact.email)}">{esc(contact.email)}</a></li>')
    if contact.address:
        lines.append(f"<li>{esc(contact.address)}</li>")
    if contact.whatsapp:
        lines.append(f"<li>WhatsApp: {esc(contact.whatsapp)}</li>")
    if contact.messenger:
        lines.append(f"<li>Messenger: {esc(contact.messenger)}</li>")
    if not lines:
        return ""
    return f'<ul class="contact-list">{"".join(lines)}</ul>'


def _social(ctx: SectionContext) -> str:
    if not ctx.show("footer_social") or not ctx.content.social_links:
        return ""
    links = "".join(
        f'<a href="{safe_href(link.href)}" rel="noopener">{esc(link.label)}</a>'
        for link in ctx.content.social_links
    )
    return f'<div class="social">{links}</div>'


def _blurb(ctx: SectionContext) -> str:
    return text("p", ctx.content.footer_description or ctx.content.tagline, "footer-blurb")


def _copyright(ctx: SectionContext) -> str:
    return f'<p class="copyright">&copy; {esc(ctx.content.business_name)}</p>'


def _wrap(variant: str, body: str) -> str:
    return f'<footer id="contact" class="footer footer-v{variant}">\n{body}\n</footer>'


def footer_1(ctx: SectionContext) -> str:
    return _wrap("1", join(
        '<div class="container split">',
        f"<div>{join(text('h3', ctx.content.business_name), _blurb(ctx))}</div>",
        f"<div>{join(text('h4', 'Contact'), _contact(ctx))}</div>",
        "</div>",
        f'<div class="container">{join(_social(ctx), _copyright(ctx))}</div>',
    ))


def footer_2(ctx: SectionContext) -> str:
    """Single centered column."""
    return _wrap("2", join(
        '<div class="container centered">',
        text("h3", ctx.content.business_name),
        _blurb(ctx),
        _contact(ctx),
        _social(ctx),
        _copyright(ctx),
        "</div>",
    ))


def footer_3(ctx: SectionContext) -> str:
    """Call-to-action band above the contact details."""
    label = ctx.content.hero_cta_label or "Get in Touch"
    return _wrap("3", join(
        '<div class="cta-band"><div class="container centered">',
        text("h2", f"Ready to visit {ctx.content.business_name}?" if ctx.content.business_name else None),
        text("p", label, "cta-label"),
        "</div></div>",
        f'<div class="container split">{_contact(ctx)}{_social(ctx)}</div>',
        f'<div class="container">{_copyright(ctx)}</div>',
    ))


def footer_4(ctx: SectionContext) -> str:
    """Three columns: brand, links, contact."""
    links = "".join(
        f'<li><a href="{safe_href(link.href)}">{esc(link.label)}</a></li>'
        for link in ctx.content.navbar_links
    )
    return _wrap("4", join(
        '<div class="container grid three-col">',
        f"<div>{join(text('h3', ctx.content.business_name), _blurb(ctx), _social(ctx))}</div>",
        f'<div><ul class="footer-links">{links}</ul></div>' if links else "<div></div>",
        f"<div>{_contact(ctx)}</div>",
        "</div>",
        f'<div class="container">{_copyright(ctx)}</div>',
    ))


def footer_5(ctx: SectionContext) -> str:
    """Minimal one-line footer."""
    return _wrap("5", join(
        '<div class="container nav-row">',
        _copyright(ctx),
        _contact(ctx),
        "</div>",
    ))


VARIANTS = {
    "1": footer_1,
    "2": footer_2,
    "3": footer_3,
    "4": footer_4,
    "5": footer_5,
}
