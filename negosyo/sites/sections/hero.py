"""Hero section variants. Variants that expect imagery collapse to text-only without photos."""

from negosyo.sites.sections._common import (
    SectionContext,
    css_url,
    cta_button,
    esc,
    img,
    join,
    section,
    text,
)


def _headline(ctx: SectionContext) -> str:
    c = ctx.content
    return c.hero_headline or c.business_name


def _subheadline(ctx: SectionContext) -> str | None:
    c = ctx.content
    return c.hero_subheadline or c.tagline


def _badge(ctx: SectionContext) -> str:
    if not ctx.show("hero_badge"):
        return ""
    return text("span", ctx.content.hero_badge, "badge")


def _button(ctx: SectionContext) -> str:
    if not ctx.show("hero_button"):
        return ""
    c = ctx.content
    return cta_button(c.hero_cta_label or "Get in Touch", c.hero_cta_link or "#contact")


def _testimonial(ctx: SectionContext) -> str:
    if not ctx.show("hero_testimonial") or not ctx.content.hero_testimonial:
        return ""
    return f'<blockquote class="hero-quote">{esc(ctx.content.hero_testimonial)}</blockquote>'


def _copy(ctx: SectionContext) -> str:
    return join(
        _badge(ctx),
        text("h1", _headline(ctx), "hero-title"),
        text("p", _subheadline(ctx), "hero-subtitle"),
        _button(ctx),
        _testimonial(ctx),
    )


def hero_1(ctx: SectionContext) -> str:
    """Full-bleed background photo with overlay copy."""
    photo = ctx.image(0)
    style = f' style="background-image: url(\'{css_url(photo)}\')"' if photo else ""
    body = f'<div class="hero-cover"{style}><div class="container hero-copy">{_copy(ctx)}</div></div>'
    return section("hero", "1", body, "hero" if photo else "hero hero-plain")


def hero_2(ctx: SectionContext) -> str:
    """Split layout: copy left, photo right."""
    photo = img(ctx.image(0), ctx.content.business_name, "hero-image")
    layout = "split" if photo else "single"
    body = f'<div class="container {layout}"><div class="hero-copy">{_copy(ctx)}</div>{photo}</div>'
    return section("hero", "2", body, "hero")


def hero_3(ctx: SectionContext) -> str:
    """Centered copy over a flat color band."""
    body = f'<div class="container hero-copy centered">{_copy(ctx)}</div>'
    return section("hero", "3", body, "hero hero-band")


def hero_4(ctx: SectionContext) -> str:
    """Copy with a strip of up to three photos below."""
    urls = []
    for i in range(min(3, len(ctx.images))):
        urls.append(img(ctx.image(i), ctx.content.business_name, "strip-image"))
    strip = f'<div class="photo-strip">{"".join(urls)}</div>' if urls else ""
    body = join(f'<div class="container hero-copy centered">{_copy(ctx)}</div>', strip)
    return section("hero", "4", body, "hero")


def hero_5(ctx: SectionContext) -> str:
    """Oversized headline with an inset photo card."""
    photo = img(ctx.image(0), ctx.content.business_name, "hero-card")
    body = join(
        '<div class="container hero-stack">',
        text("p", ctx.content.business_name, "eyebrow"),
        text("h1", _headline(ctx), "hero-title display"),
        photo,
        text("p", _subheadline(ctx), "hero-subtitle"),
        _button(ctx),
        "</div>",
    )
    return section("hero", "5", body, "hero")


VARIANTS = {
    "1": hero_1,
    "2": hero_2,
    "3": hero_3,
    "4": hero_4,
    "5": hero_5,
}
