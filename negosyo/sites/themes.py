"""Color schemes, font pairings and the CSS/head snippets built from them.

``auto`` derives a palette from the dominant colors recorded on the photo set.
When no photo carries a dominant color the fixed ``professional`` palette is
used instead, so rendering never depends on image analysis being available.
"""

from __future__ import annotations

import colorsys
import logging
import re
from dataclasses import dataclass
from typing import Sequence

from negosyo.schemas.content import PhotoRef

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True)
class Palette:
    primary: str
    secondary: str
    accent: str
    background: str
    light: str
    dark: bool = False


COLOR_SCHEMES: dict[str, Palette] = {
    "default": Palette("#6B8F71", "#1F2933", "#4ECDC4", "#F6F7F5", "#FFFFFF"),
    "blue": Palette("#3B82F6", "#1E3A8A", "#60A5FA", "#EFF6FF", "#FFFFFF"),
    "purple": Palette("#8B5CF6", "#4C1D95", "#A78BFA", "#F5F3FF", "#FFFFFF"),
    "orange": Palette("#F97316", "#7C2D12", "#FB923C", "#FFF7ED", "#FFFFFF"),
    "dark": Palette("#D1D5DB", "#000000", "#374151", "#111827", "#1F2933", dark=True),
}
# "Green Fresh" in the editor is the default palette under another name.
COLOR_SCHEMES["green"] = COLOR_SCHEMES["default"]
DEFAULT_SCHEME = "default"
DEFAULT_FONT_PAIRING = "modern"

AUTO_SCHEME = "auto"
AUTO_FALLBACK = Palette("#1E40AF", "#0F172A", "#F59E0B", "#F8FAFC", "#FFFFFF")


@dataclass(frozen=True)
class FontPairing:
    heading: str
    body: str


FONT_PAIRINGS: dict[str, FontPairing] = {
    "modern": FontPairing("Space Grotesk", "Inter"),
    "classic": FontPairing("Playfair Display", "Source Sans Pro"),
    "elegant": FontPairing("Cormorant Garamond", "Montserrat"),
    "bold": FontPairing("Bebas Neue", "Roboto"),
    "minimal": FontPairing("DM Sans", "DM Sans"),
    "professional": FontPairing("Poppins", "Open Sans"),
    "creative": FontPairing("Righteous", "Nunito"),
    "tech": FontPairing("Orbitron", "Exo 2"),
    "friendly": FontPairing("Quicksand", "Quicksand"),
    "luxury": FontPairing("Cinzel", "Lato"),
}


# ---------------------------------------------------------------------------
# Color math
# ---------------------------------------------------------------------------

def normalize_hex(value: str) -> str | None:
    match = _HEX_RE.match(value.strip()) if value else None
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits.upper()}"


def _rgb(hex_color: str) -> tuple[int, int, int]:
    digits = normalize_hex(hex_color)[1:]
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def _clamp(value: float) -> int:
    return max(0, min(255, int(round(value))))


def _hex(r: float, g: float, b: float) -> str:
    return "#{:02X}{:02X}{:02X}".format(_clamp(r), _clamp(g), _clamp(b))


def mix(color: str, other: str, weight: float) -> str:
    """Blend ``weight`` of ``other`` into ``color``."""
    r1, g1, b1 = _rgb(color)
    r2, g2, b2 = _rgb(other)
    return _hex(
        r1 + (r2 - r1) * weight,
        g1 + (g2 - g1) * weight,
        b1 + (b2 - b1) * weight,
    )


def rotate_hue(color: str, degrees: float) -> str:
    r, g, b = (c / 255 for c in _rgb(color))
    h, lightness, s = colorsys.rgb_to_hls(r, g, b)
    h = (h + degrees / 360.0) % 1.0
    r, g, b = colorsys.hls_to_rgb(h, lightness, s)
    return _hex(r * 255, g * 255, b * 255)


def contrast_color(hex_color: str) -> str:
    """Black or white text for a background, by YIQ brightness."""
    r, g, b = _rgb(hex_color)
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return "#000000" if yiq >= 140 else "#FFFFFF"


def palette_from_color(base: str) -> Palette:
    return Palette(
        primary=base,
        secondary=mix(base, "#000000", 0.6),
        accent=rotate_hue(base, 30),
        background=mix(base, "#FFFFFF", 0.92),
        light="#FFFFFF",
    )


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_palette(scheme_id: str, photos: Sequence[PhotoRef], *, dark_template: bool = False) -> Palette:
    if scheme_id == AUTO_SCHEME:
        palette = AUTO_FALLBACK
        for photo in photos:
            color = normalize_hex(photo.dominant_color or "")
            if color:
                palette = palette_from_color(color)
                break
    else:
        palette = COLOR_SCHEMES.get(scheme_id)
        if palette is None:
            logger.warning("Unknown color scheme '%s', using '%s'", scheme_id, DEFAULT_SCHEME)
            palette = COLOR_SCHEMES[DEFAULT_SCHEME]
    if dark_template and not palette.dark and scheme_id == AUTO_SCHEME:
        palette = Palette(
            primary=palette.primary,
            secondary="#000000",
            accent=palette.accent,
            background="#111827",
            light="#1F2933",
            dark=True,
        )
    return palette


def get_font_pairing(name: str) -> FontPairing:
    pairing = FONT_PAIRINGS.get(name)
    if pairing is None:
        logger.warning("Unknown font pairing '%s', using '%s'", name, DEFAULT_FONT_PAIRING)
        pairing = FONT_PAIRINGS[DEFAULT_FONT_PAIRING]
    return pairing


def font_links(pairing: FontPairing) -> str:
    families = []
    for family, weights in ((pairing.heading, "400;600;700"), (pairing.body, "300;400;600")):
        param = f"family={family.replace(' ', '+')}:wght@{weights}"
        if not any(p.startswith(f"family={family.replace(' ', '+')}:") for p in families):
            families.append(param)
    href = "https://fonts.googleapis.com/css2?" + "&".join(families) + "&display=swap"
    return (
        '<link rel="preconnect" href="https://fonts.googleapis.com">\n'
        f'<link href="{href}" rel="stylesheet">'
    )


def theme_css(palette: Palette, pairing: FontPairing) -> str:
    text = "#F3F4F6" if palette.dark else "#1F2933"
    muted = "rgba(255, 255, 255, 0.75)" if palette.dark else "rgba(31, 41, 51, 0.70)"
    hero_bg = palette.background if palette.dark else palette.secondary
    hero_text = palette.primary if palette.dark else "#FFFFFF"
    surface = palette.light if palette.dark else "#FFFFFF"
    return (
        '<style id="theme">\n'
        ":root {\n"
        f"  --primary: {palette.primary};\n"
        f"  --secondary: {palette.secondary};\n"
        f"  --accent: {palette.accent};\n"
        f"  --background: {palette.background};\n"
        f"  --light: {palette.light};\n"
        f"  --text: {text};\n"
        f"  --muted: {muted};\n"
        f"  --surface: {surface};\n"
        f"  --hero-bg: {hero_bg};\n"
        f"  --hero-text: {hero_text};\n"
        f"  --button-text: {contrast_color(palette.primary)};\n"
        f"  --font-heading: '{pairing.heading}', sans-serif;\n"
        f"  --font-body: '{pairing.body}', sans-serif;\n"
        "}\n"
        "</style>"
    )
