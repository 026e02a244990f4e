"""
Color parsing and interpolation helpers.

Theme colors arrive as strings in either hex (``#4dabf5``, ``#fff``) or CSS
functional form (``rgb(77, 171, 245)``, ``rgba(77, 171, 245, 0.5)``). Parsing
never raises: anything unrecognised resolves to ``DEFAULT_RGB``.
"""

from __future__ import annotations

import re
from typing import Tuple

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]

DEFAULT_RGB: RGB = (77, 171, 245)

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")
_FUNC_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([\d.]+)\s*)?\)$"
)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def parse_color(value) -> RGB:
    """
    Parse a hex or rgb()/rgba() string into an (r, g, b) triple.

    Args:
        value: Color string. Non-strings and malformed strings are accepted.

    Returns:
        Tuple of three ints in 0..255, or ``DEFAULT_RGB`` when parsing fails.
    """
    if not isinstance(value, str):
        return DEFAULT_RGB
    text = value.strip()

    m = _HEX_RE.match(text)
    if m:
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    m = _FUNC_RE.match(text)
    if m:
        r, g, b = (int(m.group(i)) for i in (1, 2, 3))
        if max(r, g, b) <= 255:
            return (r, g, b)

    return DEFAULT_RGB


def parse_alpha(value, default: float = 1.0) -> float:
    """Return the alpha component of an rgba() string, else `default`."""
    if isinstance(value, str):
        m = _FUNC_RE.match(value.strip())
        if m and m.group(4) is not None:
            try:
                return clamp(float(m.group(4)), 0.0, 1.0)
            except ValueError:
                return default
    return default


def to_rgba(value, alpha: float) -> RGBA:
    """Parse `value` and re-apply `alpha` (0..1) as a 0..255 channel."""
    r, g, b = parse_color(value)
    return (r, g, b, int(round(clamp(alpha, 0.0, 1.0) * 255)))


def adjust_opacity(value, opacity: float) -> str:
    """Return `value` as an ``rgba(...)`` string carrying `opacity`."""
    r, g, b = parse_color(value)
    return f"rgba({r}, {g}, {b}, {clamp(opacity, 0.0, 1.0):g})"


def interpolate_rgb(start: RGB, end: RGB, t: float) -> RGB:
    t = clamp(t, 0.0, 1.0)
    return tuple(int(round(a + (b - a) * t)) for a, b in zip(start, end))  # type: ignore[return-value]


def relative_luminance(rgb: RGB) -> float:
    """WCAG relative luminance of an sRGB triple."""

    def channel(v: int) -> float:
        c = v / 255.0
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = rgb
    return 0.2126 * channel(r) + 0.7152 * channel(g) + 0.0722 * channel(b)


def contrast_ratio(color_a, color_b) -> float:
    """Contrast ratio between two color strings (1.0 .. 21.0)."""
    l1 = relative_luminance(parse_color(color_a))
    l2 = relative_luminance(parse_color(color_b))
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def contrast_status(ratio: float) -> str:
    """Map a contrast ratio onto WCAG compliance labels."""
    if ratio >= 7:
        return "Excellent"
    if ratio >= 4.5:
        return "Good (AA)"
    if ratio >= 3:
        return "Fair (AA Large)"
    return "Poor"
