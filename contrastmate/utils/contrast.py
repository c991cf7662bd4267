"""WCAG 2.1 contrast ratio utilities.

Implements the relative luminance and contrast ratio calculations defined in
WCAG 2.1 Success Criterion 1.4.3 (Contrast, Minimum).  Colors are
:class:`~contrastmate.models.Color` values with channels in the 0-1 range.
"""

from __future__ import annotations

from contrastmate.models import Color

_OPAQUE_ALPHA = 0.999


def clamp(v: float) -> float:
    """Clamp a channel value into [0, 1]."""
    return max(0.0, min(1.0, v))


def srgb_to_linear(v: float) -> float:
    """Convert an sRGB channel (0-1) to linear light."""
    v = clamp(v)
    if v <= 0.04045:
        return v / 12.92
    return ((v + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    """Compute relative luminance for an sRGB color.

    Per WCAG 2.1: L = 0.2126*R + 0.7152*G + 0.0722*B
    where R, G, B are linearized sRGB values.  Alpha is ignored.
    """
    rl = srgb_to_linear(color.r)
    gl = srgb_to_linear(color.g)
    bl = srgb_to_linear(color.b)
    return 0.2126 * rl + 0.7152 * gl + 0.0722 * bl


def contrast_ratio(color1: Color, color2: Color) -> float:
    """Compute the WCAG contrast ratio between two colors.

    Returns a value between 1.0 (identical) and 21.0 (black on white).
    """
    l1 = relative_luminance(color1)
    l2 = relative_luminance(color2)
    lighter = max(l1, l2)
    darker = min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def composite_over(fg: Color, bg: Color) -> Color:
    """Blend *fg* over *bg* using only the foreground alpha.

    The result is opaque; the background is treated as fully revealed.
    Alpha outside [0, 1] is clamped.
    """
    a = clamp(fg.a)
    return Color(
        fg.r * a + bg.r * (1 - a),
        fg.g * a + bg.g * (1 - a),
        fg.b * a + bg.b * (1 - a),
        1.0,
    )


def contrast_with_alpha(fg: Color, bg: Color) -> float:
    """Contrast ratio of a possibly translucent foreground against *bg*.

    The background's own alpha is not composited further; callers pass an
    effectively opaque background.
    """
    if clamp(fg.a) >= _OPAQUE_ALPHA:
        return contrast_ratio(fg, bg)
    return contrast_ratio(composite_over(fg, bg), bg)


def _channel_to_byte(v: float) -> int:
    return int(clamp(v) * 255 + 0.5)


def to_hex(color: Color) -> str:
    """Return ``#rrggbb`` for *color*, ignoring alpha."""
    return "#{:02x}{:02x}{:02x}".format(
        _channel_to_byte(color.r),
        _channel_to_byte(color.g),
        _channel_to_byte(color.b),
    )


def hex_to_color(value: str) -> Color:
    """Parse ``#rrggbb`` (or ``rrggbb``) into an opaque color."""
    cleaned = value.strip().lstrip("#")
    if len(cleaned) != 6:
        raise ValueError(f"Expected 6 hex digits, got {value!r}")
    r, g, b = (int(cleaned[i:i + 2], 16) / 255 for i in (0, 2, 4))
    return Color(r, g, b, 1.0)


def color_description(color: Color) -> str:
    """Human-readable color, e.g. ``#336699 (50% opacity)``."""
    desc = to_hex(color)
    alpha = clamp(color.a)
    if alpha < 1:
        desc += f" ({int(alpha * 100 + 0.5)}% opacity)"
    return desc
