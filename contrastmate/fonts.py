"""Font resolution for text layers.

A layer's text style (when it references one) supplies family, style, size
and line height; the layer's own uniform values override size, line height
and letter spacing.  Availability is checked by asking the host to load the
font, and a failed load marks the font missing without aborting the scan.
"""

from __future__ import annotations

import logging

from contrastmate.document import FontName, LetterSpacing, LineHeightValue, Node, TextStyle, Uniform
from contrastmate.models import FontInfo, LineHeight, LineHeightUnit
from contrastmate.providers.base import DocumentProvider

logger = logging.getLogger(__name__)

_DEFAULT_FAMILY = "Unknown"
_DEFAULT_SIZE = 12.0

# Checked in order; first substring hit wins.
_STYLE_WEIGHTS: tuple[tuple[tuple[str, ...], int], ...] = (
    (("black", "heavy"), 900),
    (("extrabold", "ultrabold"), 800),
    (("bold",), 700),
    (("semibold", "demibold"), 600),
    (("medium",), 500),
    (("regular", "normal"), 400),
    (("light",), 300),
    (("extralight", "ultralight"), 200),
    (("thin", "hairline"), 100),
)


def weight_from_style(style: str) -> int:
    """Numeric weight for a font style name such as ``"Bold Italic"``."""
    normalized = style.lower()
    for keywords, weight in _STYLE_WEIGHTS:
        if any(k in normalized for k in keywords):
            return weight
    return 400


async def is_font_missing(provider: DocumentProvider, font: FontName) -> bool:
    """True when the host cannot load *font*."""
    try:
        await provider.load_font(font)
    except Exception:
        logger.debug("Font %s %s failed to load", font.family, font.style, exc_info=True)
        return True
    return False


async def _lookup_style(provider: DocumentProvider, node: Node) -> TextStyle | None:
    if not isinstance(node.text_style_id, Uniform) or not node.text_style_id.value:
        return None
    try:
        return await provider.get_style(node.text_style_id.value)
    except Exception:
        logger.warning("Failed to fetch text style for %s", node.id, exc_info=True)
        return None


def _line_height(value: LineHeightValue) -> LineHeight:
    return LineHeight(0.0 if value.unit == LineHeightUnit.AUTO else value.value, value.unit)


def _letter_spacing_px(spacing: LetterSpacing, font_size: float) -> float:
    if spacing.unit == "PERCENT":
        return spacing.value / 100 * font_size
    return spacing.value


async def resolve_font(provider: DocumentProvider, node: Node) -> FontInfo:
    """Return the :class:`FontInfo` for a text *node*."""
    font: FontName | None = None
    size = _DEFAULT_SIZE
    line_height = LineHeight()
    letter_spacing: LetterSpacing | None = None

    style = await _lookup_style(provider, node)
    if style is not None:
        font = style.font_name
        size = style.font_size
        line_height = _line_height(style.line_height)
        letter_spacing = style.letter_spacing

    if font is None:
        if isinstance(node.font_name, Uniform):
            font = node.font_name.value
        else:
            # Mixed fonts: the first character's font stands in for display.
            font = node.range_font_name(0, 1)

    if isinstance(node.font_size, Uniform):
        size = node.font_size.value
    elif style is None:
        size = node.range_font_size(0, 1) or size

    if isinstance(node.line_height, Uniform):
        line_height = _line_height(node.line_height.value)

    if isinstance(node.letter_spacing, Uniform):
        letter_spacing = node.letter_spacing.value

    is_missing = False
    if font is not None:
        is_missing = await is_font_missing(provider, font)

    family = font.family if font else _DEFAULT_FAMILY
    style_name = font.style if font else "normal"
    return FontInfo(
        family=family,
        size=size,
        weight=weight_from_style(style_name) if font else 400,
        line_height=line_height,
        letter_spacing=_letter_spacing_px(letter_spacing, size) if letter_spacing else 0.0,
        style=style_name,
        is_missing=is_missing,
    )
