"""WCAG 2.1 conformance classification for text.

Large text is 14pt bold or 18pt regular.  At 96 DPI that is 18.67px and
24px; both boundaries are inclusive.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

from contrastmate.models import WCAGLevel

AA_NORMAL = 4.5
AA_LARGE = 3.0
AAA_NORMAL = 7.0
AAA_LARGE = 4.5

LARGE_BOLD_PX = 18.67
LARGE_REGULAR_PX = 24.0
BOLD_WEIGHT = 700

_WEIGHT_NAMES: dict[str, int] = {
    "thin": 100,
    "hairline": 100,
    "extralight": 200,
    "ultralight": 200,
    "light": 300,
    "normal": 400,
    "regular": 400,
    "medium": 500,
    "semibold": 600,
    "demibold": 600,
    "bold": 700,
    "extrabold": 800,
    "ultrabold": 800,
    "black": 900,
    "heavy": 900,
}

_NON_ALPHA = re.compile(r"[^a-z]")


def parse_font_weight(weight: str) -> int:
    """Map a semantic weight name (``"Semi Bold"``, ``"black"``) to 100-900.

    Unrecognised names map to 400.
    """
    normalized = _NON_ALPHA.sub("", weight.lower())
    return _WEIGHT_NAMES.get(normalized, 400)


def is_large_text(size: float, weight: int | str) -> bool:
    """Whether text of *size* px and *weight* counts as large."""
    if isinstance(weight, str):
        weight = parse_font_weight(weight)
    if weight >= BOLD_WEIGHT:
        return size >= LARGE_BOLD_PX
    return size >= LARGE_REGULAR_PX


def wcag_level(ratio: float, is_large: bool) -> WCAGLevel:
    """Highest level reached by *ratio* for text of the given size class."""
    if is_large:
        if ratio >= AAA_LARGE:
            return WCAGLevel.AAA
        if ratio >= AA_LARGE:
            return WCAGLevel.AA_LARGE
        return WCAGLevel.FAIL

    if ratio >= AAA_NORMAL:
        return WCAGLevel.AAA
    if ratio >= AA_NORMAL:
        return WCAGLevel.AA
    return WCAGLevel.FAIL


def passes_aa(ratio: float, *, large_text: bool = False) -> bool:
    """Check whether a contrast ratio meets WCAG AA.

    Normal text: 4.5:1 minimum.
    Large text: 3:1 minimum.
    """
    threshold = AA_LARGE if large_text else AA_NORMAL
    return ratio >= threshold


def passes_aaa(ratio: float, *, large_text: bool = False) -> bool:
    """Check whether a contrast ratio meets WCAG AAA (7:1, or 4.5:1 large)."""
    threshold = AAA_LARGE if large_text else AAA_NORMAL
    return ratio >= threshold


def format_ratio(ratio: float) -> str:
    """Format a ratio for display, e.g. ``4.57:1``."""
    rounded = Decimal(repr(ratio)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{rounded}:1"


def suggested_contrast(is_large: bool) -> str:
    """Minimum AA ratio to aim for, as display text."""
    return f"{AA_LARGE if is_large else AA_NORMAL}:1"
