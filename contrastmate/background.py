"""Background color resolution for text layers.

A text layer's background is the first of, in order:

1. the nearest ancestor with a visible solid fill,
2. at that same level, a sibling drawn behind the text that overlaps it,
3. the page background,

or ``None`` when nothing applies.  Lookup failures at any level count as
"no color here" and never propagate.
"""

from __future__ import annotations

import logging

from contrastmate.document import Bounds, Node, NodeType, Paint
from contrastmate.models import Color

logger = logging.getLogger(__name__)


def first_visible_solid(paints: list[Paint]) -> Color | None:
    """Color of the first visible SOLID paint, with its opacity as alpha."""
    for paint in paints:
        if paint.is_visible_solid:
            return paint.effective_color()
    return None


def fill_color(node: Node) -> Color | None:
    """Solid fill color of *node*; ``None`` for missing or mixed fills."""
    if not node.has_fills():
        return None
    return first_visible_solid(node.fills)  # type: ignore[arg-type]


def _intersects(a: Bounds, b: Bounds) -> bool:
    return not (
        a.x + a.width <= b.x
        or b.x + b.width <= a.x
        or a.y + a.height <= b.y
        or b.y + b.height <= a.y
    )


def overlaps(node1: Node, node2: Node) -> bool:
    """Axis-aligned overlap of two nodes' absolute bounds.

    Touching edges do not overlap.  Missing bounds mean no overlap.
    """
    try:
        if node1.bounds is None or node2.bounds is None:
            return False
        return _intersects(node1.bounds, node2.bounds)
    except Exception:
        logger.debug("Overlap test failed for %s / %s", node1.id, node2.id, exc_info=True)
        return False


def sibling_background(text: Node, parent: Node) -> Color | None:
    """Fill of the nearest overlapping sibling painted behind *text*."""
    if not parent.has_children():
        return None

    children = parent.children or []
    try:
        index = next(i for i, c in enumerate(children) if c is text)
    except StopIteration:
        return None

    # Lower index paints first, i.e. further behind.
    for sibling in reversed(children[:index]):
        if not overlaps(text, sibling):
            continue
        color = fill_color(sibling)
        if color is not None:
            return color
    return None


def page_background(page: Node) -> Color | None:
    if not page.backgrounds:
        return None
    bg = page.backgrounds[0]
    if not bg.is_visible_solid:
        return None
    return bg.effective_color()


def find_background(text: Node) -> Color | None:
    """Resolve the color *text* is rendered against."""
    current = text.parent
    while current is not None and not current.is_page() and current.type != NodeType.DOCUMENT:
        try:
            color = fill_color(current)
            if color is None:
                color = sibling_background(text, current)
        except Exception:
            logger.debug("Background lookup failed at %s", current.id, exc_info=True)
            color = None
        if color is not None:
            return color
        current = current.parent

    if current is not None and current.is_page():
        try:
            return page_background(current)
        except Exception:
            logger.debug("Page background lookup failed for %s", current.id, exc_info=True)
    return None
