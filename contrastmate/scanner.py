"""Scan engine: walk a document subtree and audit every text layer.

Traversal is depth-first pre-order, one node at a time, so record order and
progress counts are reproducible.  The timeout is cooperative and checked
only between top-level roots; a single very large root can overrun it.
"""

from __future__ import annotations

import inspect
import logging
import re
import time
from typing import Callable, Sequence

from contrastmate.background import find_background, first_visible_solid
from contrastmate.document import Node
from contrastmate.fonts import resolve_font
from contrastmate.models import (
    BLACK,
    DEFAULT_TIMEOUT_MS,
    WHITE,
    Color,
    IssueType,
    ScanOptions,
    ScanResult,
    TextLayerRecord,
)
from contrastmate.providers.base import DocumentProvider
from contrastmate.utils.contrast import contrast_with_alpha
from contrastmate.utils.wcag import is_large_text, passes_aa, wcag_level

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = WHITE
PROGRESS_INTERVAL_MS = 100
DISPLAY_TEXT_LIMIT = 50

_WHITESPACE = re.compile(r"\s+")


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


def truncate_text(text: str, max_length: int = DISPLAY_TEXT_LIMIT) -> str:
    """Collapse whitespace and shorten *text* for display."""
    cleaned = _WHITESPACE.sub(" ", text).strip()
    if len(cleaned) <= max_length:
        return cleaned
    return cleaned[: max_length - 3] + "..."


def parent_name(node: Node) -> str:
    if node.parent is None:
        return "Root"
    if node.parent.is_page():
        return "Page"
    return node.parent.name or "Unknown"


def text_color(node: Node) -> Color:
    """Text fill color; opaque black when the node has no visible solid fill."""
    if not node.has_fills():
        return BLACK
    return first_visible_solid(node.fills) or BLACK  # type: ignore[arg-type]


async def process_text_node(provider: DocumentProvider, node: Node) -> TextLayerRecord | None:
    """Audit a single text node.  Empty or whitespace-only text yields None."""
    if not node.characters.strip():
        return None

    font_info = await resolve_font(provider, node)
    fg = text_color(node)
    background = find_background(node)

    issue = IssueType.NONE
    if background is not None:
        ratio = contrast_with_alpha(fg, background)
    else:
        ratio = contrast_with_alpha(fg, DEFAULT_BACKGROUND)
        issue = IssueType.NO_BACKGROUND

    large = is_large_text(font_info.size, font_info.weight)
    level = wcag_level(ratio, large)

    if font_info.is_missing:
        issue = IssueType.MISSING_FONT
    elif not passes_aa(ratio, large_text=large):
        issue = IssueType.CONTRAST_FAIL

    bounds = node.bounds
    return TextLayerRecord(
        id=node.id,
        name=node.name,
        characters=truncate_text(node.characters),
        full_characters=node.characters,
        font_info=font_info,
        text_color=fg,
        background_color=background,
        contrast_ratio=ratio,
        wcag_level=level,
        is_large_text=large,
        x=bounds.x if bounds else 0.0,
        y=bounds.y if bounds else 0.0,
        width=bounds.width if bounds else 0.0,
        height=bounds.height if bounds else 0.0,
        parent_name=parent_name(node),
        issue_type=issue,
    )


async def scan_node(
    provider: DocumentProvider,
    node: Node,
    records: list[TextLayerRecord],
    options: ScanOptions,
) -> None:
    """Append records for *node* and its descendants to *records*.

    Depth-first pre-order over an explicit stack; nesting depth is not
    limited by the recursion limit.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        if not options.include_hidden_layers and not current.visible:
            continue

        if current.is_text():
            try:
                record = await process_text_node(provider, current)
            except Exception:
                logger.warning(
                    "Skipping text layer %s (%s)", current.id, current.name, exc_info=True
                )
                record = None
            if record is not None:
                records.append(record)

        stack.extend(reversed(current.children or ()))


async def scan_selection(
    provider: DocumentProvider,
    options: ScanOptions | None = None,
    *,
    roots: Sequence[Node] | None = None,
    clock: Callable[[], float] = _monotonic_ms,
    wall_clock: Callable[[], float] = time.time,
) -> ScanResult:
    """Scan the given roots, the current selection, or the whole current page.

    *clock* returns milliseconds and drives timeout, throttling and duration;
    *wall_clock* returns epoch seconds for the result timestamp.
    """
    options = options or ScanOptions()
    timeout = options.timeout_ms if options.timeout_ms is not None else DEFAULT_TIMEOUT_MS
    start = clock()
    timestamp = wall_clock() * 1000
    records: list[TextLayerRecord] = []
    timed_out = False
    last_report: float | None = None

    async def report_progress(force: bool = False) -> None:
        nonlocal last_report
        if options.on_progress is None:
            return
        now = clock()
        if force or last_report is None or now - last_report > PROGRESS_INTERVAL_MS:
            last_report = now
            out = options.on_progress(len(records))
            if inspect.isawaitable(out):
                await out

    if roots is None:
        roots = provider.selection or provider.current_page.children or []

    for root in list(roots):
        elapsed = clock() - start
        if elapsed > timeout:
            logger.warning("Scan timeout after %.0fms (limit: %.0fms)", elapsed, timeout)
            timed_out = True
            break
        await scan_node(provider, root, records, options)
        await report_progress()

    await report_progress(force=True)

    return ScanResult(
        text_layers=tuple(records),
        scan_duration_ms=clock() - start,
        timestamp=timestamp,
        timed_out=timed_out,
    )
