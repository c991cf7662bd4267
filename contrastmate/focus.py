"""Bring a layer into view and select it, switching pages when needed."""

from __future__ import annotations

import logging

from contrastmate.document import Node
from contrastmate.models import FocusError, FocusResult
from contrastmate.providers.base import DocumentProvider

logger = logging.getLogger(__name__)


def _containing_page(node: Node) -> Node | None:
    parent = node.parent
    while parent is not None and not parent.is_page():
        parent = parent.parent
    return parent


async def focus_on_node(provider: DocumentProvider, node_id: str) -> FocusResult:
    """Center the viewport on *node_id* and make it the selection.

    Never raises; failures come back as a :class:`FocusResult`.
    """
    try:
        node = await provider.get_node_by_id(node_id)
        if node is None:
            logger.warning("Node with ID %s not found. It may have been deleted.", node_id)
            return FocusResult(
                success=False,
                error=FocusError.NOT_FOUND,
                message="Layer was not found. It may have been deleted or moved.",
            )

        if not node.is_scene_node():
            logger.warning("Node %s (%s) cannot be focused", node.name, node_id)
            return FocusResult(
                success=False,
                error=FocusError.NOT_FOCUSABLE,
                message=f'Cannot focus on "{node.name}". This type of layer cannot be selected.',
            )

        if node.bounds is None or node.bounds.is_empty:
            logger.warning("Node %s (%s) has no position information", node.name, node_id)
            return FocusResult(
                success=False,
                error=FocusError.NO_BOUNDS,
                message=f'Cannot focus on "{node.name}". Layer has no position information.',
            )

        page = _containing_page(node)
        if page is not None and page is not provider.current_page:
            provider.set_current_page(page)

        provider.scroll_and_zoom_into_view([node])
        provider.set_selection([node])
        return FocusResult(success=True)
    except Exception as exc:
        logger.error("Error focusing on node %s: %s", node_id, exc, exc_info=True)
        return FocusResult(
            success=False,
            error=FocusError.UNEXPECTED,
            message=f"An unexpected error occurred: {exc}",
        )
