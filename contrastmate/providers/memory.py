"""In-memory document provider over an already-built node tree."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from contrastmate.document import FontName, Node, NodeType, TextStyle

logger = logging.getLogger(__name__)


class FontUnavailableError(RuntimeError):
    """Raised by :meth:`InMemoryDocument.load_font` for fonts not installed."""


class InMemoryDocument:
    """A document held entirely in memory.

    *available_fonts* restricts which fonts load successfully.  Entries are
    either ``"Family"`` (any style) or ``"Family/Style"``.  ``None`` means
    every font loads.
    """

    def __init__(
        self,
        root: Node,
        *,
        styles: Iterable[TextStyle] = (),
        available_fonts: Iterable[str] | None = None,
        current_page: Node | None = None,
        selection: Sequence[Node] = (),
        name: str = "file",
    ) -> None:
        if root.type != NodeType.DOCUMENT:
            raise ValueError("Document root must be a DOCUMENT node")
        pages = [c for c in root.children or () if c.is_page()]
        if not pages:
            raise ValueError("Document has no pages")

        self._name = name
        self._root = root
        self._styles = {s.id: s for s in styles}
        self._available = (
            None if available_fonts is None
            else {f.strip().lower() for f in available_fonts}
        )
        self._current_page = current_page or pages[0]
        self._selection: list[Node] = list(selection)
        self._index = {n.id: n for n in root.walk()}
        self.viewport: list[Node] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def root(self) -> Node:
        return self._root

    @property
    def pages(self) -> list[Node]:
        return [c for c in self._root.children or () if c.is_page()]

    @property
    def current_page(self) -> Node:
        return self._current_page

    def set_current_page(self, page: Node) -> None:
        if not page.is_page():
            raise ValueError(f"{page.name!r} is not a page")
        if page is not self._current_page:
            logger.debug("Switching current page to %s", page.name)
            self._current_page = page
            self._selection = []

    @property
    def selection(self) -> Sequence[Node]:
        return tuple(self._selection)

    def set_selection(self, nodes: Sequence[Node]) -> None:
        self._selection = list(nodes)

    async def get_style(self, style_id: str) -> TextStyle | None:
        return self._styles.get(style_id)

    async def load_font(self, font: FontName) -> None:
        if self._available is None:
            return
        family = font.family.lower()
        if family in self._available or f"{family}/{font.style.lower()}" in self._available:
            return
        raise FontUnavailableError(f"Font not available: {font.family} {font.style}")

    async def get_node_by_id(self, node_id: str) -> Node | None:
        return self._index.get(node_id)

    def scroll_and_zoom_into_view(self, nodes: Sequence[Node]) -> None:
        self.viewport = list(nodes)
