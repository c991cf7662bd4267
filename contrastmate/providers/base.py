"""Base protocol for document providers.

A provider is the scanner's only window onto a design document: a read-only
node tree plus a handful of host capabilities (style lookup, font loading,
page and selection state, viewport control).
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from contrastmate.document import FontName, Node, TextStyle


@runtime_checkable
class DocumentProvider(Protocol):
    """Interface every document source must implement.

    Implementations are not required to be safe for concurrent calls; the
    scanner awaits one call at a time.
    """

    @property
    def name(self) -> str:
        """Provider identifier (e.g. 'file', 'figma')."""
        ...

    @property
    def root(self) -> Node:
        """The DOCUMENT node."""
        ...

    @property
    def current_page(self) -> Node:
        ...

    def set_current_page(self, page: Node) -> None:
        ...

    @property
    def selection(self) -> Sequence[Node]:
        """Nodes currently selected on the current page."""
        ...

    def set_selection(self, nodes: Sequence[Node]) -> None:
        ...

    async def get_style(self, style_id: str) -> TextStyle | None:
        """Resolve a text style reference, or None if unknown."""
        ...

    async def load_font(self, font: FontName) -> None:
        """Make *font* usable.  Raises if the font cannot be loaded."""
        ...

    async def get_node_by_id(self, node_id: str) -> Node | None:
        """Look a node up anywhere in the document, including other pages."""
        ...

    def scroll_and_zoom_into_view(self, nodes: Sequence[Node]) -> None:
        ...


@runtime_checkable
class DocumentSource(Protocol):
    """A place documents are loaded from (local file, Figma REST API)."""

    @property
    def name(self) -> str:
        ...

    async def fetch(self, location: str) -> DocumentProvider:
        """Load the document at *location* (a path or a file key)."""
        ...

    async def is_available(self) -> bool:
        ...
