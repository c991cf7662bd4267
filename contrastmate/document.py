"""Scene-graph node model read by the scanner and the focus operation.

Text properties that can vary across runs of a single text layer are held as
a tri-state: :class:`Uniform` wraps a single value, :data:`MIXED` marks a
property that differs between runs, and :data:`ABSENT` marks a property the
node does not carry.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Generic, Iterator, TypeVar, Union

from contrastmate.models import Color, LineHeightUnit

T = TypeVar("T")


class NodeType(str, enum.Enum):
    DOCUMENT = "DOCUMENT"
    PAGE = "CANVAS"
    FRAME = "FRAME"
    GROUP = "GROUP"
    COMPONENT = "COMPONENT"
    COMPONENT_SET = "COMPONENT_SET"
    INSTANCE = "INSTANCE"
    SECTION = "SECTION"
    RECTANGLE = "RECTANGLE"
    ELLIPSE = "ELLIPSE"
    POLYGON = "POLYGON"
    STAR = "STAR"
    VECTOR = "VECTOR"
    LINE = "LINE"
    BOOLEAN_OPERATION = "BOOLEAN_OPERATION"
    TEXT = "TEXT"
    SLICE = "SLICE"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: str) -> NodeType:
        if value == "PAGE":
            return cls.PAGE
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


# Node types that carry no visual bounds and so cannot be focused.
NON_SCENE_TYPES = frozenset({NodeType.DOCUMENT, NodeType.PAGE})


class _Mixed:
    _instance: _Mixed | None = None

    def __new__(cls) -> _Mixed:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MIXED"


class _Absent:
    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"


MIXED = _Mixed()
ABSENT = _Absent()


@dataclass(frozen=True)
class Uniform(Generic[T]):
    value: T


TriState = Union[Uniform[T], _Mixed, _Absent]


@dataclass(frozen=True)
class Paint:
    """A single entry of a fill list."""

    type: str = "SOLID"
    color: Color = Color(0.0, 0.0, 0.0, 1.0)
    opacity: float = 1.0
    visible: bool = True

    @property
    def is_visible_solid(self) -> bool:
        return self.visible and self.type == "SOLID"

    def effective_color(self) -> Color:
        """Paint color carrying the paint's own opacity as alpha."""
        return self.color.with_alpha(self.opacity)


@dataclass(frozen=True)
class Bounds:
    x: float
    y: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 and self.height <= 0


@dataclass(frozen=True)
class FontName:
    family: str
    style: str


@dataclass(frozen=True)
class LineHeightValue:
    value: float = 0.0
    unit: LineHeightUnit = LineHeightUnit.AUTO


@dataclass(frozen=True)
class LetterSpacing:
    value: float = 0.0
    unit: str = "PIXELS"  # PIXELS | PERCENT


@dataclass(frozen=True)
class TextStyle:
    """A shared text style referenced from text nodes by id."""

    id: str
    name: str
    font_name: FontName
    font_size: float
    line_height: LineHeightValue = field(default_factory=LineHeightValue)
    letter_spacing: LetterSpacing = field(default_factory=LetterSpacing)


@dataclass(frozen=True)
class TextRun:
    """Per-character-range font assignment of a mixed text node."""

    start: int
    end: int
    font_name: FontName
    font_size: float


@dataclass(eq=False)
class Node:
    """A node in the document tree.

    Capability checks (:meth:`has_fills`, :meth:`has_children`,
    :meth:`is_text`) are used instead of probing attributes.  ``fills`` is
    ``None`` for nodes that cannot carry paints and :data:`MIXED` when the
    fill list is indeterminate.
    """

    id: str
    name: str = ""
    type: NodeType = NodeType.FRAME
    visible: bool = True
    fills: list[Paint] | _Mixed | None = None
    children: list[Node] | None = None
    bounds: Bounds | None = None
    parent: Node | None = field(default=None, repr=False)

    # Text-only properties
    characters: str = ""
    font_name: TriState[FontName] = ABSENT
    font_size: TriState[float] = ABSENT
    line_height: TriState[LineHeightValue] = ABSENT
    letter_spacing: TriState[LetterSpacing] = ABSENT
    text_style_id: TriState[str] = ABSENT
    runs: list[TextRun] = field(default_factory=list)

    # Page-only
    backgrounds: list[Paint] = field(default_factory=list)

    def __post_init__(self) -> None:
        for child in self.children or ():
            child.parent = self

    def has_fills(self) -> bool:
        return isinstance(self.fills, list)

    def has_children(self) -> bool:
        return self.children is not None

    def is_text(self) -> bool:
        return self.type == NodeType.TEXT

    def is_page(self) -> bool:
        return self.type == NodeType.PAGE

    def is_scene_node(self) -> bool:
        return self.type not in NON_SCENE_TYPES

    def append(self, child: Node) -> Node:
        if self.children is None:
            self.children = []
        self.children.append(child)
        child.parent = self
        return child

    def walk(self) -> Iterator[Node]:
        """Yield this node and its descendants in depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children or ()))

    def range_font_name(self, start: int, end: int) -> FontName | None:
        """Font of the run covering ``[start, end)``, if any."""
        if isinstance(self.font_name, Uniform):
            return self.font_name.value
        for run in self.runs:
            if run.start <= start < run.end:
                return run.font_name
        return None

    def range_font_size(self, start: int, end: int) -> float | None:
        if isinstance(self.font_size, Uniform):
            return self.font_size.value
        for run in self.runs:
            if run.start <= start < run.end:
                return run.font_size
        return None
