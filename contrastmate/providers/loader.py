"""Build node trees from Figma REST API shaped data.

The same shape is accepted from ``GET /v1/files/:key`` responses and from
local ``.json`` / ``.yaml`` document files.  Local files may add three
top-level keys the REST API does not return:

``textStyles``
    mapping of style id to a TypeStyle-shaped dict with an optional ``name``
``selection``
    list of node ids selected on the current page
``availableFonts``
    list of ``"Family"`` or ``"Family/Style"`` entries that load successfully
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

import yaml

from contrastmate.document import (
    MIXED,
    Bounds,
    FontName,
    LetterSpacing,
    LineHeightValue,
    Node,
    NodeType,
    Paint,
    TextRun,
    TextStyle,
    Uniform,
)
from contrastmate.models import Color, LineHeightUnit
from contrastmate.providers.memory import InMemoryDocument

logger = logging.getLogger(__name__)

_WEIGHT_STYLE_NAMES = {
    100: "Thin",
    200: "ExtraLight",
    300: "Light",
    400: "Regular",
    500: "Medium",
    600: "SemiBold",
    700: "Bold",
    800: "ExtraBold",
    900: "Black",
}


def _color(data: dict[str, Any] | None) -> Color:
    data = data or {}
    return Color(
        float(data.get("r", 0.0)),
        float(data.get("g", 0.0)),
        float(data.get("b", 0.0)),
        float(data.get("a", 1.0)),
    )


def _paint(data: dict[str, Any]) -> Paint:
    return Paint(
        type=str(data.get("type", "SOLID")),
        color=_color(data.get("color")),
        opacity=float(data.get("opacity", 1.0)),
        visible=bool(data.get("visible", True)),
    )


def _fills(data: Any) -> Any:
    if data is None:
        return None
    if data == "mixed":
        return MIXED
    return [_paint(p) for p in data]


def _bounds(data: dict[str, Any] | None) -> Bounds | None:
    if not data:
        return None
    return Bounds(
        float(data.get("x", 0.0)),
        float(data.get("y", 0.0)),
        float(data.get("width", 0.0)),
        float(data.get("height", 0.0)),
    )


def _font_style(type_style: dict[str, Any]) -> str:
    """Style name from a TypeStyle; derived from weight/italic when absent."""
    if type_style.get("fontStyle"):
        return str(type_style["fontStyle"])
    weight = int(type_style.get("fontWeight", 400))
    name = _WEIGHT_STYLE_NAMES.get(round(weight / 100) * 100, "Regular")
    if type_style.get("italic"):
        name = "Italic" if name == "Regular" else f"{name} Italic"
    return name


def _line_height(type_style: dict[str, Any]) -> LineHeightValue | None:
    raw = type_style.get("lineHeight")
    if isinstance(raw, dict):
        unit = LineHeightUnit(str(raw.get("unit", "AUTO")))
        return LineHeightValue(float(raw.get("value", 0.0)), unit)

    unit = type_style.get("lineHeightUnit")
    if unit == "PIXELS" and "lineHeightPx" in type_style:
        return LineHeightValue(float(type_style["lineHeightPx"]), LineHeightUnit.PIXELS)
    if unit == "FONT_SIZE_%":
        pct = type_style.get("lineHeightPercentFontSize", 100.0)
        return LineHeightValue(float(pct), LineHeightUnit.PERCENT)
    if unit == "INTRINSIC_%":
        return LineHeightValue(0.0, LineHeightUnit.AUTO)
    return None


def _letter_spacing(type_style: dict[str, Any]) -> LetterSpacing | None:
    raw = type_style.get("letterSpacing")
    if raw is None:
        return None
    if isinstance(raw, dict):
        return LetterSpacing(float(raw.get("value", 0.0)), str(raw.get("unit", "PIXELS")))
    return LetterSpacing(float(raw), "PIXELS")


def parse_text_style(style_id: str, data: dict[str, Any], name: str = "") -> TextStyle:
    """Build a :class:`TextStyle` from a TypeStyle-shaped dict."""
    return TextStyle(
        id=style_id,
        name=name or str(data.get("name", "")),
        font_name=FontName(str(data.get("fontFamily", "Unknown")), _font_style(data)),
        font_size=float(data.get("fontSize", 12.0)),
        line_height=_line_height(data) or LineHeightValue(),
        letter_spacing=_letter_spacing(data) or LetterSpacing(),
    )


def _apply_text(node: Node, data: dict[str, Any]) -> None:
    node.characters = str(data.get("characters", ""))
    style: dict[str, Any] = data.get("style") or {}

    if "fontFamily" in style:
        node.font_name = Uniform(FontName(str(style["fontFamily"]), _font_style(style)))
    if "fontSize" in style:
        node.font_size = Uniform(float(style["fontSize"]))
    line_height = _line_height(style)
    if line_height is not None:
        node.line_height = Uniform(line_height)
    letter_spacing = _letter_spacing(style)
    if letter_spacing is not None:
        node.letter_spacing = Uniform(letter_spacing)

    style_refs = data.get("styles") or {}
    if "text" in style_refs:
        node.text_style_id = Uniform(str(style_refs["text"]))
    elif data.get("textStyleId") == "mixed":
        node.text_style_id = MIXED
    elif data.get("textStyleId"):
        node.text_style_id = Uniform(str(data["textStyleId"]))

    _apply_overrides(node, style, data)


def _apply_overrides(node: Node, base: dict[str, Any], data: dict[str, Any]) -> None:
    """Mark font name/size mixed when per-character overrides change them."""
    overrides: list[int] = data.get("characterStyleOverrides") or []
    table: dict[str, dict[str, Any]] = data.get("styleOverrideTable") or {}
    if not overrides or not table:
        return

    def run_style(key: int) -> dict[str, Any]:
        return {**base, **table.get(str(key), {})} if key else base

    keys = overrides + [0] * (len(node.characters) - len(overrides))
    runs: list[TextRun] = []
    start = 0
    for i in range(1, len(keys) + 1):
        if i == len(keys) or keys[i] != keys[start]:
            s = run_style(keys[start])
            runs.append(
                TextRun(
                    start=start,
                    end=i,
                    font_name=FontName(str(s.get("fontFamily", "Unknown")), _font_style(s)),
                    font_size=float(s.get("fontSize", 12.0)),
                )
            )
            start = i

    if len({r.font_name for r in runs}) > 1:
        node.font_name = MIXED
    if len({r.font_size for r in runs}) > 1:
        node.font_size = MIXED
    node.runs = runs


def parse_node(data: dict[str, Any]) -> Node:
    """Recursively build a :class:`Node` from a REST node dict."""
    if "id" not in data:
        raise ValueError(f"Node without id: {data.get('name', '<unnamed>')!r}")

    node_type = NodeType.parse(str(data.get("type", "OTHER")))
    node = Node(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        type=node_type,
        visible=bool(data.get("visible", True)),
        fills=_fills(data.get("fills")),
        bounds=_bounds(data.get("absoluteBoundingBox")),
    )

    if node_type == NodeType.PAGE:
        if data.get("backgrounds"):
            node.backgrounds = [_paint(p) for p in data["backgrounds"]]
        elif data.get("backgroundColor"):
            bg = _color(data["backgroundColor"])
            node.backgrounds = [Paint(color=bg.with_alpha(1.0), opacity=bg.a)]

    if node_type == NodeType.TEXT:
        _apply_text(node, data)

    if "children" in data:
        node.children = []
        for child in data["children"] or ():
            node.append(parse_node(child))

    return node


def load_document(
    data: dict[str, Any],
    *,
    styles: Iterable[TextStyle] = (),
    available_fonts: Iterable[str] | None = None,
    name: str = "file",
) -> InMemoryDocument:
    """Build an :class:`InMemoryDocument` from a REST-shaped file dict."""
    if "document" not in data:
        raise ValueError("Missing 'document' key")

    root = parse_node(data["document"])
    if root.type != NodeType.DOCUMENT:
        raise ValueError(f"Top-level node must be DOCUMENT, got {root.type.value}")

    all_styles = list(styles)
    meta = data.get("styles") or {}
    for style_id, type_style in (data.get("textStyles") or {}).items():
        style_name = (meta.get(style_id) or {}).get("name", "")
        all_styles.append(parse_text_style(style_id, type_style, style_name))

    if available_fonts is None and "availableFonts" in data:
        available_fonts = data["availableFonts"]

    doc = InMemoryDocument(
        root,
        styles=all_styles,
        available_fonts=available_fonts,
        name=name,
    )

    selected_ids = data.get("selection") or []
    if selected_ids:
        index = {n.id: n for n in root.walk()}
        selected = [index[i] for i in selected_ids if i in index]
        missing = set(selected_ids) - {n.id for n in selected}
        if missing:
            logger.warning("Ignoring unknown selection ids: %s", ", ".join(sorted(missing)))
        doc.set_selection(selected)

    return doc


def load_document_file(
    path: Path, *, available_fonts: Iterable[str] | None = None
) -> InMemoryDocument:
    """Load a ``.json`` or ``.yaml``/``.yml`` document file."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        raw = yaml.safe_load(text) or {}
    else:
        raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected a mapping at the top level")
    return load_document(raw, available_fonts=available_fonts)
