"""Shared data models used across the scanner, session and reporters."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable


class WCAGLevel(str, enum.Enum):
    """Conformance level reached by a text layer."""

    AAA = "AAA"
    AA = "AA"
    AA_LARGE = "AA-Large"
    FAIL = "FAIL"


class IssueType(str, enum.Enum):
    """Accessibility issue attached to a text layer."""

    NONE = "none"
    CONTRAST_FAIL = "contrast-fail"
    MISSING_FONT = "missing-font"
    NO_BACKGROUND = "no-background"


class LineHeightUnit(str, enum.Enum):
    PIXELS = "PIXELS"
    PERCENT = "PERCENT"
    AUTO = "AUTO"


@dataclass(frozen=True)
class Color:
    """An RGBA color with every channel in the 0-1 range."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def with_alpha(self, a: float) -> Color:
        return Color(self.r, self.g, self.b, a)

    def to_dict(self) -> dict[str, float]:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}


BLACK = Color(0.0, 0.0, 0.0, 1.0)
WHITE = Color(1.0, 1.0, 1.0, 1.0)


@dataclass(frozen=True)
class LineHeight:
    value: float = 0.0
    unit: LineHeightUnit = LineHeightUnit.AUTO

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "unit": self.unit.value}


@dataclass(frozen=True)
class FontInfo:
    """Resolved font properties of a single text layer."""

    family: str = "Unknown"
    size: float = 12.0
    weight: int = 400
    line_height: LineHeight = field(default_factory=LineHeight)
    letter_spacing: float = 0.0
    style: str = "normal"
    is_missing: bool = False  # runtime could not load family + style

    def to_dict(self) -> dict[str, Any]:
        return {
            "fontFamily": self.family,
            "fontSize": self.size,
            "fontWeight": self.weight,
            "lineHeight": self.line_height.to_dict(),
            "letterSpacing": self.letter_spacing,
            "fontStyle": self.style,
            "isMissing": self.is_missing,
        }


@dataclass(frozen=True)
class TextLayerRecord:
    """Audit outcome for one text layer."""

    id: str
    name: str
    characters: str  # whitespace-collapsed, truncated for display
    full_characters: str
    font_info: FontInfo
    text_color: Color
    background_color: Color | None
    contrast_ratio: float
    wcag_level: WCAGLevel
    is_large_text: bool
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    parent_name: str = "Root"
    issue_type: IssueType = IssueType.NONE

    @property
    def has_issue(self) -> bool:
        return self.issue_type != IssueType.NONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "characters": self.characters,
            "fullCharacters": self.full_characters,
            "fontInfo": self.font_info.to_dict(),
            "textColor": self.text_color.to_dict(),
            "backgroundColor": (
                self.background_color.to_dict() if self.background_color else None
            ),
            "contrastRatio": self.contrast_ratio,
            "wcagLevel": self.wcag_level.value,
            "isLargeText": self.is_large_text,
            "position": {"x": self.x, "y": self.y},
            "size": {"width": self.width, "height": self.height},
            "parentName": self.parent_name,
            "hasAccessibilityIssue": self.has_issue,
            "issueType": self.issue_type.value,
        }


@dataclass(frozen=True)
class ScanResult:
    """Complete result of one scan invocation, in traversal order."""

    text_layers: tuple[TextLayerRecord, ...] = ()
    scan_duration_ms: float = 0.0
    timestamp: float = 0.0  # epoch milliseconds at scan start
    timed_out: bool = False

    @property
    def total_scanned(self) -> int:
        return len(self.text_layers)

    @property
    def error_count(self) -> int:
        return sum(1 for t in self.text_layers if t.issue_type == IssueType.CONTRAST_FAIL)

    @property
    def warning_count(self) -> int:
        return sum(
            1
            for t in self.text_layers
            if t.issue_type in (IssueType.MISSING_FONT, IssueType.NO_BACKGROUND)
        )

    @property
    def pass_count(self) -> int:
        return sum(1 for t in self.text_layers if t.issue_type == IssueType.NONE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "textLayers": [t.to_dict() for t in self.text_layers],
            "totalScanned": self.total_scanned,
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
            "passCount": self.pass_count,
            "scanDuration": self.scan_duration_ms,
            "timestamp": self.timestamp,
            "timedOut": self.timed_out,
        }


# May return an awaitable, which the scanner awaits before continuing.
ProgressCallback = Callable[[int], Any]

DEFAULT_TIMEOUT_MS = 30000


@dataclass
class ScanOptions:
    """Caller-supplied scan settings.

    ``min_contrast_ratio`` and ``check_large_text`` are carried for callers
    but classification always uses the fixed WCAG thresholds.
    """

    min_contrast_ratio: float = 4.5
    check_large_text: bool = True
    include_hidden_layers: bool = False
    timeout_ms: float | None = DEFAULT_TIMEOUT_MS
    on_progress: ProgressCallback | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ScanOptions:
        """Build options from a camelCase wire payload, keeping defaults for gaps."""
        data = data or {}
        opts = cls()
        if "minContrastRatio" in data:
            opts.min_contrast_ratio = float(data["minContrastRatio"])
        if "checkLargeText" in data:
            opts.check_large_text = bool(data["checkLargeText"])
        if "includeHiddenLayers" in data:
            opts.include_hidden_layers = bool(data["includeHiddenLayers"])
        if data.get("timeout") is not None:
            opts.timeout_ms = float(data["timeout"])
        return opts


class FocusError(str, enum.Enum):
    """Why a layer could not be focused."""

    NOT_FOUND = "NotFound"
    NOT_FOCUSABLE = "NotFocusable"
    NO_BOUNDS = "NoBounds"
    UNEXPECTED = "Unexpected"


@dataclass(frozen=True)
class FocusResult:
    success: bool
    error: FocusError | None = None
    message: str | None = None
