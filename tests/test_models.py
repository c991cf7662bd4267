"""Tests for core data models."""

from __future__ import annotations

from contrastmate.models import (
    BLACK,
    WHITE,
    Color,
    FontInfo,
    IssueType,
    ScanOptions,
    ScanResult,
    TextLayerRecord,
    WCAGLevel,
)


def _record(node_id: str, issue: IssueType) -> TextLayerRecord:
    return TextLayerRecord(
        id=node_id,
        name=node_id,
        characters="Hi",
        full_characters="Hi",
        font_info=FontInfo(family="Inter", size=16),
        text_color=BLACK,
        background_color=WHITE,
        contrast_ratio=21.0,
        wcag_level=WCAGLevel.AAA,
        is_large_text=False,
        issue_type=issue,
    )


class TestTextLayerRecord:
    def test_has_issue_tracks_issue_type(self) -> None:
        assert _record("a", IssueType.NONE).has_issue is False
        for issue in (IssueType.CONTRAST_FAIL, IssueType.MISSING_FONT, IssueType.NO_BACKGROUND):
            assert _record("a", issue).has_issue is True

    def test_to_dict_shape(self) -> None:
        data = _record("1:2", IssueType.NONE).to_dict()
        assert data["id"] == "1:2"
        assert data["wcagLevel"] == "AAA"
        assert data["issueType"] == "none"
        assert data["hasAccessibilityIssue"] is False
        assert data["position"] == {"x": 0.0, "y": 0.0}
        assert data["fontInfo"]["fontFamily"] == "Inter"
        assert data["backgroundColor"] == {"r": 1.0, "g": 1.0, "b": 1.0, "a": 1.0}


class TestScanResult:
    def test_counts_partition_total(self) -> None:
        result = ScanResult(
            text_layers=(
                _record("a", IssueType.CONTRAST_FAIL),
                _record("b", IssueType.CONTRAST_FAIL),
                _record("c", IssueType.MISSING_FONT),
                _record("d", IssueType.NO_BACKGROUND),
                _record("e", IssueType.NONE),
            ),
        )
        assert result.total_scanned == 5
        assert result.error_count == 2
        assert result.warning_count == 2
        assert result.pass_count == 1
        assert result.error_count + result.warning_count + result.pass_count == result.total_scanned

    def test_empty_result(self) -> None:
        result = ScanResult()
        assert result.total_scanned == 0
        assert result.timed_out is False
        assert result.to_dict()["textLayers"] == []

    def test_to_dict_keeps_order(self) -> None:
        result = ScanResult(
            text_layers=(_record("z", IssueType.NONE), _record("a", IssueType.CONTRAST_FAIL)),
        )
        assert [t["id"] for t in result.to_dict()["textLayers"]] == ["z", "a"]


class TestScanOptions:
    def test_defaults(self) -> None:
        opts = ScanOptions()
        assert opts.min_contrast_ratio == 4.5
        assert opts.check_large_text is True
        assert opts.include_hidden_layers is False
        assert opts.timeout_ms == 30000
        assert opts.on_progress is None

    def test_from_dict(self) -> None:
        opts = ScanOptions.from_dict(
            {"minContrastRatio": 7, "includeHiddenLayers": True, "timeout": 500}
        )
        assert opts.min_contrast_ratio == 7.0
        assert opts.include_hidden_layers is True
        assert opts.timeout_ms == 500.0
        assert opts.check_large_text is True

    def test_from_none(self) -> None:
        assert ScanOptions.from_dict(None).timeout_ms == 30000


class TestColor:
    def test_with_alpha_copies(self) -> None:
        c = Color(0.1, 0.2, 0.3)
        faded = c.with_alpha(0.5)
        assert faded.a == 0.5
        assert c.a == 1.0
