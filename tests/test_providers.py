"""Tests for the document source registry and implementations."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from contrastmate.providers import get_provider, list_available
from contrastmate.providers.figma import FigmaError, FigmaProvider
from contrastmate.providers.file import FileProvider
from contrastmate.scanner import scan_selection
from tests.fixtures.documents import WHITE, document, frame, page, solid, text


def _response(status: int, body: dict[str, Any]) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    resp.text = json.dumps(body)
    return resp


def _mock_client(mock_client_cls: MagicMock, get: AsyncMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.get = get
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


# ── Registry tests ──────────────────────────────────────────────────────────


class TestProviderRegistry:
    def test_get_file(self) -> None:
        provider = get_provider("file")
        assert isinstance(provider, FileProvider)
        assert provider.name == "file"

    def test_get_figma_with_api_key(self) -> None:
        provider = get_provider("figma", api_key="tok")
        assert isinstance(provider, FigmaProvider)
        assert asyncio.run(provider.is_available()) is True

    def test_name_is_normalized(self) -> None:
        assert isinstance(get_provider("  FILE "), FileProvider)

    def test_get_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown provider"):
            get_provider("sketch")

    def test_list_available(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FIGMA_TOKEN", raising=False)
        results = dict(list_available())
        assert results == {"file": True, "figma": False}

    def test_list_available_inside_running_loop(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FIGMA_TOKEN", "tok")

        async def from_handler() -> list[tuple[str, bool]]:
            return list_available()

        results = dict(asyncio.run(from_handler()))
        assert results == {"file": True, "figma": True}


# ── File provider tests ─────────────────────────────────────────────────────


class TestFileProvider:
    def test_fetch_json(self, document_file: Path) -> None:
        doc = asyncio.run(FileProvider().fetch(document_file))
        assert doc.get_node_by_id("1:2") is not None

    def test_fetch_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "design.yaml"
        path.write_text(
            """\
name: Yaml file
selection: ["1:2"]
document:
  id: "0:0"
  type: DOCUMENT
  children:
    - id: "1:0"
      type: CANVAS
      children:
        - id: "1:2"
          type: TEXT
          characters: Hi
""",
            encoding="utf-8",
        )
        doc = asyncio.run(FileProvider().fetch(path))
        assert [n.id for n in doc.selection] == ["1:2"]

    def test_fetch_missing_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            asyncio.run(FileProvider().fetch(tmp_path / "nope.json"))

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            asyncio.run(FileProvider().fetch(path))

    def test_available_fonts_passed_through(self, document_file: Path) -> None:
        doc = asyncio.run(FileProvider(available_fonts=["Roboto"]).fetch(document_file))
        result = asyncio.run(scan_selection(doc))
        assert result.text_layers[0].font_info.is_missing is True


# ── Figma provider tests (mocked HTTP) ──────────────────────────────────────


def _figma_file() -> dict[str, Any]:
    data = document(page("1:0", [
        frame("1:1", [
            text("1:2", "Styled", style="Bold", size=32, styles={"text": "S:heading"}),
        ], fills=[solid(WHITE)]),
    ]))
    data["styles"] = {"S:heading": {"name": "Heading/H1", "styleType": "TEXT"}}
    return data


_STYLE_NODES = {
    "nodes": {
        "S:heading": {
            "document": {
                "id": "9:1",
                "type": "TEXT",
                "style": {"fontFamily": "Inter", "fontStyle": "Bold", "fontSize": 32},
            }
        }
    }
}


class TestFigmaProvider:
    def test_token_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FIGMA_TOKEN", "env-token")
        assert asyncio.run(FigmaProvider().is_available()) is True

    def test_no_token_unavailable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FIGMA_TOKEN", raising=False)
        provider = FigmaProvider()
        assert asyncio.run(provider.is_available()) is False
        with pytest.raises(FigmaError, match="No Figma token"):
            asyncio.run(provider.fetch("abc"))

    def test_fetch_resolves_text_styles(self) -> None:
        provider = FigmaProvider(api_key="tok", api_base="https://figma.test/")
        get = AsyncMock(side_effect=[_response(200, _figma_file()), _response(200, _STYLE_NODES)])

        with patch("httpx.AsyncClient") as mock_client_cls:
            _mock_client(mock_client_cls, get)
            doc = asyncio.run(provider.fetch("abc"))

        first_call = get.call_args_list[0]
        assert first_call.args[0] == "https://figma.test/v1/files/abc"
        assert first_call.kwargs["headers"] == {"X-Figma-Token": "tok"}
        assert get.call_args_list[1].kwargs["params"] == {"ids": "S:heading"}

        style = asyncio.run(doc.get_style("S:heading"))
        assert style is not None
        assert style.name == "Heading/H1"

        record = asyncio.run(scan_selection(doc)).text_layers[0]
        assert record.font_info.weight == 700
        assert record.is_large_text is True

    def test_style_fetch_failure_falls_back(self) -> None:
        provider = FigmaProvider(api_key="tok")
        get = AsyncMock(side_effect=[
            _response(200, _figma_file()),
            _response(403, {"status": 403, "err": "Forbidden"}),
        ])

        with patch("httpx.AsyncClient") as mock_client_cls:
            _mock_client(mock_client_cls, get)
            doc = asyncio.run(provider.fetch("abc"))

        assert asyncio.run(doc.get_style("S:heading")) is None
        record = asyncio.run(scan_selection(doc)).text_layers[0]
        assert record.font_info.family == "Inter"
        assert record.font_info.style == "Bold"

    def test_http_error_status(self) -> None:
        provider = FigmaProvider(api_key="bad")
        get = AsyncMock(return_value=_response(403, {"status": 403, "err": "Invalid token"}))

        with patch("httpx.AsyncClient") as mock_client_cls:
            _mock_client(mock_client_cls, get)
            with pytest.raises(FigmaError, match="Invalid token"):
                asyncio.run(provider.fetch("abc"))

    def test_transport_error(self) -> None:
        provider = FigmaProvider(api_key="tok")
        get = AsyncMock(side_effect=httpx.ConnectError("Connection refused"))

        with patch("httpx.AsyncClient") as mock_client_cls:
            _mock_client(mock_client_cls, get)
            with pytest.raises(FigmaError, match="Cannot reach Figma API"):
                asyncio.run(provider.fetch("abc"))
