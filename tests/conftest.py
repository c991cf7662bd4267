"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from contrastmate.providers.loader import load_document
from contrastmate.providers.memory import InMemoryDocument
from tests.fixtures.documents import WHITE, document, frame, page, solid, text


@pytest.fixture
def simple_data() -> dict[str, Any]:
    """Black 16px text inside a white frame."""
    return document(
        page("1:0", [
            frame("1:1", [text("1:2", "Welcome back")], fills=[solid(WHITE)], name="Card"),
        ]),
    )


@pytest.fixture
def simple_doc(simple_data: dict[str, Any]) -> InMemoryDocument:
    return load_document(simple_data)


@pytest.fixture
def two_page_doc() -> InMemoryDocument:
    data = document(
        page("1:0", [frame("1:1", [text("1:2", "First")], fills=[solid(WHITE)])], name="Cover"),
        page("2:0", [frame("2:1", [text("2:2", "Second")], fills=[solid(WHITE)])], name="Details"),
    )
    return load_document(data)


@pytest.fixture
def document_file(tmp_path: Path, simple_data: dict[str, Any]) -> Path:
    path = tmp_path / "design.json"
    path.write_text(json.dumps(simple_data), encoding="utf-8")
    return path


@pytest.fixture
def failing_document_file(tmp_path: Path) -> Path:
    """A document with light gray text on white."""
    data = document(
        page("1:0", [
            frame("1:1", [
                text("1:2", "Faint caption", fills=[solid({"r": 0.85, "g": 0.85, "b": 0.85})]),
            ], fills=[solid(WHITE)]),
        ]),
    )
    path = tmp_path / "faint.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path

