"""Local document files (``.json`` / ``.yaml``) in Figma REST shape."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from contrastmate.providers.loader import load_document_file
from contrastmate.providers.memory import InMemoryDocument


class FileProvider:
    """Loads documents from the local filesystem."""

    def __init__(self, *, available_fonts: Iterable[str] | None = None, **_kwargs: object) -> None:
        self._available_fonts = list(available_fonts) if available_fonts is not None else None

    @property
    def name(self) -> str:
        return "file"

    async def fetch(self, path: str | Path) -> InMemoryDocument:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Document not found: {path}")
        return load_document_file(path, available_fonts=self._available_fonts)

    async def is_available(self) -> bool:
        return True
