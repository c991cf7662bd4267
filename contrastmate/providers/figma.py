"""Figma REST provider: fetch a file over HTTP and audit it in memory."""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable

import httpx

from contrastmate.document import TextStyle
from contrastmate.providers.loader import load_document, parse_text_style
from contrastmate.providers.memory import InMemoryDocument

logger = logging.getLogger(__name__)

_DEFAULT_API_BASE = "https://api.figma.com"


class FigmaError(RuntimeError):
    """The Figma API could not be reached or returned an error."""


class FigmaProvider:
    """Loads documents from the Figma REST API.

    Text style records are resolved with a second request for the style
    nodes so style-backed text layers resolve like they do in the editor.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        api_base: str = _DEFAULT_API_BASE,
        timeout: float = 30.0,
        available_fonts: Iterable[str] | None = None,
        **_kwargs: object,
    ) -> None:
        self._token = api_key if api_key is not None else os.environ.get("FIGMA_TOKEN", "")
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._available_fonts = list(available_fonts) if available_fonts is not None else None

    @property
    def name(self) -> str:
        return "figma"

    async def _get(self, client: httpx.AsyncClient, path: str, **params: str) -> dict[str, Any]:
        url = f"{self._api_base}{path}"
        try:
            resp = await client.get(url, params=params or None, headers={"X-Figma-Token": self._token})
        except httpx.HTTPError as exc:
            raise FigmaError(f"Cannot reach Figma API: {exc}") from exc

        if resp.status_code != 200:
            try:
                err_msg = resp.json().get("err", resp.text)
            except Exception:
                err_msg = resp.text
            raise FigmaError(f"Figma API error ({resp.status_code}): {err_msg}")
        return resp.json()

    async def fetch(self, file_key: str) -> InMemoryDocument:
        """Fetch *file_key* and return it as an in-memory document."""
        if not self._token:
            raise FigmaError("No Figma token. Pass --token or set FIGMA_TOKEN.")

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            data = await self._get(client, f"/v1/files/{file_key}")
            styles = await self._fetch_text_styles(client, file_key, data.get("styles") or {})

        logger.info("Fetched %s with %d text style(s)", data.get("name", file_key), len(styles))
        return load_document(
            data,
            styles=styles,
            available_fonts=self._available_fonts,
            name=self.name,
        )

    async def _fetch_text_styles(
        self,
        client: httpx.AsyncClient,
        file_key: str,
        meta: dict[str, dict[str, Any]],
    ) -> list[TextStyle]:
        ids = [sid for sid, m in meta.items() if m.get("styleType") == "TEXT"]
        if not ids:
            return []

        try:
            data = await self._get(client, f"/v1/files/{file_key}/nodes", ids=",".join(ids))
        except FigmaError:
            # Library styles are not always readable; text falls back to direct fonts.
            logger.warning("Could not resolve text styles for %s", file_key, exc_info=True)
            return []

        styles: list[TextStyle] = []
        for sid, entry in (data.get("nodes") or {}).items():
            document = (entry or {}).get("document") or {}
            type_style = document.get("style")
            if type_style:
                styles.append(parse_text_style(sid, type_style, meta.get(sid, {}).get("name", "")))
        return styles

    async def is_available(self) -> bool:
        return bool(self._token)
