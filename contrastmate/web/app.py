"""FastAPI application exposing the scan channel to a browser UI."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect

from contrastmate import __version__
from contrastmate.focus import focus_on_node
from contrastmate.models import ScanOptions
from contrastmate.providers.base import DocumentProvider
from contrastmate.scanner import scan_selection
from contrastmate.session import PluginSession

logger = logging.getLogger(__name__)


def create_app(
    provider: DocumentProvider,
    *,
    default_options: ScanOptions | None = None,
) -> FastAPI:
    """Create the FastAPI application for one open document."""
    app = FastAPI(title="ContrastMate", version=__version__, docs_url=None, redoc_url=None)

    # The provider is not safe for concurrent calls; one request at a time.
    provider_lock = asyncio.Lock()

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok", "document": provider.root.name, "version": __version__}

    @app.get("/api/selection")
    async def selection() -> dict:
        count = len(provider.selection)
        return {"hasSelection": count > 0, "selectionCount": count}

    @app.post("/api/scan")
    async def scan(options: dict[str, Any] | None = None) -> dict:
        """Run one scan and return the ScanResult wire shape."""
        try:
            opts = ScanOptions.from_dict(options)
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=f"Invalid scan options: {exc}")

        async with provider_lock:
            try:
                result = await scan_selection(provider, opts)
            except Exception as exc:
                logger.error("Scan failed", exc_info=True)
                raise HTTPException(status_code=500, detail=str(exc) or "Scan failed")
        return result.to_dict()

    @app.post("/api/focus")
    async def focus(payload: dict[str, Any]) -> dict:
        node_id = payload.get("nodeId")
        if not node_id or not isinstance(node_id, str):
            raise HTTPException(status_code=400, detail="Invalid node ID provided")

        async with provider_lock:
            result = await focus_on_node(provider, node_id)
        return {
            "success": result.success,
            "error": result.error.value if result.error else None,
            "message": result.message,
        }

    @app.websocket("/ws")
    async def channel(websocket: WebSocket) -> None:
        """Message channel: JSON ``{type, payload}`` requests and events."""
        await websocket.accept()
        session = PluginSession(provider, websocket.send_json, default_options=default_options)

        async with provider_lock:
            await session.start()
        try:
            while True:
                try:
                    msg = await websocket.receive_json()
                except (ValueError, KeyError):
                    # Undecodable JSON or a binary frame.
                    await session.emit_error("Malformed message", code="BAD_MESSAGE")
                    continue
                async with provider_lock:
                    await session.handle(msg)
        except WebSocketDisconnect:
            logger.debug("Channel closed")

    return app
