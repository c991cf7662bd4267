"""Request/event channel between the scan engine and a UI surface.

Requests arrive as ``{"type": TAG, "payload": ...}`` dicts and are answered
with events of the same shape through the session's ``emit`` callable.

======================  ========================================================
Request                 Events
======================  ========================================================
``SCAN_REQUEST``        ``SCAN_STARTED``, ``SCAN_PROGRESS``\\*, ``SCAN_RESULT``
``RESCAN_REQUEST``      same, with default options
``FOCUS_NODE``          ``SELECTION_CHANGED``, or ``ERROR`` on failure
======================  ========================================================
"""

from __future__ import annotations

import enum
import inspect
import logging
from typing import Any, Callable

from contrastmate.focus import focus_on_node
from contrastmate.models import ScanOptions, ScanResult
from contrastmate.providers.base import DocumentProvider
from contrastmate.scanner import scan_selection

logger = logging.getLogger(__name__)


class MessageType(str, enum.Enum):
    SCAN_REQUEST = "SCAN_REQUEST"
    RESCAN_REQUEST = "RESCAN_REQUEST"
    FOCUS_NODE = "FOCUS_NODE"
    PLUGIN_READY = "PLUGIN_READY"
    SCAN_STARTED = "SCAN_STARTED"
    SCAN_PROGRESS = "SCAN_PROGRESS"
    SCAN_RESULT = "SCAN_RESULT"
    SELECTION_CHANGED = "SELECTION_CHANGED"
    ERROR = "ERROR"


def message(tag: MessageType, payload: Any = None) -> dict[str, Any]:
    """Wire shape of an event."""
    return {"type": tag.value, "payload": payload}


class PluginSession:
    """Dispatches UI requests against one document.

    Holds no scan state between calls beyond the ``scanning`` flag; each
    scan produces an independent :class:`ScanResult`.
    """

    def __init__(
        self,
        provider: DocumentProvider,
        emit: Callable[[dict[str, Any]], Any],
        *,
        default_options: ScanOptions | None = None,
    ) -> None:
        self._provider = provider
        self._emit = emit
        self._defaults = default_options or ScanOptions()
        self.scanning = False
        self.last_result: ScanResult | None = None

    async def _send(self, tag: MessageType, payload: Any = None) -> None:
        out = self._emit(message(tag, payload))
        if inspect.isawaitable(out):
            await out

    async def emit_error(self, text: str, code: str | None = None) -> None:
        payload: dict[str, Any] = {"message": text}
        if code is not None:
            payload["code"] = code
        await self._send(MessageType.ERROR, payload)

    def _selection_payload(self) -> dict[str, Any]:
        count = len(self._provider.selection)
        return {"hasSelection": count > 0, "selectionCount": count}

    async def start(self) -> None:
        """Announce readiness; scan straight away when something is selected."""
        await self._send(MessageType.PLUGIN_READY, self._selection_payload())
        if self._provider.selection:
            await self.perform_scan(self._defaults_copy())

    async def selection_changed(self) -> None:
        await self._send(MessageType.SELECTION_CHANGED, self._selection_payload())

    def _defaults_copy(self) -> ScanOptions:
        d = self._defaults
        return ScanOptions(
            min_contrast_ratio=d.min_contrast_ratio,
            check_large_text=d.check_large_text,
            include_hidden_layers=d.include_hidden_layers,
            timeout_ms=d.timeout_ms,
        )

    async def handle(self, msg: dict[str, Any]) -> None:
        """Dispatch one request dict.  Never raises."""
        tag = msg.get("type") if isinstance(msg, dict) else None
        payload = msg.get("payload") if isinstance(msg, dict) else None
        try:
            if tag == MessageType.SCAN_REQUEST.value:
                await self.perform_scan(ScanOptions.from_dict(payload))
            elif tag == MessageType.RESCAN_REQUEST.value:
                await self.perform_scan(self._defaults_copy())
            elif tag == MessageType.FOCUS_NODE.value:
                await self.focus(payload)
            else:
                await self.emit_error(f"Unknown message type: {tag!r}", code="UNKNOWN_MESSAGE")
        except Exception as exc:
            logger.error("%s failed", tag, exc_info=True)
            await self.emit_error(str(exc) or f"Failed to handle {tag}")

    async def perform_scan(self, options: ScanOptions) -> ScanResult | None:
        """Run one scan and report it.  Failures become an ERROR event."""
        await self._send(MessageType.SCAN_STARTED, None)
        self.scanning = True

        options.on_progress = lambda scanned: self._send(
            MessageType.SCAN_PROGRESS, {"scanned": scanned}
        )

        try:
            result = await scan_selection(self._provider, options)
        except Exception as exc:
            logger.error("Scan error", exc_info=True)
            await self.emit_error(str(exc) or "Unknown error occurred")
            return None
        finally:
            self.scanning = False

        self.last_result = result
        await self._send(MessageType.SCAN_RESULT, result.to_dict())

        suffix = " (TIMEOUT)" if result.timed_out else ""
        logger.info(
            "Scanned %d text layers in %.0fms%s: %d errors, %d warnings, %d passed",
            result.total_scanned,
            result.scan_duration_ms,
            suffix,
            result.error_count,
            result.warning_count,
            result.pass_count,
        )
        if result.timed_out:
            logger.warning("Scan was terminated due to timeout. Results may be incomplete.")
        return result

    async def focus(self, payload: Any) -> bool:
        node_id = payload.get("nodeId") if isinstance(payload, dict) else None
        if not node_id or not isinstance(node_id, str):
            await self.emit_error("Invalid node ID provided")
            return False

        result = await focus_on_node(self._provider, node_id)
        if not result.success:
            await self.emit_error(
                result.message or "Could not find or focus on the selected layer.",
                code=result.error.value if result.error else None,
            )
            return False

        await self.selection_changed()
        return True
