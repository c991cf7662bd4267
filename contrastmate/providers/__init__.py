"""Document sources.

Provider registry: use ``get_provider()`` to obtain a document source by
name, and ``list_available()`` to check which sources are configured.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import importlib
import logging
from typing import Any, Coroutine, TypeVar

from contrastmate.providers.base import DocumentProvider, DocumentSource

logger = logging.getLogger(__name__)

__all__ = ["DocumentProvider", "DocumentSource", "get_provider", "list_available"]

# Map of provider name -> module path, class name
_PROVIDER_MAP: dict[str, tuple[str, str]] = {
    "file": ("contrastmate.providers.file", "FileProvider"),
    "figma": ("contrastmate.providers.figma", "FigmaProvider"),
}


def get_provider(name: str, *, api_key: str | None = None, **kwargs: Any) -> DocumentSource:
    """Create a document source by name.

    Raises ``ValueError`` if the provider name is unknown.
    """
    name = name.lower().strip()
    if name not in _PROVIDER_MAP:
        raise ValueError(
            f"Unknown provider: {name!r}. Available: {', '.join(_PROVIDER_MAP)}"
        )

    module_path, class_name = _PROVIDER_MAP[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)

    init_kwargs: dict[str, Any] = dict(kwargs)
    if api_key is not None:
        init_kwargs["api_key"] = api_key
    return cls(**init_kwargs)


def list_available() -> list[tuple[str, bool]]:
    """Return (provider_name, is_available) for all known sources."""
    results: list[tuple[str, bool]] = []
    for name in _PROVIDER_MAP:
        try:
            available = _run_async(get_provider(name).is_available())
        except Exception:
            logger.warning("Provider %s unavailable", name, exc_info=True)
            available = False
        results.append((name, available))
    return results


_T = TypeVar("_T")


def _run_async(coro: Coroutine[Any, Any, _T]) -> _T:
    """Run *coro* to completion, even when called from inside a running loop."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    # Inside an event loop (e.g. FastAPI); run on a fresh loop in a worker thread.
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result(timeout=10)
