"""Shared objects used across API modules to avoid circular imports."""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from api.config import get_settings
from core.auth import fetch_developer_token
from core.sessions import SessionRegistry
from storage.factory import get_config_storage

if TYPE_CHECKING:
    from collections.abc import Coroutine
    from typing import Any

    from core.auth import TokenProvider
    from storage.base import ConfigStorage

logger = logging.getLogger(__name__)

# Strong references to running workers; a task drops out when it finishes.
_background_tasks: set[asyncio.Task[None]] = set()


@lru_cache
def get_registry() -> SessionRegistry:
    """Return the process-wide session registry."""
    return SessionRegistry()


@lru_cache
def get_storage() -> ConfigStorage:
    """Return the process-wide configuration storage backend (FastAPI dependency).

    Cached so every request shares the backend's lock on the config file.
    """
    return get_config_storage()


def get_token_provider() -> TokenProvider:
    """Return the coroutine factory used by workers to obtain a catalog token."""
    settings = get_settings()

    async def _provider() -> str:
        return await fetch_developer_token(settings.catalog_url, timeout=settings.token_timeout_seconds)

    return _provider


def spawn_background(coro: Coroutine[Any, Any, None], *, name: str | None = None) -> asyncio.Task[None]:
    """Schedule ``coro`` on the running loop without awaiting it."""
    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task
