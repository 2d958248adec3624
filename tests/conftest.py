"""Fixtures for tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from api.config import Settings, get_settings
from core.sessions import SessionRegistry
from storage.yaml_file import YamlConfigStorage

ALBUM_URL = "https://music.example/album/123"
SONG_URL = "https://music.example/song/456"
TRACK_IN_ALBUM_URL = "https://music.example/album/123?i=789"
PLAYLIST_URL = "https://music.example/playlist/pl.abc"
ARTIST_URL = "https://music.example/artist/42"
INVALID_URL = "https://music.example/browse"

FAKE_TOKEN = "eyJhbGciOiJFUzI1NiJ9.test.signature"  # noqa: S105

SSEEvent = tuple[str, dict[str, Any]]


def parse_sse(body: str) -> list[SSEEvent]:
    """Split an SSE body into ``(event, data)`` pairs."""
    events: list[SSEEvent] = []
    for block in body.split("\n\n"):
        if not block.strip():
            continue
        kind = "message"
        data = ""
        for line in block.splitlines():
            if line.startswith("event: "):
                kind = line.removeprefix("event: ")
            elif line.startswith("data: "):
                data = line.removeprefix("data: ")
        events.append((kind, json.loads(data) if data else {}))
    return events


async def fake_token() -> str:
    """Token provider that always succeeds."""
    return FAKE_TOKEN


async def failing_token() -> str:
    """Token provider that always fails."""
    msg = "catalog unreachable"
    raise ConnectionError(msg)


@pytest.fixture
def settings() -> Iterator[Settings]:
    """Shrink worker and stream delays so sessions finish within milliseconds."""
    s = get_settings()
    saved = s.model_dump()
    s.phase_delay_seconds = 0.0
    s.poll_interval_ms = 10
    yield s
    for key, value in saved.items():
        setattr(s, key, value)


@pytest.fixture
def registry() -> SessionRegistry:
    """Provide an empty session registry."""
    return SessionRegistry()


@pytest.fixture
def config_storage(tmp_path: Path) -> YamlConfigStorage:
    """Provide a YAML config storage backed by a temporary file."""
    return YamlConfigStorage(tmp_path / "config.yaml")


@pytest.fixture
def token_provider() -> Callable[[], Any]:
    """Token provider used by the API client; tests may override it."""
    return fake_token


@pytest.fixture
def client(
    settings: Settings,  # noqa: ARG001
    registry: SessionRegistry,
    config_storage: YamlConfigStorage,
    token_provider: Callable[[], Any],
) -> Iterator[TestClient]:
    """TestClient for the FastAPI app with in-memory registry and temp config."""
    from api.main import app  # noqa: PLC0415
    from api.middleware import limiter  # noqa: PLC0415
    from api.shared import get_registry, get_storage, get_token_provider  # noqa: PLC0415

    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_storage] = lambda: config_storage
    app.dependency_overrides[get_token_provider] = lambda: token_provider
    limiter.reset()

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
