"""Tests for developer token acquisition."""

from __future__ import annotations

import httpx
import pytest

from core.auth import fetch_developer_token
from core.errors import AuthenticationError
from tests.conftest import FAKE_TOKEN

CATALOG = "https://catalog.example"
BUNDLE_PATH = "/assets/index-4f1a2b3c.js"
LANDING_PAGE = f'<html><head><script type="module" src="{BUNDLE_PATH}"></script></head></html>'
BUNDLE = f'const a=1;const token="{FAKE_TOKEN}";export{{a}};'


def _client(routes: dict[str, httpx.Response]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return routes.get(request.url.path, httpx.Response(404, text="not found"))

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetches_token_from_bundle() -> None:
    """The token is pulled from the bundle referenced by the landing page."""
    async with _client(
        {
            "": httpx.Response(200, text=LANDING_PAGE),
            "/": httpx.Response(200, text=LANDING_PAGE),
            BUNDLE_PATH: httpx.Response(200, text=BUNDLE),
        }
    ) as client:
        token = await fetch_developer_token(CATALOG, client=client)

    assert token == FAKE_TOKEN


@pytest.mark.asyncio
async def test_http_error_raises_authentication_error() -> None:
    """Transport or status errors surface as AuthenticationError."""
    async with _client({}) as client:
        with pytest.raises(AuthenticationError, match="Failed to fetch developer token"):
            await fetch_developer_token(CATALOG, client=client)


@pytest.mark.asyncio
async def test_missing_bundle_reference() -> None:
    """A landing page without the bundle script cannot yield a token."""
    async with _client(
        {
            "": httpx.Response(200, text="<html></html>"),
            "/": httpx.Response(200, text="<html></html>"),
        }
    ) as client:
        with pytest.raises(AuthenticationError, match="Could not locate the web player bundle"):
            await fetch_developer_token(CATALOG, client=client)


@pytest.mark.asyncio
async def test_missing_token_in_bundle() -> None:
    """A bundle without a JWT is reported."""
    async with _client(
        {
            "": httpx.Response(200, text=LANDING_PAGE),
            "/": httpx.Response(200, text=LANDING_PAGE),
            BUNDLE_PATH: httpx.Response(200, text="console.log('no token here')"),
        }
    ) as client:
        with pytest.raises(AuthenticationError, match="Developer token not found"):
            await fetch_developer_token(CATALOG, client=client)
