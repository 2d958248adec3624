"""Acquisition of the catalog's public developer token.

The catalog web player embeds a signed JWT in its main JavaScript bundle.
The token is fetched by loading the landing page, locating the bundle and
extracting the first ``eyJh...`` string from it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable

import httpx

from core.errors import AuthenticationError

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = "https://music.apple.com"
DEFAULT_TIMEOUT = 15.0

_BUNDLE_PATH_REGEX = re.compile(r"/assets/index[~-][^/\"']+\.js")
_TOKEN_REGEX = re.compile(r"eyJh[^\"']+")

# Coroutine factory returning a catalog bearer token.
TokenProvider = Callable[[], Awaitable[str]]


async def fetch_developer_token(
    catalog_url: str = DEFAULT_CATALOG_URL,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Fetch the developer token from the catalog web player.

    Parameters
    ----------
    catalog_url : str
        Base URL of the catalog web player.
    timeout : float
        Per-request timeout in seconds.
    client : httpx.AsyncClient | None
        Client to reuse; a short-lived one is created when omitted.

    Returns
    -------
    str
        The bearer token.

    Raises
    ------
    AuthenticationError
        If either page cannot be fetched or no token is found.

    """
    if client is None:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
            return await _fetch_token(owned, catalog_url)
    return await _fetch_token(client, catalog_url)


async def _fetch_token(client: httpx.AsyncClient, catalog_url: str) -> str:
    base = catalog_url.rstrip("/")
    try:
        landing = await client.get(base)
        landing.raise_for_status()

        bundle_match = _BUNDLE_PATH_REGEX.search(landing.text)
        if bundle_match is None:
            msg = "Could not locate the web player bundle"
            raise AuthenticationError(msg)

        bundle = await client.get(base + bundle_match.group(0))
        bundle.raise_for_status()
    except httpx.HTTPError as exc:
        msg = f"Failed to fetch developer token: {exc}"
        raise AuthenticationError(msg) from exc

    token_match = _TOKEN_REGEX.search(bundle.text)
    if token_match is None:
        msg = "Developer token not found in web player bundle"
        raise AuthenticationError(msg)

    logger.debug("Fetched developer token", extra={"bundle": bundle_match.group(0)})
    return token_match.group(0)
