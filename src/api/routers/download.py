"""Download session endpoints for the DL Console API."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from api.config import get_settings
from api.middleware import limiter
from api.models import DownloadRequest, DownloadStartResponse, SearchRequest, SearchResponse
from api.progress import SSE_HEADERS, format_sse_event
from api.shared import get_registry, get_storage, get_token_provider, spawn_background
from core.auth import TokenProvider
from core.errors import ConfigError
from core.sessions import SessionRegistry
from core.streaming import publish_progress
from core.worker import run_download
from storage.base import ConfigStorage

logger = logging.getLogger(__name__)

settings = get_settings()
router = APIRouter()


@router.post("/api/download")
@limiter.limit(settings.download_rate_limit)
async def start_download(
    request: Request,
    download_request: DownloadRequest,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
    storage: Annotated[ConfigStorage, Depends(get_storage)],
    token_provider: Annotated[TokenProvider, Depends(get_token_provider)],
) -> DownloadStartResponse:
    """Register a download session and start its worker in the background.

    The session id is returned right away; progress is read from
    ``/api/download/progress/{download_id}``.

    Parameters
    ----------
    request : Request
        The incoming HTTP request (used by rate limiter).
    download_request : DownloadRequest
        URL, quality and options of the download.
    registry : SessionRegistry
        The session registry.
    storage : ConfigStorage
        Configuration backend; read once so the worker sees a stable snapshot.
    token_provider : TokenProvider
        Source of catalog tokens for the worker.

    Returns
    -------
    DownloadStartResponse
        ``{"success": true, "download_id": ...}``

    Raises
    ------
    HTTPException
        500 if the configuration cannot be read.

    """
    try:
        config = await asyncio.to_thread(storage.load)
    except ConfigError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    if settings.session_ttl_seconds > 0:
        registry.evict_finished(settings.session_ttl_seconds)

    download_id = registry.new_id()
    record = registry.create(download_id)

    spawn_background(
        run_download(
            record,
            download_request.to_job(),
            config=config,
            token_provider=token_provider,
            command=settings.downloader_command,
            phase_delay=settings.phase_delay_seconds,
        ),
        name=f"download-{download_id}",
    )

    logger.info(
        "Download accepted",
        extra={"download_id": download_id, "url": download_request.url, "quality": download_request.quality.value},
    )
    return DownloadStartResponse(success=True, download_id=download_id)


@router.get("/api/download/progress/{download_id}")
async def download_progress(
    request: Request,
    download_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> StreamingResponse:
    """Stream a session's progress as Server-Sent Events.

    Emits one ``progress`` event per message, then ``complete`` when the
    session succeeds or ``error`` when it fails or does not exist.

    Parameters
    ----------
    request : Request
        The incoming HTTP request, polled for client disconnection.
    download_id : str
        Session id returned by ``/api/download``.
    registry : SessionRegistry
        The session registry.

    Returns
    -------
    StreamingResponse
        SSE stream with progress events.

    """

    async def event_generator() -> AsyncGenerator[str, None]:
        events = publish_progress(
            registry,
            download_id,
            poll_interval=settings.poll_interval_ms / 1000,
            is_disconnected=request.is_disconnected,
        )
        try:
            async for event in events:
                yield format_sse_event(event)
        finally:
            await events.aclose()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/api/search")
async def search(search_request: SearchRequest) -> SearchResponse:
    """Point the user at the command-line search.

    Catalog search needs the full token management of the CLI downloader,
    so the web UI only returns the equivalent command.
    """
    return SearchResponse(
        results=[],
        message=(
            "Search feature is available via command line. Use: "
            f'{settings.downloader_command} --search {search_request.type} "{search_request.query}"'
        ),
    )
