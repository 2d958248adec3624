"""Background worker that drives one download session to a terminal status.

The worker walks a fixed script::

    started -> url-validated -> type-classified -> authenticating
            -> (authenticated | auth-failed) -> finishing -> (completed | failed)

It never downloads anything itself.  It validates the request, obtains a
catalog token and stages the command-line invocation that performs the real
download, reporting each step through the session's ``ProgressRecord``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from core.errors import AuthenticationError, ValidationError
from core.progress import ProgressStatus, Severity
from core.schemas import QUALITY_LABELS, MediaKind, Quality

if TYPE_CHECKING:
    from core.auth import TokenProvider
    from core.progress import ProgressRecord
    from core.schemas import DownloadJob
    from storage.schema import DownloaderConfig

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "amdl"

PERCENT_STARTED = 5
PERCENT_QUALITY = 10
PERCENT_CLASSIFIED = 20
PERCENT_AUTHENTICATING = 25
PERCENT_AUTHENTICATED = 30
PERCENT_FINISHING_SCHEDULE = (50, 80)
PERCENT_DONE = 100

_DETECTED_MESSAGES: dict[MediaKind, str] = {
    MediaKind.ALBUM: "Album detected, preparing download...",
    MediaKind.SONG: "Single song detected, preparing download...",
    MediaKind.PLAYLIST: "Playlist detected, preparing download...",
    MediaKind.ARTIST: "Artist detected, preparing download...",
}


def classify_url(url: str) -> MediaKind | None:
    """Classify a catalog URL by the kind of object it points at.

    An album URL carrying an ``?i=`` track selector is a single song.

    Parameters
    ----------
    url : str
        The URL submitted by the user.

    Returns
    -------
    MediaKind | None
        The detected kind, or ``None`` when the URL matches no known pattern.

    """
    if "/album/" in url and "?i=" not in url:
        return MediaKind.ALBUM
    if "/song/" in url or ("/album/" in url and "?i=" in url):
        return MediaKind.SONG
    if "/playlist/" in url:
        return MediaKind.PLAYLIST
    if "/artist/" in url:
        return MediaKind.ARTIST
    return None


def build_command(job: DownloadJob, kind: MediaKind, command: str = DEFAULT_COMMAND) -> str:
    """Return the command line that performs ``job`` with the CLI downloader."""
    parts = [command]
    if kind == MediaKind.SONG:
        parts.append("--song")
    if job.quality == Quality.ATMOS:
        parts.append("--atmos")
    elif job.quality == Quality.AAC:
        parts.append("--aac")
    if job.select_mode:
        parts.append("--select")
    parts.append(job.url)
    if kind == MediaKind.ARTIST:
        parts.append("--all-album")
    return " ".join(parts)


async def run_download(
    record: ProgressRecord,
    job: DownloadJob,
    *,
    config: DownloaderConfig,
    token_provider: TokenProvider,
    command: str = DEFAULT_COMMAND,
    phase_delay: float = 1.0,
) -> None:
    """Advance ``record`` through the download script.

    Every exit path leaves the record in a terminal status with a diagnostic
    message, so a stream watching it always closes.

    Parameters
    ----------
    record : ProgressRecord
        The session to report into.
    job : DownloadJob
        The request-scoped download parameters.
    config : DownloaderConfig
        Configuration snapshot taken when the request was accepted.
    token_provider : TokenProvider
        Coroutine factory returning a catalog token.
    command : str
        Name of the command-line downloader shown in the staged command.
    phase_delay : float
        Pause, in seconds, between the finishing percent steps.

    """
    logger.info("Download session started", extra={"session_id": record.id, "url": job.url})
    try:
        await _run_script(
            record,
            job,
            config=config,
            token_provider=token_provider,
            command=command,
            phase_delay=phase_delay,
        )
    except (ValidationError, AuthenticationError) as exc:
        record.append_message(str(exc), Severity.ERROR)
        record.set_status(ProgressStatus.FAILED)
        logger.warning("Download session failed: %s", exc, extra={"session_id": record.id})
    except asyncio.CancelledError:
        record.append_message("Download cancelled", Severity.ERROR)
        record.set_status(ProgressStatus.FAILED)
        raise
    except Exception as exc:
        logger.exception("Download session crashed", extra={"session_id": record.id})
        record.append_message(f"Download failed: {exc}", Severity.ERROR)
        record.set_status(ProgressStatus.FAILED)


async def _run_script(
    record: ProgressRecord,
    job: DownloadJob,
    *,
    config: DownloaderConfig,
    token_provider: TokenProvider,
    command: str,
    phase_delay: float,
) -> None:
    # url-validated
    record.append_message(f"Validating URL: {job.url}")
    kind = classify_url(job.url)
    if kind is None:
        msg = "Invalid URL format"
        raise ValidationError(msg)

    record.set_status(ProgressStatus.RUNNING)
    record.append_message("Starting download process...")
    record.set_percent(PERCENT_STARTED)
    record.append_message(f"Quality set to: {QUALITY_LABELS[job.quality]}")
    record.set_percent(PERCENT_QUALITY)

    # type-classified
    record.append_message(_DETECTED_MESSAGES[kind])
    record.set_percent(PERCENT_CLASSIFIED)
    record.append_message(f"Download type: {kind.value}")

    # authenticating
    record.set_percent(PERCENT_AUTHENTICATING)
    record.append_message("Getting authentication token...")
    try:
        await token_provider()
    except Exception as exc:  # noqa: BLE001
        logger.info("Token acquisition failed: %s", exc, extra={"session_id": record.id})
        if not config.has_fallback_credential:
            msg = "Failed to get authentication token"
            raise AuthenticationError(msg) from exc
        record.append_message("Using provided authorization token")

    record.set_percent(PERCENT_AUTHENTICATED)
    record.append_message("Authentication successful")

    # finishing
    record.append_message("Web interface download integration in progress", Severity.WARNING)
    record.append_message("Please use the command line for actual downloads:")
    record.append_message(f"   {build_command(job, kind, command)}")
    record.append_message(
        f"Lyrics: {'on' if job.download_lyrics else 'off'}, "
        f"cover embedding: {'on' if job.embed_cover else 'off'}"
    )
    record.append_message(f"Files will be saved to: {config.save_folder_for(job.quality)}")

    for percent in PERCENT_FINISHING_SCHEDULE:
        record.set_percent(percent)
        await asyncio.sleep(phase_delay)

    record.set_percent(PERCENT_DONE)
    record.append_message("Ready! Copy the command above into a terminal.", Severity.SUCCESS)
    record.set_status(ProgressStatus.COMPLETED)
    logger.info("Download session completed", extra={"session_id": record.id, "kind": kind.value})
