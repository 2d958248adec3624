"""Request-scoped description of a download job."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class Quality(StrEnum):
    """Audio quality requested for a download."""

    ALAC = "alac"
    ATMOS = "atmos"
    AAC = "aac"


QUALITY_LABELS: dict[Quality, str] = {
    Quality.ALAC: "ALAC (Lossless)",
    Quality.ATMOS: "Dolby Atmos",
    Quality.AAC: "AAC",
}


class MediaKind(StrEnum):
    """Catalog object a URL points at."""

    ALBUM = "album"
    SONG = "song"
    PLAYLIST = "playlist"
    ARTIST = "artist"


class DownloadJob(BaseModel):
    """Everything the worker needs to know about one accepted download.

    The job is built per request and handed to the worker, so concurrent
    sessions with different qualities never share toggles.

    Attributes
    ----------
    url : str
        Catalog URL to download.
    quality : Quality
        Requested audio quality (default: ``Quality.ALAC``).
    select_mode : bool
        Whether the user wants to pick tracks interactively.
    download_lyrics : bool
        Whether lyrics should be fetched alongside the audio.
    embed_cover : bool
        Whether cover art should be embedded.

    """

    url: str
    quality: Quality = Quality.ALAC
    select_mode: bool = False
    download_lyrics: bool = False
    embed_cover: bool = True
