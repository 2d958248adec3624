"""Pydantic models for the API request/response types."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from core.schemas import DownloadJob, Quality


class DownloadRequest(BaseModel):
    """Request model for the ``/api/download`` endpoint.

    Attributes
    ----------
    url : str
        Catalog URL of the album, song, playlist or artist to download.
        Unusable URLs are accepted here and fail the session instead.
    quality : Quality
        Requested audio quality (alac, atmos or aac). Unknown names fall
        back to ALAC.
    select_mode : bool
        Whether tracks should be picked interactively.
    download_lyrics : bool
        Whether lyrics should be downloaded too.
    embed_cover : bool
        Whether cover art should be embedded in the files.

    """

    url: str = Field(default="", description="Catalog URL to download")
    quality: Quality = Field(default=Quality.ALAC, description="Audio quality (alac, atmos, aac)")
    select_mode: bool = Field(default=False, description="Pick tracks interactively")
    download_lyrics: bool = Field(default=False, description="Download lyrics")
    embed_cover: bool = Field(default=True, description="Embed cover art")

    @field_validator("url")
    @classmethod
    def strip_url(cls, v: str) -> str:
        return v.strip()

    @field_validator("quality", mode="before")
    @classmethod
    def normalize_quality(cls, v: object) -> object:
        """Accept any letter case for ``quality``; unknown names mean ALAC."""
        if not isinstance(v, str):
            return v
        try:
            return Quality(v.strip().lower())
        except ValueError:
            return Quality.ALAC

    def to_job(self) -> DownloadJob:
        """Return the request-scoped job handed to the worker."""
        return DownloadJob(
            url=self.url,
            quality=self.quality,
            select_mode=self.select_mode,
            download_lyrics=self.download_lyrics,
            embed_cover=self.embed_cover,
        )


class DownloadStartResponse(BaseModel):
    """Response returned once a download session has been registered."""

    success: bool = Field(default=True, description="Whether the session was created")
    download_id: str = Field(..., description="Session id to stream progress from")


class OperationResult(BaseModel):
    """Generic ``{success, error?, message?}`` response.

    Attributes
    ----------
    success : bool
        Whether the operation succeeded.
    error : str | None
        Error message when the operation failed.
    message : str | None
        Optional informational message.

    """

    success: bool = Field(..., description="Whether the operation succeeded")
    error: str | None = Field(default=None, description="Error message")
    message: str | None = Field(default=None, description="Informational message")


class ConfigUpdate(BaseModel):
    """Partial update of the downloader configuration; omitted fields are left untouched."""

    media_user_token: str | None = None
    authorization_token: str | None = None
    storefront: str | None = None
    language: str | None = None
    alac_save_folder: str | None = None
    atmos_save_folder: str | None = None
    aac_save_folder: str | None = None
    embed_cover: bool | None = None
    embed_lrc: bool | None = None
    save_lrc_file: bool | None = None


class ConfigResponse(BaseModel):
    """Subset of the configuration exposed to the UI."""

    media_user_token: str
    storefront: str
    alac_save_folder: str
    atmos_save_folder: str
    aac_save_folder: str


class AuthStatusResponse(BaseModel):
    """Credential presence reported to the UI."""

    hasMediaUserToken: bool  # noqa: N815
    storefront: str


class SearchRequest(BaseModel):
    """Request model for the ``/api/search`` endpoint."""

    type: str = Field(..., description="Catalog object type (album, song, artist, ...)")
    query: str = Field(..., description="Search terms")


class SearchResponse(BaseModel):
    """Search results; the web UI only points at the command-line search."""

    results: list[dict[str, str]] = Field(default_factory=list)
    message: str


class SystemInfo(BaseModel):
    """Static host descriptor."""

    os: str
    python: str
    runtime: str
