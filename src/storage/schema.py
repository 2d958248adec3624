"""Pydantic model of the downloader configuration document."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from core.schemas import Quality

PLACEHOLDER_TOKEN = "your-authorization-token"  # noqa: S105


class DownloaderConfig(BaseModel):
    """Configuration document shared with the command-line downloader.

    Field names are snake_case in Python and hyphenated in the YAML file.
    Keys this model does not know about are kept and written back unchanged.

    Attributes
    ----------
    media_user_token : str
        Subscriber token used for lyrics and high-resolution streams.
    authorization_token : str
        Static developer token used when none can be fetched.
    storefront : str
        Two-letter catalog storefront.
    alac_save_folder : str
        Destination for lossless downloads.
    atmos_save_folder : str
        Destination for Dolby Atmos downloads.
    aac_save_folder : str
        Destination for AAC downloads.

    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    media_user_token: str = Field(default="", alias="media-user-token")
    authorization_token: str = Field(default=PLACEHOLDER_TOKEN, alias="authorization-token")
    language: str = Field(default="", alias="language")
    storefront: str = Field(default="us", alias="storefront")
    embed_lrc: bool = Field(default=True, alias="embed-lrc")
    save_lrc_file: bool = Field(default=False, alias="save-lrc-file")
    embed_cover: bool = Field(default=True, alias="embed-cover")
    alac_save_folder: str = Field(default="AM-DL downloads", alias="alac-save-folder")
    atmos_save_folder: str = Field(default="AM-DL-Atmos downloads", alias="atmos-save-folder")
    aac_save_folder: str = Field(default="AM-DL-AAC downloads", alias="aac-save-folder")
    decrypt_m3u8_port: str = Field(default="127.0.0.1:10020", alias="decrypt-m3u8-port")
    get_m3u8_port: str = Field(default="127.0.0.1:20020", alias="get-m3u8-port")

    @property
    def has_fallback_credential(self) -> bool:
        """Whether a usable static authorization token is configured."""
        token = self.authorization_token.strip()
        return bool(token) and token != PLACEHOLDER_TOKEN

    @property
    def has_media_user_token(self) -> bool:
        token = self.media_user_token.strip()
        return bool(token) and token != PLACEHOLDER_TOKEN

    def save_folder_for(self, quality: Quality) -> str:
        """Return the destination folder used for ``quality``."""
        if quality == Quality.ATMOS:
            return self.atmos_save_folder
        if quality == Quality.AAC:
            return self.aac_save_folder
        return self.alac_save_folder
