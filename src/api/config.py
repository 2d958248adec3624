"""Configuration for the DL Console API server."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Attributes
    ----------
    host : str
        The host address to bind the server to (default: ``"127.0.0.1"``).
    port : int
        The port to bind the server to (default: ``8080``).
    debug : bool
        Whether to run the server in debug mode (default: ``False``).
    allowed_hosts : str
        Comma-separated list of allowed hosts (default: ``"localhost,127.0.0.1"``).
    config_path : str
        Path of the downloader's YAML configuration (default: ``"config.yaml"``).
    poll_interval_ms : int
        Progress stream polling cadence in milliseconds (default: ``500``).
    phase_delay_seconds : float
        Pause between the worker's finishing steps (default: ``1.0``).
    catalog_url : str
        Web player URL the developer token is scraped from.
    token_timeout_seconds : float
        Timeout for each token request (default: ``15.0``).
    wrapper_host : str
        Host of the wrapper service (default: ``"127.0.0.1"``).
    wrapper_port : int
        Port of the wrapper service (default: ``10020``).
    wrapper_connect_timeout : float
        Connect timeout for the wrapper probe in seconds (default: ``2.0``).
    version_timeout_seconds : float
        Timeout for a tool's version query (default: ``5.0``).
    downloader_command : str
        Name of the CLI downloader shown in staged commands (default: ``"amdl"``).
    download_rate_limit : str
        slowapi rate limit for download and install requests (default: ``"30/minute"``).
    session_ttl_seconds : float
        Idle time after which finished sessions are evicted; ``0`` keeps
        every session for the process lifetime (default: ``0``).

    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    allowed_hosts: str = "localhost,127.0.0.1"
    config_path: str = "config.yaml"
    poll_interval_ms: int = 500
    phase_delay_seconds: float = 1.0
    catalog_url: str = "https://music.apple.com"
    token_timeout_seconds: float = 15.0
    wrapper_host: str = "127.0.0.1"
    wrapper_port: int = 10020
    wrapper_connect_timeout: float = 2.0
    version_timeout_seconds: float = 5.0
    downloader_command: str = "amdl"
    download_rate_limit: str = "30/minute"
    session_ttl_seconds: float = 0


@lru_cache
def get_settings() -> Settings:
    """Return the application settings instance (cached).

    Uses ``@lru_cache`` so the settings are read once at startup and
    shared across all modules.

    Returns
    -------
    Settings
        The application settings.

    """
    s = Settings()
    logger.info(
        "Settings loaded: config_path=%s, wrapper=%s:%d",
        s.config_path,
        s.wrapper_host,
        s.wrapper_port,
    )
    return s
