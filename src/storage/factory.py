"""Storage backend factory for the downloader configuration.

Returns the configured storage backend based on application settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storage.base import ConfigStorage


def get_config_storage() -> ConfigStorage:
    """Return the configured storage backend instance.

    The configuration document always lives in a YAML file at
    ``settings.config_path`` so it stays readable by the command-line downloader.

    Returns
    -------
    ConfigStorage
        The storage backend instance.

    """
    from api.config import get_settings  # noqa: PLC0415
    from storage.yaml_file import YamlConfigStorage  # noqa: PLC0415

    settings = get_settings()
    return YamlConfigStorage(path=settings.config_path)
