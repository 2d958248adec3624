"""Storage module for the downloader configuration document."""

from storage.base import ConfigStorage
from storage.schema import DownloaderConfig
from storage.yaml_file import YamlConfigStorage

__all__ = ["ConfigStorage", "DownloaderConfig", "YamlConfigStorage"]
