"""Abstract base class for configuration storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from storage.schema import DownloaderConfig


class ConfigStorage(ABC):
    """Abstract base class for configuration storage backends.

    All storage implementations must implement ``load`` and ``save`` to provide
    a consistent interface for reading and writing the downloader configuration.
    """

    @abstractmethod
    def load(self) -> DownloaderConfig:
        """Load the configuration document.

        Returns
        -------
        DownloaderConfig
            The stored configuration, or the defaults when nothing is stored yet.

        Raises
        ------
        ConfigError
            If the stored document cannot be parsed.

        """

    @abstractmethod
    def save(self, config: DownloaderConfig) -> str:
        """Persist the configuration document.

        Parameters
        ----------
        config : DownloaderConfig
            The configuration to store.

        Returns
        -------
        str
            The storage location of the document.

        Raises
        ------
        ConfigError
            If the document cannot be written.

        """

    def update(self, changes: dict[str, Any]) -> DownloaderConfig:
        """Apply ``changes`` on top of the stored document and persist it.

        Parameters
        ----------
        changes : dict[str, Any]
            Field values keyed by their Python (snake_case) names.

        Returns
        -------
        DownloaderConfig
            The configuration as written.

        """
        current = self.load()
        merged = current.model_copy(update=changes)
        self.save(merged)
        return merged
