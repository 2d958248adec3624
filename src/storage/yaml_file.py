"""YAML file storage implementation for the downloader configuration."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from core.errors import ConfigError
from storage.base import ConfigStorage
from storage.schema import DownloaderConfig

logger = logging.getLogger(__name__)


class YamlConfigStorage(ConfigStorage):
    """Stores the configuration as a hyphenated-key YAML document.

    One instance should own a given file.  Reads, writes and the whole
    read-modify-write of ``update`` are serialised on the instance lock, and
    every save goes through its own temporary file before replacing the
    document, so readers only ever see a complete file.

    Parameters
    ----------
    path : str | Path
        Location of the YAML file.

    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    def load(self) -> DownloaderConfig:
        """Load the configuration, falling back to defaults for a missing file."""
        with self._lock:
            if not self.path.exists():
                logger.debug("No configuration at %s, using defaults", self.path)
                return DownloaderConfig()
            try:
                document = yaml.safe_load(self.path.read_text(encoding="utf-8"))
            except (yaml.YAMLError, OSError) as exc:
                msg = f"Failed to read configuration {self.path}: {exc}"
                raise ConfigError(msg) from exc

        if document is None:
            return DownloaderConfig()
        if not isinstance(document, dict):
            msg = f"Configuration {self.path} must be a mapping, got {type(document).__name__}"
            raise ConfigError(msg)

        try:
            return DownloaderConfig.model_validate(document)
        except ValidationError as exc:
            msg = f"Invalid configuration in {self.path}: {exc}"
            raise ConfigError(msg) from exc

    def save(self, config: DownloaderConfig) -> str:
        """Write the configuration atomically and return the file path."""
        content = yaml.safe_dump(
            config.model_dump(by_alias=True),
            sort_keys=False,
            allow_unicode=True,
        )
        with self._lock:
            tmp_name: str | None = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with tempfile.NamedTemporaryFile(
                    "w",
                    encoding="utf-8",
                    dir=self.path.parent,
                    prefix=f".{self.path.name}.",
                    suffix=".tmp",
                    delete=False,
                ) as tmp:
                    tmp_name = tmp.name
                    tmp.write(content)
                os.replace(tmp_name, self.path)
            except OSError as exc:
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)
                msg = f"Failed to write configuration {self.path}: {exc}"
                raise ConfigError(msg) from exc

        logger.info("Config saved to %s", self.path)
        return str(self.path)

    def update(self, changes: dict[str, Any]) -> DownloaderConfig:
        """Apply ``changes`` under the instance lock so concurrent updates never interleave."""
        with self._lock:
            return super().update(changes)
