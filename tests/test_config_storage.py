"""Tests for the YAML configuration storage."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import pytest
import yaml

from core.errors import ConfigError
from core.schemas import Quality
from storage.schema import PLACEHOLDER_TOKEN, DownloaderConfig
from storage.yaml_file import YamlConfigStorage

if TYPE_CHECKING:
    from pathlib import Path


class TestDownloaderConfig:
    """Tests for the configuration model."""

    def test_defaults(self) -> None:
        """A fresh config carries the documented defaults."""
        config = DownloaderConfig()
        assert config.authorization_token == PLACEHOLDER_TOKEN
        assert config.storefront == "us"
        assert config.alac_save_folder == "AM-DL downloads"
        assert not config.has_fallback_credential
        assert not config.has_media_user_token

    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            ("", False),
            ("   ", False),
            (PLACEHOLDER_TOKEN, False),
            ("eyJh.real.token", True),
        ],
    )
    def test_fallback_credential(self, token: str, expected: bool) -> None:
        """Only a non-empty, non-placeholder token counts as a fallback."""
        assert DownloaderConfig(authorization_token=token).has_fallback_credential is expected

    def test_save_folder_for_quality(self) -> None:
        """Each quality maps to its own folder."""
        config = DownloaderConfig(alac_save_folder="a", atmos_save_folder="b", aac_save_folder="c")
        assert config.save_folder_for(Quality.ALAC) == "a"
        assert config.save_folder_for(Quality.ATMOS) == "b"
        assert config.save_folder_for(Quality.AAC) == "c"


class TestYamlConfigStorage:
    """Tests for reading and writing the YAML document."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """No file means default configuration."""
        storage = YamlConfigStorage(tmp_path / "config.yaml")
        assert storage.load() == DownloaderConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        """An empty document is treated like a missing one."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert YamlConfigStorage(path).load() == DownloaderConfig()

    def test_reads_hyphenated_keys(self, tmp_path: Path) -> None:
        """The file uses the downloader's hyphenated key names."""
        path = tmp_path / "config.yaml"
        path.write_text("media-user-token: abc\nstorefront: jp\natmos-save-folder: /music/atmos\n")

        config = YamlConfigStorage(path).load()

        assert config.media_user_token == "abc"
        assert config.storefront == "jp"
        assert config.atmos_save_folder == "/music/atmos"

    def test_save_writes_hyphenated_keys(self, tmp_path: Path) -> None:
        """Saved files round-trip through the downloader's key names."""
        path = tmp_path / "nested" / "config.yaml"
        storage = YamlConfigStorage(path)

        location = storage.save(DownloaderConfig(storefront="gb"))

        assert location == str(path)
        document = yaml.safe_load(path.read_text())
        assert document["storefront"] == "gb"
        assert "alac-save-folder" in document
        assert "alac_save_folder" not in document
        assert list(path.parent.iterdir()) == [path]

    def test_unknown_keys_survive_update(self, tmp_path: Path) -> None:
        """Keys only the CLI downloader knows about are written back unchanged."""
        path = tmp_path / "config.yaml"
        path.write_text("cover-size: 5000x5000\nlimit-max: 200\nstorefront: us\n")
        storage = YamlConfigStorage(path)

        updated = storage.update({"storefront": "de"})

        assert updated.storefront == "de"
        document = yaml.safe_load(path.read_text())
        assert document["cover-size"] == "5000x5000"
        assert document["limit-max"] == 200
        assert document["storefront"] == "de"

    def test_update_leaves_other_fields(self, tmp_path: Path) -> None:
        """Only the given fields change."""
        storage = YamlConfigStorage(tmp_path / "config.yaml")
        storage.save(DownloaderConfig(media_user_token="keep-me"))

        storage.update({"aac_save_folder": "/music/aac"})

        config = storage.load()
        assert config.media_user_token == "keep-me"
        assert config.aac_save_folder == "/music/aac"

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Unparseable YAML is reported as a configuration error."""
        path = tmp_path / "config.yaml"
        path.write_text("storefront: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to read configuration"):
            YamlConfigStorage(path).load()

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        """A list at the top level is not a configuration."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            YamlConfigStorage(path).load()

    def test_wrong_field_type_raises(self, tmp_path: Path) -> None:
        """Fields that fail validation are reported as a configuration error."""
        path = tmp_path / "config.yaml"
        path.write_text("embed-cover: [1, 2]\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            YamlConfigStorage(path).load()

    def test_concurrent_updates_are_not_lost(self, tmp_path: Path) -> None:
        """Parallel updates of different fields all land, with readers never seeing a torn file."""
        storage = YamlConfigStorage(tmp_path / "config.yaml")
        fields = [
            "media_user_token",
            "language",
            "storefront",
            "alac_save_folder",
            "atmos_save_folder",
            "aac_save_folder",
        ]
        errors: list[Exception] = []
        start = threading.Barrier(len(fields) + 1)

        def writer(field: str) -> None:
            start.wait()
            try:
                for i in range(20):
                    storage.update({field: f"{field}-{i}"})
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        def reader() -> None:
            start.wait()
            try:
                for _ in range(100):
                    storage.load()
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=writer, args=(f,)) for f in fields]
        threads.append(threading.Thread(target=reader))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        config = storage.load()
        for field in fields:
            assert getattr(config, field) == f"{field}-19"
        assert list(storage.path.parent.iterdir()) == [storage.path]
