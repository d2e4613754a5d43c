"""Unit tests for config loading and validation."""

import json
from pathlib import Path

import pytest

from filerename.config import CONFIG_PATH, Settings, config_path, load_settings
from filerename.errors import ConfigError
from filerename.history import JsonHistoryStorage


def _write(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


class TestSettings:
    def test_defaults(self):
        """
        Given no values
        When Settings is constructed
        Then the defaults apply
        """
        settings = Settings()

        assert settings.max_history == 100
        assert settings.history_display == 10
        assert settings.history_path.name == "history.json"

    def test_expands_user(self):
        settings = Settings(history_path="~/h.json")

        assert "~" not in str(settings.history_path)

    def test_rejects_non_positive_max_history(self):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            Settings(max_history=0)

    def test_history_store(self, tmp_path: Path):
        """
        Given settings with a history path and cap
        When history_store is called
        Then the store uses a JSON storage at that path with that cap
        """
        settings = Settings(history_path=tmp_path / "h.json", max_history=5)

        store = settings.history_store()

        assert isinstance(store.storage, JsonHistoryStorage)
        assert store.storage.path == tmp_path / "h.json"
        assert store.max_entries == 5


class TestConfigPath:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("FILERENAME_CONFIG", raising=False)

        assert config_path() == CONFIG_PATH

    def test_env_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("FILERENAME_CONFIG", str(tmp_path / "custom.json"))

        assert config_path() == tmp_path / "custom.json"


class TestLoadSettings:
    def test_returns_defaults_when_file_missing(self, tmp_path: Path):
        """
        Given no config file exists
        When load_settings is called
        Then it returns default settings
        """
        assert load_settings(tmp_path / "config.json") == Settings()

    def test_loads_values(self, tmp_path: Path):
        cfg_path = tmp_path / "config.json"
        _write(cfg_path, {"history_path": str(tmp_path / "h.json"), "max_history": 20})

        settings = load_settings(cfg_path)

        assert settings.history_path == tmp_path / "h.json"
        assert settings.max_history == 20
        assert settings.history_display == 10

    def test_strips_reserved_keys(self, tmp_path: Path):
        """
        Given a config with an underscore-prefixed comment key
        When load_settings is called
        Then the key is ignored
        """
        cfg_path = tmp_path / "config.json"
        _write(cfg_path, {"_comment": "hello", "max_history": 3})

        assert load_settings(cfg_path).max_history == 3

    def test_uses_env_override(self, tmp_path: Path, monkeypatch):
        cfg_path = tmp_path / "custom.json"
        _write(cfg_path, {"history_display": 4})
        monkeypatch.setenv("FILERENAME_CONFIG", str(cfg_path))

        assert load_settings().history_display == 4

    def test_invalid_json_raises(self, tmp_path: Path):
        cfg_path = tmp_path / "config.json"
        cfg_path.write_text("{not json")

        with pytest.raises(ConfigError, match="not valid JSON"):
            load_settings(cfg_path)

    def test_non_object_raises(self, tmp_path: Path):
        cfg_path = tmp_path / "config.json"
        _write(cfg_path, ["a", "b"])

        with pytest.raises(ConfigError, match="JSON object"):
            load_settings(cfg_path)

    def test_invalid_value_raises(self, tmp_path: Path):
        cfg_path = tmp_path / "config.json"
        _write(cfg_path, {"max_history": "lots"})

        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(cfg_path)

    def test_invalid_utf8_raises(self, tmp_path: Path):
        """
        Given a config file that is not valid UTF-8
        When load_settings is called
        Then it raises ConfigError
        """
        cfg_path = tmp_path / "config.json"
        cfg_path.write_bytes(b'{"max_history": "\xff"}')

        with pytest.raises(ConfigError, match="not valid UTF-8"):
            load_settings(cfg_path)

    def test_directory_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Cannot read"):
            load_settings(tmp_path)
