"""Config file loading and validation.

Schema on disk (~/.config/filerename/config.json, every key optional):

    {
        "history_path": "~/.config/filerename/history.json",
        "max_history": 100,
        "history_display": 10
    }

The FILERENAME_CONFIG environment variable points at an alternative file.
"""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from filerename.errors import ConfigError
from filerename.history import DEFAULT_MAX_ENTRIES, HistoryStore, JsonHistoryStorage


CONFIG_PATH = Path("~/.config/filerename/config.json").expanduser()

CONFIG_ENV_VAR = "FILERENAME_CONFIG"

DEFAULT_HISTORY_PATH = Path("~/.config/filerename/history.json").expanduser()

# Number of history entries offered for reuse
DEFAULT_HISTORY_DISPLAY = 10


class Settings(BaseModel):
    """User settings."""

    history_path: Path = Field(description="Location of the history file", default=DEFAULT_HISTORY_PATH)
    max_history: int = Field(description="Number of history entries retained", default=DEFAULT_MAX_ENTRIES, ge=1)
    history_display: int = Field(
        description="Number of history entries listed by default",
        default=DEFAULT_HISTORY_DISPLAY,
        ge=1,
    )

    @field_validator("history_path")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    def history_store(self) -> HistoryStore:
        """Build the history store these settings describe."""
        return HistoryStore(JsonHistoryStorage(self.history_path), max_entries=self.max_history)


def config_path() -> Path:
    """Return the config file location, honoring FILERENAME_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_PATH


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate the config file.

    Returns default settings if the file does not exist. Raises ConfigError if
    the file exists but is malformed.
    """
    path = path or config_path()
    try:
        if not path.exists():
            return Settings()
        raw: object = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path.name} is not valid JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path.name} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path.name} must be a JSON object at the top level")

    # Strip reserved/comment keys.
    values = {k: v for k, v in raw.items() if not k.startswith("_")}

    try:
        return Settings.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {path}: {exc}") from exc
