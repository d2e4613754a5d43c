"""Persistent history of executed transforms.

Schema on disk (~/.config/filerename/history.json):

    {
        "entries": [
            {
                "pattern": "(\\\\d+)",
                "replacement": "N$1",
                "is_regex": true,
                "case_insensitive": false,
                "timestamp": "2026-10-18T09:30:00Z"
            }
        ]
    }

Entries are stored most-recent-first. Unreadable or invalid files are treated
as an empty history.
"""

import contextlib
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from filerename.errors import HistoryUnavailableError
from filerename.models.history import HistoryEntry
from filerename.models.rename import TransformSpec


logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100


class HistoryStorage(ABC):
    """Durable backing store for the history list."""

    @abstractmethod
    def load(self) -> list[HistoryEntry]:
        """Load all stored entries, most recent first.

        Raises:
            HistoryUnavailableError: If the store cannot be read.
        """
        pass

    @abstractmethod
    def save(self, entries: list[HistoryEntry]) -> None:
        """Replace the stored entries.

        Raises:
            HistoryUnavailableError: If the store cannot be written.
        """
        pass


class MemoryHistoryStorage(HistoryStorage):
    """Non-persistent storage, for tests and throwaway sessions."""

    def __init__(self, entries: Iterable[HistoryEntry] = ()) -> None:
        self._entries = list(entries)

    def load(self) -> list[HistoryEntry]:
        return list(self._entries)

    def save(self, entries: list[HistoryEntry]) -> None:
        self._entries = list(entries)


class JsonHistoryStorage(HistoryStorage):
    """Stores history as a JSON document on the local filesystem."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> list[HistoryEntry]:
        try:
            if not self.path.exists():
                return []
            raw: object = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise HistoryUnavailableError(f"Cannot read {self.path}: {exc}") from exc
        except ValueError as exc:
            raise HistoryUnavailableError(f"{self.path} is not valid JSON: {exc}") from exc

        if not isinstance(raw, dict) or not isinstance(raw.get("entries"), list):
            raise HistoryUnavailableError(f"{self.path} must contain an 'entries' list")

        entries: list[HistoryEntry] = []
        for item in raw["entries"]:
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ValidationError as exc:
                logger.warning("Dropping invalid history entry in %s: %s", self.path, exc)
        return entries

    def save(self, entries: list[HistoryEntry]) -> None:
        payload = {"entries": [entry.model_dump(mode="json") for entry in entries]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        except OSError as exc:
            raise HistoryUnavailableError(f"Cannot write {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(temp_path, self.path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(temp_path)
            raise HistoryUnavailableError(f"Cannot write {self.path}: {exc}") from exc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryStore:
    """Bounded, de-duplicated, most-recent-first list of executed transforms."""

    def __init__(
        self,
        storage: HistoryStorage,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the store.

        Args:
            storage: Backing storage.
            max_entries: Number of entries retained; older entries are evicted.
            clock: Source of entry timestamps.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.storage = storage
        self.max_entries = max_entries
        self.clock = clock

    def entries(self) -> list[HistoryEntry]:
        """Return stored entries, most recent first.

        Never raises: if the storage is unavailable an empty list is returned.
        """
        try:
            return self._normalize(self.storage.load())
        except HistoryUnavailableError as exc:
            logger.warning("History unavailable, showing none: %s", exc)
            return []

    def record(self, spec: TransformSpec) -> HistoryEntry:
        """Put a transform at the front of the history.

        An entry with the same transform fields is moved to the front with a
        fresh timestamp instead of being duplicated.

        Raises:
            HistoryUnavailableError: If the updated history cannot be saved.
        """
        try:
            current = self.storage.load()
        except HistoryUnavailableError as exc:
            logger.warning("Existing history unreadable, starting a new one: %s", exc)
            current = []

        entry = HistoryEntry.from_spec(spec, timestamp=self.clock())
        remaining = [existing for existing in current if not existing.same_transform(spec)]
        entries = self._normalize([entry, *remaining])

        self.storage.save(entries)
        logger.debug("Recorded %s (%d entries)", entry, len(entries))
        return entry

    def clear(self) -> None:
        """Remove all entries.

        Raises:
            HistoryUnavailableError: If the storage cannot be written.
        """
        self.storage.save([])

    def _normalize(self, entries: list[HistoryEntry]) -> list[HistoryEntry]:
        """Drop duplicate transforms (keeping the most recent) and cap the length."""
        seen: set[TransformSpec] = set()
        unique: list[HistoryEntry] = []
        for entry in entries:
            spec = entry.to_spec()
            if spec in seen:
                continue
            seen.add(spec)
            unique.append(entry)
        return unique[: self.max_entries]
