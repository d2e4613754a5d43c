"""Batch rename execution with per-file failure isolation."""

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Sequence

from tqdm import tqdm

from filerename.models.rename import PreviewEntry, RenameOutcome


logger = logging.getLogger(__name__)

TARGET_EXISTS_MESSAGE = "target already exists"


class FileSystem(ABC):
    """Filesystem operations needed by the executor."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if anything (including a dangling symlink) exists at path."""
        pass

    @abstractmethod
    def same_file(self, first: str, second: str) -> bool:
        """Return True if both paths refer to the same file on disk."""
        pass

    @abstractmethod
    def rename(self, source: str, target: str) -> None:
        """Rename source to target.

        Raises:
            OSError: If the rename fails.
        """
        pass


class OSFileSystem(FileSystem):
    """FileSystem backed by the os module."""

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def same_file(self, first: str, second: str) -> bool:
        try:
            return os.path.samefile(first, second)
        except OSError:
            return False

    def rename(self, source: str, target: str) -> None:
        os.rename(source, target)


def is_valid_filename(name: str) -> bool:
    """Return True if name can be used as a single path component."""
    if name in ("", ".", ".."):
        return False
    if "\x00" in name or os.sep in name:
        return False
    return not (os.altsep and os.altsep in name)


class RenameExecutor:
    """Executes previewed renames against the filesystem."""

    def __init__(self, filesystem: FileSystem | None = None) -> None:
        """Initialize the executor.

        Args:
            filesystem: Filesystem service. Defaults to OSFileSystem.
        """
        self.filesystem = filesystem or OSFileSystem()

    def execute(self, previews: Sequence[PreviewEntry], show_progress: bool = False) -> RenameOutcome:
        """Rename every changed entry, continuing past failures.

        Unchanged entries are skipped and keep their original path. Changed
        entries are renamed in order; a failure is recorded in the outcome and
        the batch moves on. Nothing is rolled back.

        Args:
            previews: Preview entries in selection order.
            show_progress: Display a progress bar over the changed entries.

        Returns:
            RenameOutcome whose new_file_paths is aligned with previews.
        """
        outcome = RenameOutcome()
        changed = sum(1 for entry in previews if entry.has_changed)

        with tqdm(total=changed, desc="Renaming files...", disable=not show_progress) as progress:
            for entry in previews:
                if not entry.has_changed:
                    outcome.new_file_paths.append(entry.original_path)
                    continue

                error = self._rename(entry)
                if error is None:
                    outcome.success_count += 1
                    outcome.new_file_paths.append(entry.new_path)
                else:
                    outcome.failure_count += 1
                    outcome.errors.append(f"{entry.original_name}: {error}")
                    outcome.new_file_paths.append(entry.original_path)
                progress.update(1)

        logger.info(
            "Renamed %d file(s), %d failed, %d unchanged",
            outcome.success_count,
            outcome.failure_count,
            len(previews) - changed,
        )
        return outcome

    def _rename(self, entry: PreviewEntry) -> str | None:
        """Rename a single entry.

        Returns:
            None on success, otherwise the reason the rename failed.
        """
        if not is_valid_filename(entry.new_name):
            logger.warning("Invalid target name for %s: %r", entry.original_path, entry.new_name)
            return f"invalid target name '{entry.new_name}'"

        source = entry.original_path
        target = entry.new_path

        # A case-only rename on a case-insensitive filesystem resolves to the source itself
        if self.filesystem.exists(target) and not self.filesystem.same_file(source, target):
            logger.warning("Skipping %s: %s exists", source, target)
            return TARGET_EXISTS_MESSAGE

        try:
            self.filesystem.rename(source, target)
        except OSError as exc:
            logger.warning("Failed to rename %s to %s: %s", source, target, exc)
            return exc.strerror or str(exc)

        logger.debug("Renamed %s -> %s", source, target)
        return None
