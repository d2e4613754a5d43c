"""Exceptions raised by the rename engine."""


class FileRenameError(Exception):
    """Base class for all filerename errors."""


class InvalidPatternError(FileRenameError):
    """Raised when a regular expression pattern cannot be compiled."""

    def __init__(self, pattern: str, message: str) -> None:
        super().__init__(f"Invalid pattern '{pattern}': {message}")
        self.pattern = pattern
        self.message = message


class HistoryUnavailableError(FileRenameError):
    """Raised when the history storage cannot be read or written."""


class NoPreviewError(FileRenameError):
    """Raised when execute is called without a current preview."""


class ExecutionInProgressError(FileRenameError):
    """Raised when execute is called while another batch is still running."""


class ConfigError(FileRenameError):
    """Raised when config.json exists but cannot be parsed or validated."""
