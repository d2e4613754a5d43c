"""Rename operation data models."""

import os

from pydantic import BaseModel, ConfigDict, Field


class TransformSpec(BaseModel):
    """A user-defined rename transformation."""

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(description="Literal substring or regular expression to search for", default="")
    replacement: str = Field(description="Text substituted for every match", default="")
    is_regex: bool = Field(description="Treat the pattern as a regular expression", default=False)
    case_insensitive: bool = Field(description="Ignore case when matching", default=False)

    def __str__(self) -> str:
        mode = "regex" if self.is_regex else "literal"
        if self.case_insensitive:
            mode += ", ignore case"
        return f"'{self.pattern}' -> '{self.replacement}' ({mode})"

    @property
    def is_noop(self) -> bool:
        """True if the transform cannot change any name."""
        return not self.pattern


class PreviewEntry(BaseModel):
    """The proposed new name for a single selected file."""

    model_config = ConfigDict(frozen=True)

    original_path: str = Field(description="Full path of the file as selected")
    original_name: str = Field(description="Original filename (without directory path)")
    new_name: str = Field(description="New filename (without directory path)")
    has_changed: bool = Field(description="Whether the new name differs from the original")

    def __str__(self) -> str:
        return f"PreviewEntry('{self.original_name}' -> '{self.new_name}', changed={self.has_changed})"

    @property
    def directory(self) -> str:
        return os.path.dirname(self.original_path)

    @property
    def new_path(self) -> str:
        """Full destination path: the original directory joined with the new name."""
        return os.path.join(self.directory, self.new_name)


class PreviewResult(BaseModel):
    """Previews computed for one transform over the whole selection."""

    spec: TransformSpec = Field(description="Transform the previews were computed for")
    entries: list[PreviewEntry] = Field(
        description="One preview per selected file, in selection order",
        default_factory=list,
    )
    error: str | None = Field(
        description="Pattern compile error; when set, every entry is unchanged",
        default=None,
    )
    generation: int = Field(description="Sequence number of the preview request", default=0)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def changed_count(self) -> int:
        return sum(1 for entry in self.entries if entry.has_changed)


class RenameOutcome(BaseModel):
    """Aggregate result of executing one batch of renames."""

    success_count: int = Field(description="Number of files renamed", default=0)
    failure_count: int = Field(description="Number of files that could not be renamed", default=0)
    errors: list[str] = Field(
        description="One message per failed file, in selection order",
        default_factory=list,
    )
    new_file_paths: list[str] = Field(
        description="Post-rename path of every selected file, aligned with the selection",
        default_factory=list,
    )

    @property
    def nothing_to_do(self) -> bool:
        """True if no file was attempted."""
        return self.success_count == 0 and self.failure_count == 0

    @property
    def has_failures(self) -> bool:
        return self.failure_count > 0
