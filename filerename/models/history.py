"""Rename history data models."""

from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from filerename.models.rename import TransformSpec


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryEntry(BaseModel):
    """A previously executed transform.

    Older history files store the flags in camelCase (``isRegex``,
    ``caseInsensitive``) and carry no timestamp; both layouts validate.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    pattern: str
    replacement: str = ""
    is_regex: bool = Field(default=False, validation_alias=AliasChoices("is_regex", "isRegex"))
    case_insensitive: bool = Field(
        default=False,
        validation_alias=AliasChoices("case_insensitive", "caseInsensitive"),
    )
    timestamp: datetime = Field(default_factory=_utcnow)

    def __str__(self) -> str:
        return f"HistoryEntry({self.to_spec()}, at {self.timestamp.isoformat()})"

    @classmethod
    def from_spec(cls, spec: TransformSpec, timestamp: datetime | None = None) -> "HistoryEntry":
        return cls(
            pattern=spec.pattern,
            replacement=spec.replacement,
            is_regex=spec.is_regex,
            case_insensitive=spec.case_insensitive,
            timestamp=timestamp or _utcnow(),
        )

    def to_spec(self) -> TransformSpec:
        """Convert back into a TransformSpec for reuse."""
        return TransformSpec(
            pattern=self.pattern,
            replacement=self.replacement,
            is_regex=self.is_regex,
            case_insensitive=self.case_insensitive,
        )

    def same_transform(self, spec: TransformSpec) -> bool:
        """Return True if the entry records exactly this transform (timestamp ignored)."""
        return self.to_spec() == spec
