"""Unit tests for data models."""

import os
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from filerename.models.history import HistoryEntry
from filerename.models.rename import PreviewEntry, PreviewResult, RenameOutcome, TransformSpec


class TestTransformSpec:
    """Tests for TransformSpec model."""

    def test_defaults(self):
        """Test that an empty spec is a literal, case-sensitive no-op."""
        spec = TransformSpec()

        assert spec.pattern == ""
        assert spec.replacement == ""
        assert spec.is_regex is False
        assert spec.case_insensitive is False
        assert spec.is_noop

    def test_is_immutable(self):
        """Test that a spec cannot be modified once constructed."""
        spec = TransformSpec(pattern="a", replacement="b")

        with pytest.raises(ValidationError):
            spec.pattern = "c"

    def test_equality_and_hash(self):
        """Test that specs with the same fields are equal and hash alike."""
        first = TransformSpec(pattern="x", replacement="y", is_regex=True)
        second = TransformSpec(pattern="x", replacement="y", is_regex=True)

        assert first == second
        assert len({first, second}) == 1
        assert first != TransformSpec(pattern="x", replacement="y", is_regex=True, case_insensitive=True)

    @pytest.mark.parametrize(
        "spec,expected",
        [
            (TransformSpec(pattern="a", replacement="b"), "'a' -> 'b' (literal)"),
            (TransformSpec(pattern="a", replacement="b", is_regex=True), "'a' -> 'b' (regex)"),
            (
                TransformSpec(pattern="a", replacement="b", case_insensitive=True),
                "'a' -> 'b' (literal, ignore case)",
            ),
        ],
    )
    def test_str_representation(self, spec, expected):
        """Test string representation."""
        assert str(spec) == expected


class TestPreviewEntry:
    """Tests for PreviewEntry model."""

    @pytest.fixture
    def sample_entry(self):
        path = os.path.join(os.sep, "path", "to", "test1.txt")
        return PreviewEntry(original_path=path, original_name="test1.txt", new_name="renamed1.txt", has_changed=True)

    def test_directory(self, sample_entry):
        """Test that the directory is derived from the original path."""
        assert sample_entry.directory == os.path.join(os.sep, "path", "to")

    def test_new_path_keeps_directory(self, sample_entry):
        """Test that the new path joins the original directory and the new name."""
        assert sample_entry.new_path == os.path.join(os.sep, "path", "to", "renamed1.txt")

    def test_str_representation(self, sample_entry):
        """Test string representation."""
        result = str(sample_entry)

        assert "test1.txt" in result
        assert "renamed1.txt" in result
        assert "changed=True" in result


class TestPreviewResult:
    """Tests for PreviewResult model."""

    def test_changed_count_and_len(self):
        """Test counting entries and changed entries."""
        result = PreviewResult(
            spec=TransformSpec(pattern="a", replacement="b"),
            entries=[
                PreviewEntry(original_path="/d/a.txt", original_name="a.txt", new_name="b.txt", has_changed=True),
                PreviewEntry(original_path="/d/c.txt", original_name="c.txt", new_name="c.txt", has_changed=False),
            ],
        )

        assert len(result) == 2
        assert result.changed_count == 1
        assert result.error is None


class TestRenameOutcome:
    """Tests for RenameOutcome model."""

    def test_empty_outcome_is_nothing_to_do(self):
        """Test that an outcome with no attempts reports nothing to do."""
        outcome = RenameOutcome()

        assert outcome.nothing_to_do
        assert not outcome.has_failures
        assert outcome.errors == []
        assert outcome.new_file_paths == []

    def test_failures(self):
        """Test that failures are reported."""
        outcome = RenameOutcome(success_count=1, failure_count=1, errors=["a.txt: target already exists"])

        assert not outcome.nothing_to_do
        assert outcome.has_failures


class TestHistoryEntry:
    """Tests for HistoryEntry model."""

    def test_from_spec_round_trip(self):
        """Test conversion between TransformSpec and HistoryEntry."""
        spec = TransformSpec(pattern=r"(\d+)", replacement="N$1", is_regex=True)
        timestamp = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        entry = HistoryEntry.from_spec(spec, timestamp=timestamp)

        assert entry.timestamp == timestamp
        assert entry.to_spec() == spec
        assert entry.same_transform(spec)
        assert not entry.same_transform(TransformSpec(pattern=r"(\d+)", replacement="N$1"))

    def test_timestamp_defaults_to_now(self):
        """Test that entries without a timestamp get the current UTC time."""
        before = datetime.now(timezone.utc)
        entry = HistoryEntry(pattern="x")

        assert entry.timestamp >= before
        assert entry.timestamp.tzinfo is not None

    def test_validates_camel_case_layout(self):
        """Test that the older camelCase layout without timestamp is accepted."""
        entry = HistoryEntry.model_validate(
            {"pattern": "test", "replacement": "TEST", "isRegex": True, "caseInsensitive": True}
        )

        assert entry.is_regex is True
        assert entry.case_insensitive is True

    def test_dump_uses_snake_case(self):
        """Test that entries serialize with snake_case field names."""
        entry = HistoryEntry(pattern="a", replacement="b", is_regex=True)

        data = entry.model_dump(mode="json")

        assert data["is_regex"] is True
        assert data["case_insensitive"] is False
        assert isinstance(data["timestamp"], str)

    def test_missing_pattern_raises(self):
        """Test that an entry without a pattern is rejected."""
        with pytest.raises(ValidationError):
            HistoryEntry.model_validate({"replacement": "x"})
