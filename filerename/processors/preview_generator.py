"""Compute proposed names for a selection without touching the filesystem."""

import logging
import os
from collections.abc import Sequence

from filerename.errors import InvalidPatternError
from filerename.models.rename import PreviewEntry, PreviewResult, TransformSpec
from filerename.processors.pattern_compiler import Matcher, NoOpMatcher, compile_spec


logger = logging.getLogger(__name__)


def build_preview(paths: Sequence[str], matcher: Matcher) -> list[PreviewEntry]:
    """Apply a compiled matcher to the base name of every path.

    Args:
        paths: Selected file paths, in selection order.
        matcher: Compiled transform.

    Returns:
        One PreviewEntry per path, in the same order.
    """
    entries: list[PreviewEntry] = []
    for path in paths:
        original_name = os.path.basename(path)
        new_name = matcher.apply(original_name)
        entries.append(
            PreviewEntry(
                original_path=path,
                original_name=original_name,
                new_name=new_name,
                has_changed=new_name != original_name,
            )
        )
    return entries


def generate_preview(paths: Sequence[str], spec: TransformSpec, generation: int = 0) -> PreviewResult:
    """Preview a transform over a selection.

    The transform is compiled once for the whole selection. An invalid pattern
    does not raise: the result carries the error message and every entry is
    reported unchanged.
    """
    error = None
    try:
        matcher = compile_spec(spec)
    except InvalidPatternError as exc:
        error = exc.message
        matcher = NoOpMatcher()

    entries = build_preview(paths, matcher)
    result = PreviewResult(spec=spec, entries=entries, error=error, generation=generation)
    logger.debug(
        "Preview #%d for %s: %d of %d file(s) change",
        generation,
        spec,
        result.changed_count,
        len(result),
    )
    return result
