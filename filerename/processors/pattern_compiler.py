"""Compile rename transforms into matchers."""

import logging
import re
from abc import ABC, abstractmethod
from typing import NamedTuple

from filerename.errors import InvalidPatternError
from filerename.models.rename import TransformSpec


logger = logging.getLogger(__name__)

# $$, ${name} or $name where name is letters, digits and underscores.
# Purely numeric names refer to groups by index.
_TEMPLATE_REFERENCE = re.compile(r"\$(?:(\$)|\{(\w+)\}|(\w+))", re.ASCII)


class Matcher(ABC):
    """Base class for compiled transforms.

    A matcher rewrites a single base filename. Matchers hold no per-file state,
    so one compiled matcher is reused across a whole batch.
    """

    @abstractmethod
    def apply(self, name: str) -> str:
        """Return the name with every match substituted.

        Args:
            name: Filename without directory components.

        Returns:
            The transformed filename (unchanged if nothing matched).
        """
        pass


class NoOpMatcher(Matcher):
    """Matcher for an empty pattern; never changes anything."""

    def apply(self, name: str) -> str:
        return name


class LiteralMatcher(Matcher):
    """Replaces every non-overlapping occurrence of a literal substring."""

    def __init__(self, pattern: str, replacement: str, case_insensitive: bool = False) -> None:
        self.pattern = pattern
        self.replacement = replacement
        self.case_insensitive = case_insensitive
        self._regex = re.compile(re.escape(pattern), re.IGNORECASE) if case_insensitive else None

    def apply(self, name: str) -> str:
        if self._regex is None:
            return name.replace(self.pattern, self.replacement)
        # Callable replacement keeps backslashes in the replacement literal
        return self._regex.sub(lambda _match: self.replacement, name)


class _GroupReference(NamedTuple):
    key: int | str


class RegexMatcher(Matcher):
    """Substitutes every match of a regular expression.

    The replacement uses ``$``-style references: ``$1`` or ``${1}`` for a
    numbered group, ``$name`` or ``${name}`` for a named group and ``$$`` for a
    literal dollar sign. A bare ``$name`` consumes the longest run of word
    characters, so ``$1x`` refers to a group called ``1x``; write ``${1}x``
    instead. Unknown groups and groups that did not participate in the match
    expand to an empty string. Backslashes are not special. An empty match that
    abuts the previous match is skipped, so ``x*`` on ``abxd`` gives ``-a-b-d-``.
    """

    def __init__(self, regex: re.Pattern, replacement: str) -> None:
        self.regex = regex
        self.replacement = replacement
        self._template = _parse_template(replacement)

    def apply(self, name: str) -> str:
        parts: list[str] = []
        position = 0
        last_end = None
        for match in self.regex.finditer(name):
            start, end = match.span()
            # An empty match directly after the previous match is not a new match.
            if start == end and start == last_end:
                continue
            parts.append(name[position:start])
            parts.append(self._expand(match))
            position = last_end = end
        parts.append(name[position:])
        return "".join(parts)

    def _expand(self, match: re.Match) -> str:
        parts: list[str] = []
        for part in self._template:
            if isinstance(part, _GroupReference):
                try:
                    value = match.group(part.key)
                except IndexError:
                    value = None
                parts.append(value or "")
            else:
                parts.append(part)
        return "".join(parts)


def _parse_template(replacement: str) -> list[str | _GroupReference]:
    """Split a replacement template into literal text and group references."""
    template: list[str | _GroupReference] = []
    position = 0

    for match in _TEMPLATE_REFERENCE.finditer(replacement):
        if match.start() > position:
            template.append(replacement[position : match.start()])

        if match.group(1):
            template.append("$")
        else:
            name = match.group(2) or match.group(3)
            template.append(_GroupReference(int(name) if name.isdigit() else name))

        position = match.end()

    if position < len(replacement):
        template.append(replacement[position:])

    return template


def compile_spec(spec: TransformSpec) -> Matcher:
    """Compile a transform into a matcher.

    Args:
        spec: The transform to compile.

    Returns:
        A NoOpMatcher for an empty pattern, otherwise a LiteralMatcher or RegexMatcher.

    Raises:
        InvalidPatternError: If regex mode is set and the pattern does not compile.
    """
    if spec.is_noop:
        return NoOpMatcher()

    if not spec.is_regex:
        return LiteralMatcher(spec.pattern, spec.replacement, case_insensitive=spec.case_insensitive)

    flags = re.IGNORECASE if spec.case_insensitive else 0
    try:
        regex = re.compile(spec.pattern, flags)
    except (re.error, OverflowError) as exc:
        logger.debug("Rejected pattern %r: %s", spec.pattern, exc)
        raise InvalidPatternError(spec.pattern, str(exc)) from exc

    return RegexMatcher(regex, spec.replacement)
