"""
Cgroup Path Pattern Compiler

Turns an operator supplied cgroup path template into a compiled matcher.

Pattern syntax:
    /docker/<id>                         - id is the segment after /docker
    /kubepods/*/*/<id>                   - '*' as a whole segment matches any one segment
    /system.slice/docker-<id>.scope      - literal text around the id token

Rules:
- The container id token "<id>" must occur exactly once.
- A segment equal to "*" matches exactly one path segment, any content,
  including the empty string. It never spans a '/'.
- The id token matches any run of non-'/' characters, possibly empty.
- Every other character matches itself. Backslash is reserved and a pattern
  holding one is rejected with PatternCompilationError.
- The compiled matcher must match the whole cgroup path, not a prefix.

Usage:
    matcher = compile_pattern("/docker/<id>")
    matcher.match("/docker/2235ebef")   # -> "2235ebef"
    matcher.match("/docker/")           # -> ""
    matcher.match("/docker/a/b")        # -> None
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..constants import Tokens
from ..errors import InvalidPatternError, PatternCompilationError

logger = logging.getLogger(__name__)

REGEXP_WILDCARD = r'[^/]*'
REGEXP_CONTAINER_ID = r'([^/]*)'

BACKSLASH = '\\'


@dataclass(frozen=True)
class ContainerIDMatcher:
    """Compiled form of a cgroup path pattern."""
    pattern: str
    regex: 're.Pattern[str]'
    capture_index: int  # Index of the '/'-delimited segment holding the id

    def match(self, cgroup_path: str) -> Optional[str]:
        """
        Match a cgroup path against the pattern.

        Returns the captured container id (possibly empty) or None when the
        path does not conform to the pattern.
        """
        m = self.regex.fullmatch(cgroup_path)
        if m is None:
            return None
        return m.group(1)


def _unescaped_backslash(text: str) -> str:
    return ''.join(ch if ch == BACKSLASH else re.escape(ch) for ch in text)


def _translate(segments: List[str], escape: Callable[[str], str]) -> str:
    translated = []
    for segment in segments:
        if segment == Tokens.WILDCARD:
            translated.append(REGEXP_WILDCARD)
        else:
            parts = segment.split(Tokens.CONTAINER_ID)
            translated.append(REGEXP_CONTAINER_ID.join(escape(part) for part in parts))
    return Tokens.SEPARATOR.join(translated)


def _reject_backslash(pattern: str, segments: List[str]) -> None:
    """
    Raise PatternCompilationError for a pattern holding a backslash.

    The diagnostic is the engine's own when the backslash would have made
    the expression invalid (e.g. "\\<id>" or a trailing backslash).
    """
    try:
        re.compile(_translate(segments, _unescaped_backslash))
    except re.error as e:
        raise PatternCompilationError(pattern, str(e)) from e
    position = pattern.index(BACKSLASH)
    raise PatternCompilationError(
        pattern, f"backslash is not allowed in a cgroup pattern at position {position}"
    )


def compile_pattern(pattern: str) -> ContainerIDMatcher:
    """
    Compile a cgroup path pattern into a ContainerIDMatcher.

    Raises:
        InvalidPatternError: the id token does not occur exactly once
        PatternCompilationError: the pattern holds a backslash, or the
            translated expression is rejected by the regular expression engine
    """
    if pattern.count(Tokens.CONTAINER_ID) != 1:
        raise InvalidPatternError(pattern)

    segments = pattern.split(Tokens.SEPARATOR)
    if BACKSLASH in pattern:
        _reject_backslash(pattern, segments)

    capture_index = next(
        index for index, segment in enumerate(segments)
        if Tokens.CONTAINER_ID in segment
    )

    expr = _translate(segments, re.escape)
    try:
        regex = re.compile(expr)
    except re.error as e:
        raise PatternCompilationError(pattern, str(e)) from e

    logger.debug(f"Compiled cgroup pattern {pattern!r} -> {expr!r}")
    return ContainerIDMatcher(
        pattern=pattern,
        regex=regex,
        capture_index=capture_index,
    )


__all__ = [
    'ContainerIDMatcher',
    'compile_pattern',
    'REGEXP_WILDCARD',
    'REGEXP_CONTAINER_ID',
]
