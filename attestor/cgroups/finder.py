"""
Container ID Finder

An ordered, immutable set of compiled cgroup matchers. Matchers are tried in
configuration order and the first one that matches wins.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from ..constants import Defaults, Tokens
from ..errors import ConfigurationError
from .pattern import ContainerIDMatcher, compile_pattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerIDFinder:
    """Ordered collection of ContainerIDMatchers."""
    matchers: Tuple[ContainerIDMatcher, ...]

    @property
    def patterns(self) -> Tuple[str, ...]:
        return tuple(m.pattern for m in self.matchers)

    def find(self, cgroup_path: str) -> Optional[str]:
        """
        Find the container id for a cgroup path.

        Returns the id captured by the first matching pattern, which may be
        an empty string, or None when no pattern matches.
        """
        for matcher in self.matchers:
            container_id = matcher.match(cgroup_path)
            if container_id is not None:
                return container_id
        return None

    def __len__(self) -> int:
        return len(self.matchers)


def legacy_pattern(
    cgroup_prefix: str = Defaults.CGROUP_PREFIX,
    container_index: int = Defaults.CGROUP_CONTAINER_INDEX,
) -> str:
    """
    Build a pattern from the legacy prefix/index settings.

    The container id is the segment ``container_index`` positions after the
    prefix, and it must be the last segment:
        legacy_pattern("/docker", 1)      -> "/docker/<id>"
        legacy_pattern("/my.slice", 2)    -> "/my.slice/*/<id>"
    """
    if container_index < 1:
        raise ConfigurationError(
            f"cgroup_container_index must be at least 1, got {container_index}"
        )
    prefix = cgroup_prefix.rstrip(Tokens.SEPARATOR)
    segments = [prefix] + [Tokens.WILDCARD] * (container_index - 1) + [Tokens.CONTAINER_ID]
    return Tokens.SEPARATOR.join(segments)


def default_container_id_finder() -> ContainerIDFinder:
    """The built-in finder for the Docker cgroupfs layout."""
    return ContainerIDFinder(matchers=(compile_pattern(Defaults.CGROUP_PATTERN),))


def new_container_id_finder(patterns: Optional[Iterable[str]] = None) -> ContainerIDFinder:
    """
    Compile an ordered list of patterns into a ContainerIDFinder.

    An empty or missing list yields the default finder. Compilation stops at
    the first bad pattern and its error is raised.
    """
    pattern_list: Sequence[str] = list(patterns or ())
    if not pattern_list:
        return default_container_id_finder()

    matchers = tuple(compile_pattern(pattern) for pattern in pattern_list)
    logger.debug(f"Built container id finder with {len(matchers)} pattern(s)")
    return ContainerIDFinder(matchers=matchers)


__all__ = [
    'ContainerIDFinder',
    'legacy_pattern',
    'default_container_id_finder',
    'new_container_id_finder',
]
