"""
Cgroup Walker

Applies a ContainerIDFinder to the cgroup entries of a process. Entries are
examined in the order the enumerator returned them; the first match wins.

Entries come from an external enumerator, typically one that reads
/proc/<pid>/cgroup, whose lines look like:
    10:perf_event:/docker/2235ebefd9babe0dde4df4e7c49708e24fb31fb851edea55c0ee29a18273cdf4
    0::/system.slice/docker-2235ebef.scope
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence, Tuple, Union

from .finder import ContainerIDFinder

logger = logging.getLogger(__name__)


class CgroupParseError(ValueError):
    """Raised when a cgroup line is not in hierarchy-id:controllers:path form."""
    pass


@dataclass(frozen=True)
class CgroupEntry:
    """One cgroup association of a process."""
    hierarchy_id: str
    controllers: Tuple[str, ...]
    group_path: str

    @classmethod
    def parse(cls, line: str) -> 'CgroupEntry':
        """Parse a single /proc/<pid>/cgroup line."""
        # The path itself may contain ':' so split at most twice
        parts = line.rstrip('\n').split(':', 2)
        if len(parts) != 3:
            raise CgroupParseError(f"malformed cgroup entry: {line!r}")
        hierarchy_id, controllers, group_path = parts
        return cls(
            hierarchy_id=hierarchy_id,
            controllers=tuple(c for c in controllers.split(',') if c),
            group_path=group_path,
        )

    @classmethod
    def parse_all(cls, content: str) -> Tuple['CgroupEntry', ...]:
        """Parse the full content of a /proc/<pid>/cgroup file."""
        return tuple(cls.parse(line) for line in content.splitlines() if line.strip())


Cgroup = Union[CgroupEntry, str]


class CgroupEnumerator(Protocol):
    """Lists the cgroup entries of a process, in kernel order."""

    def list_cgroups(self, pid: int) -> Sequence[Cgroup]:
        ...


def _group_path(entry: Cgroup) -> str:
    if isinstance(entry, CgroupEntry):
        return entry.group_path
    return entry


@dataclass(frozen=True)
class Resolution:
    """Outcome of walking a process's cgroups."""
    container_id: str = ""
    found: bool = False
    cgroup_path: Optional[str] = None

    def __iter__(self):
        # Allows `container_id, found = resolve(...)`
        return iter((self.container_id, self.found))


def resolve(entries: Iterable[Cgroup], finder: ContainerIDFinder) -> Resolution:
    """
    Find the container id for a process from its cgroup entries.

    Returns found=False when no entry matches any pattern; that is the
    normal outcome for a process outside any container. A match with an
    empty id is returned with found=True and container_id="" so the caller
    can treat it as a misconfiguration.
    """
    for entry in entries:
        path = _group_path(entry)
        container_id = finder.find(path)
        if container_id is None:
            continue
        logger.debug(f"cgroup {path!r} matched, container id {container_id!r}")
        return Resolution(container_id=container_id, found=True, cgroup_path=path)
    return Resolution()


__all__ = [
    'CgroupEntry',
    'CgroupParseError',
    'CgroupEnumerator',
    'Cgroup',
    'Resolution',
    'resolve',
]
