"""
Cgroup Matching for the Workload Attestor

Components:
- pattern: compiles a cgroup path pattern into a ContainerIDMatcher
- finder: ordered set of matchers, first match wins
- walker: applies a finder to a process's cgroup entries

Usage:
    from attestor.cgroups import new_container_id_finder, resolve

    finder = new_container_id_finder(["/docker/<id>", "/kubepods/*/*/<id>"])
    container_id, found = resolve(entries, finder)
"""

from .pattern import (
    ContainerIDMatcher,
    compile_pattern,
)

from .finder import (
    ContainerIDFinder,
    legacy_pattern,
    default_container_id_finder,
    new_container_id_finder,
)

from .walker import (
    CgroupEntry,
    CgroupParseError,
    CgroupEnumerator,
    Resolution,
    resolve,
)

__all__ = [
    # Pattern
    'ContainerIDMatcher',
    'compile_pattern',
    # Finder
    'ContainerIDFinder',
    'legacy_pattern',
    'default_container_id_finder',
    'new_container_id_finder',
    # Walker
    'CgroupEntry',
    'CgroupParseError',
    'CgroupEnumerator',
    'Resolution',
    'resolve',
]
