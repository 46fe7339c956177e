"""
Pytest configuration and shared fixtures for Workload Attestor tests.

Provides in-memory fakes for the two collaborators the attestor depends on:
the cgroup enumerator and the container inspector.
"""

import os
import sys
import threading
from typing import Dict, List, Optional, Sequence, Union

import pytest

# Add the parent directory to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from attestor.cgroups import CgroupEntry, new_container_id_finder
from attestor.config import AttestorConfig
from attestor.context import AttestContext
from attestor.docker import ContainerMetadata, RetryPolicy
from attestor.workload_attestor import DockerWorkloadAttestor


# ===========================================================================
# Fakes
# ===========================================================================

class FakeEnumerator:
    """CgroupEnumerator serving canned /proc/<pid>/cgroup content."""

    def __init__(self, cgroups: Optional[Dict[int, Union[str, Exception]]] = None):
        self.cgroups = dict(cgroups or {})
        self.calls: List[int] = []

    def list_cgroups(self, pid: int) -> Sequence[CgroupEntry]:
        self.calls.append(pid)
        content = self.cgroups.get(pid)
        if content is None:
            raise ProcessLookupError(f"no such process: {pid}")
        if isinstance(content, Exception):
            raise content
        return CgroupEntry.parse_all(content)


class FakeInspector:
    """
    ContainerInspector with scripted results.

    ``script`` maps a container id to a list of outcomes consumed one per
    call; each outcome is a ContainerMetadata to return or an exception to
    raise. The last outcome repeats once the list is exhausted.
    """

    def __init__(self, script: Optional[Dict[str, list]] = None):
        self.script = {k: list(v) for k, v in (script or {}).items()}
        self.calls: List[str] = []
        self.closed = 0
        self._lock = threading.Lock()

    def inspect_container(self, container_id: str, ctx: Optional[AttestContext] = None):
        with self._lock:
            self.calls.append(container_id)
            outcomes = self.script.get(container_id)
            if not outcomes:
                raise KeyError(f"unscripted container: {container_id}")
            outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed += 1


# ===========================================================================
# Sample Data
# ===========================================================================

CONTAINER_ID = "2235ebefd9babe0dde4df4e7c49708e24fb31fb851edea55c0ee29a18273cdf4"

DOCKER_CGROUPS = f"""\
11:hugetlb:/
10:perf_event:/docker/{CONTAINER_ID}
9:freezer:/docker/{CONTAINER_ID}
1:name=systemd:/docker/{CONTAINER_ID}
"""

HOST_CGROUPS = """\
11:hugetlb:/
10:perf_event:/
1:name=systemd:/user.slice/user-1000.slice/session-2.scope
"""

EMPTY_ID_CGROUPS = """\
10:perf_event:/docker/
"""


@pytest.fixture
def sample_metadata() -> ContainerMetadata:
    """Metadata with two labels and an image."""
    return ContainerMetadata(
        labels={'com.example.app': 'web', 'com.example.tier': 'frontend'},
        image='registry.example.com/web:1.2.3',
    )


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Retry policy with no waiting."""
    return RetryPolicy.no_delay(max_attempts=3)


@pytest.fixture
def enumerator() -> FakeEnumerator:
    return FakeEnumerator({
        100: DOCKER_CGROUPS,
        200: HOST_CGROUPS,
        300: EMPTY_ID_CGROUPS,
    })


@pytest.fixture
def inspector(sample_metadata) -> FakeInspector:
    return FakeInspector({CONTAINER_ID: [sample_metadata]})


@pytest.fixture
def attestor_config(inspector, fast_policy) -> AttestorConfig:
    return AttestorConfig(
        finder=new_container_id_finder(),
        client=inspector,
        retry_policy=fast_policy,
    )


@pytest.fixture
def attestor(enumerator, attestor_config) -> DockerWorkloadAttestor:
    return DockerWorkloadAttestor(enumerator, config=attestor_config)


# ===========================================================================
# Markers Registration
# ===========================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "concurrency: Multi-threaded tests")
    config.addinivalue_line("markers", "security: Security-specific tests")
