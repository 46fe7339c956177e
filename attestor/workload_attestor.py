"""
Docker Workload Attestor

Attests a process by its cgroup membership:
1. snapshot the current configuration
2. list the process's cgroup entries
3. find the first entry matching a configured pattern
4. inspect the matched container through the Docker daemon (with retries)
5. turn the container's labels and image into selectors

A process whose cgroups match no pattern is not running in a container.
That is expected for many callers and yields an empty selector set, not an
error. A pattern that matches but captures an empty id is a
misconfiguration and raises EmptyContainerIDError.

Thread safety: attest() may run concurrently from many threads. The config
snapshot is read and replaced under a lock held only for the reference copy
or swap, never across I/O, so a slow daemon blocks neither reconfiguration
nor other callers, and a call always runs against one whole snapshot.
"""

import logging
import threading
from typing import Any, Dict, FrozenSet, Optional, Union

from .cgroups.walker import CgroupEnumerator, resolve
from .config import (
    AttestorConfig,
    AttestorSettings,
    ClientFactory,
    build_config,
    default_client_factory,
)
from .constants import Selectors
from .context import AttestContext
from .docker.inspector import ResilientInspector
from .docker.selectors import Selector, derive_selectors
from .errors import EmptyContainerIDError, NotConfiguredError

logger = logging.getLogger(__name__)

PLUGIN_NAME = Selectors.TYPE


class DockerWorkloadAttestor:
    """
    Workload attestor for processes running in Docker containers.

    Usage:
        attestor = DockerWorkloadAttestor(enumerator)
        attestor.configure({'container_id_cgroup_matchers': ['/docker/<id>']})

        selectors = attestor.attest(pid, AttestContext.with_timeout(5.0))
        for selector in selectors:
            print(selector)   # docker:label:com.example.app:web
    """

    def __init__(
        self,
        enumerator: CgroupEnumerator,
        config: Optional[AttestorConfig] = None,
        client_factory: ClientFactory = default_client_factory,
    ):
        self._enumerator = enumerator
        self._client_factory = client_factory
        self._config = config
        self._lock = threading.Lock()
        # id(snapshot) -> number of attest() calls running against it
        self._in_flight: Dict[int, int] = {}

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def snapshot(self) -> AttestorConfig:
        """Return the current configuration snapshot."""
        with self._lock:
            config = self._config
        if config is None:
            raise NotConfiguredError()
        return config

    def reconfigure(self, config: AttestorConfig) -> None:
        """
        Replace the configuration snapshot wholesale.

        The replaced snapshot's client is closed once no attest() call is
        still running against it.
        """
        with self._lock:
            previous = self._config
            self._config = config
            retire = (
                previous is not None
                and id(previous) not in self._in_flight
                and self._is_retired(previous)
            )
        if retire:
            self._close(previous)
        logger.info(
            f"Attestor reconfigured with {len(config.finder)} cgroup pattern(s): "
            f"{', '.join(config.finder.patterns)}"
        )

    def configure(
        self,
        settings: Union[AttestorSettings, Dict[str, Any], str, None],
    ) -> AttestorConfig:
        """
        Build a new snapshot from settings and swap it in.

        Settings may be an AttestorSettings, a mapping or a YAML document.
        The new snapshot is fully built before the swap; if any pattern or
        setting is bad the error is raised and the previous configuration
        stays active.
        """
        if isinstance(settings, str):
            settings = AttestorSettings.from_yaml(settings)
        elif not isinstance(settings, AttestorSettings):
            settings = AttestorSettings.from_dict(settings)

        config = build_config(settings, self._client_factory)
        self.reconfigure(config)
        return config

    def _is_retired(self, config: AttestorConfig) -> bool:
        # Caller holds self._lock
        current = self._config
        return current is None or (config is not current and config.client is not current.client)

    def _close(self, config: AttestorConfig) -> None:
        try:
            config.close()
        except Exception as e:
            logger.warning(f"Failed to close retired docker client: {e}")

    def _acquire(self) -> AttestorConfig:
        with self._lock:
            config = self._config
            if config is None:
                raise NotConfiguredError()
            self._in_flight[id(config)] = self._in_flight.get(id(config), 0) + 1
        return config

    def _release(self, config: AttestorConfig) -> None:
        with self._lock:
            count = self._in_flight.pop(id(config)) - 1
            if count:
                self._in_flight[id(config)] = count
                return
            retire = self._is_retired(config)
        if retire:
            self._close(config)

    def is_configured(self) -> bool:
        with self._lock:
            return self._config is not None

    def get_plugin_info(self) -> Dict[str, Any]:
        with self._lock:
            config = self._config
        info: Dict[str, Any] = {
            'name': PLUGIN_NAME,
            'configured': config is not None,
        }
        if config is not None:
            info['patterns'] = list(config.finder.patterns)
            info['retry_policy'] = config.retry_policy.to_dict()
        return info

    # ------------------------------------------------------------------
    # Attestation
    # ------------------------------------------------------------------

    def attest(self, pid: int, ctx: Optional[AttestContext] = None) -> FrozenSet[Selector]:
        """
        Attest a process and return its selectors.

        Raises:
            NotConfiguredError: no configuration has been applied yet
            EmptyContainerIDError: a pattern matched with an empty id
            InspectionError: the daemon could not describe the container
            CancellationError: ctx was cancelled or its deadline passed
            Any error raised by the cgroup enumerator, unchanged
        """
        config = self._acquire()
        try:
            return self._attest(config, pid, ctx or AttestContext.background())
        finally:
            self._release(config)

    def _attest(self, config: AttestorConfig, pid: int, ctx: AttestContext) -> FrozenSet[Selector]:
        entries = self._enumerator.list_cgroups(pid)
        resolution = resolve(entries, config.finder)

        if not resolution.found:
            logger.debug(f"pid {pid} matched no container cgroup pattern")
            return frozenset()
        if not resolution.container_id:
            raise EmptyContainerIDError(resolution.cgroup_path)

        inspector = ResilientInspector(config.client, config.retry_policy)
        metadata = inspector.inspect(resolution.container_id, ctx)

        selectors = derive_selectors(metadata)
        logger.debug(
            f"pid {pid} attested as container {resolution.container_id} "
            f"with {len(selectors)} selector(s)"
        )
        return selectors


__all__ = [
    'PLUGIN_NAME',
    'DockerWorkloadAttestor',
]
