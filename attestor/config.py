"""
Attestor Configuration

Two layers:
- AttestorSettings: the operator's settings as handed over by the
  configuration source (a mapping or a YAML document).
- AttestorConfig: the immutable runtime snapshot built from the settings
  (compiled matchers, daemon client, retry policy). Attestation calls share
  one snapshot; reconfiguration replaces it wholesale.

Settings Structure:
    docker_socket_path: "unix:///var/run/docker.sock"
    docker_version: "1.40"
    container_id_cgroup_matchers:
      - "/docker/<id>"
      - "/system.slice/docker-<id>.scope"
    # Legacy, used only when no matchers are given
    cgroup_prefix: "/docker"
    cgroup_container_index: 1
    retry_max_attempts: 5
    retry_initial_delay: 0.1
    retry_backoff_multiplier: 2.0
    retry_max_delay: 2.0
    inspect_timeout: 10.0

Usage:
    settings = AttestorSettings.from_yaml(config_text)
    config = build_config(settings)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import yaml

from .cgroups.finder import ContainerIDFinder, legacy_pattern, new_container_id_finder
from .constants import Retries, Timeouts
from .docker.client import ContainerInspector, DockerDaemonClient
from .docker.inspector import RetryPolicy
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

KNOWN_KEYS = frozenset({
    'docker_socket_path',
    'docker_version',
    'cgroup_prefix',
    'cgroup_container_index',
    'container_id_cgroup_matchers',
    'retry_max_attempts',
    'retry_initial_delay',
    'retry_backoff_multiplier',
    'retry_max_delay',
    'inspect_timeout',
})


@dataclass
class AttestorSettings:
    """Operator settings for the Docker workload attestor."""
    docker_socket_path: Optional[str] = None
    docker_version: Optional[str] = None
    cgroup_prefix: Optional[str] = None
    cgroup_container_index: Optional[int] = None  # None means "not set", 0 is invalid
    container_id_cgroup_matchers: List[str] = field(default_factory=list)
    retry_max_attempts: int = Retries.MAX_ATTEMPTS
    retry_initial_delay: float = Retries.INITIAL_DELAY
    retry_backoff_multiplier: float = Retries.BACKOFF_MULTIPLIER
    retry_max_delay: float = Retries.MAX_DELAY
    inspect_timeout: float = Timeouts.INSPECT_REQUEST

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'AttestorSettings':
        """Create from dictionary."""
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"attestor settings must be a mapping, got {type(data).__name__}"
            )

        unknown = sorted(set(data) - KNOWN_KEYS)
        if unknown:
            logger.warning(f"Ignoring unknown attestor settings: {', '.join(unknown)}")

        matchers = data.get('container_id_cgroup_matchers') or []
        if isinstance(matchers, str) or not isinstance(matchers, (list, tuple)):
            raise ConfigurationError("container_id_cgroup_matchers must be a list of patterns")

        try:
            return cls(
                docker_socket_path=data.get('docker_socket_path'),
                docker_version=data.get('docker_version'),
                cgroup_prefix=data.get('cgroup_prefix'),
                cgroup_container_index=_optional(int, data.get('cgroup_container_index')),
                container_id_cgroup_matchers=[str(m) for m in matchers],
                retry_max_attempts=int(data.get('retry_max_attempts', Retries.MAX_ATTEMPTS)),
                retry_initial_delay=float(data.get('retry_initial_delay', Retries.INITIAL_DELAY)),
                retry_backoff_multiplier=float(
                    data.get('retry_backoff_multiplier', Retries.BACKOFF_MULTIPLIER)
                ),
                retry_max_delay=float(data.get('retry_max_delay', Retries.MAX_DELAY)),
                inspect_timeout=float(data.get('inspect_timeout', Timeouts.INSPECT_REQUEST)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"invalid attestor setting: {e}") from e

    @classmethod
    def from_yaml(cls, text: str) -> 'AttestorSettings':
        """Create from a YAML document."""
        try:
            data = yaml.safe_load(text) if text and text.strip() else {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"failed to decode attestor settings: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'docker_socket_path': self.docker_socket_path,
            'docker_version': self.docker_version,
            'cgroup_prefix': self.cgroup_prefix,
            'cgroup_container_index': self.cgroup_container_index,
            'container_id_cgroup_matchers': list(self.container_id_cgroup_matchers),
            'retry_max_attempts': self.retry_max_attempts,
            'retry_initial_delay': self.retry_initial_delay,
            'retry_backoff_multiplier': self.retry_backoff_multiplier,
            'retry_max_delay': self.retry_max_delay,
            'inspect_timeout': self.inspect_timeout,
        }

    def cgroup_patterns(self) -> List[str]:
        """
        The ordered patterns to compile.

        Explicit matchers win. Otherwise the legacy prefix/index settings
        build one pattern, and with neither set the list is empty so the
        built-in default applies.
        """
        if self.container_id_cgroup_matchers:
            return list(self.container_id_cgroup_matchers)
        if self.cgroup_prefix is not None or self.cgroup_container_index is not None:
            kwargs = {}
            if self.cgroup_prefix is not None:
                kwargs['cgroup_prefix'] = self.cgroup_prefix
            if self.cgroup_container_index is not None:
                kwargs['container_index'] = self.cgroup_container_index
            return [legacy_pattern(**kwargs)]
        return []

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            initial_delay=self.retry_initial_delay,
            backoff_multiplier=self.retry_backoff_multiplier,
            max_delay=self.retry_max_delay,
        )


def _optional(converter: Callable[[Any], Any], value: Any) -> Any:
    return None if value is None else converter(value)


@dataclass(frozen=True)
class AttestorConfig:
    """Immutable runtime configuration snapshot."""
    finder: ContainerIDFinder
    client: ContainerInspector
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    settings: Optional[AttestorSettings] = None

    def close(self) -> None:
        """Release the daemon client's connections, if it holds any."""
        close = getattr(self.client, 'close', None)
        if close is not None:
            close()


ClientFactory = Callable[[AttestorSettings], ContainerInspector]


def default_client_factory(settings: AttestorSettings) -> ContainerInspector:
    return DockerDaemonClient(
        socket_path=settings.docker_socket_path,
        version=settings.docker_version,
        timeout=settings.inspect_timeout,
    )


def build_config(
    settings: AttestorSettings,
    client_factory: ClientFactory = default_client_factory,
) -> AttestorConfig:
    """
    Build a runtime snapshot from settings.

    Either every step succeeds and a complete snapshot is returned, or a
    ConfigurationError (or a pattern error) is raised and nothing is built.
    """
    finder = new_container_id_finder(settings.cgroup_patterns())
    policy = settings.retry_policy()
    client = client_factory(settings)
    return AttestorConfig(
        finder=finder,
        client=client,
        retry_policy=policy,
        settings=settings,
    )


__all__ = [
    'AttestorSettings',
    'AttestorConfig',
    'ClientFactory',
    'default_client_factory',
    'build_config',
]
