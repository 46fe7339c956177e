"""
Docker Daemon Client

A narrow view of the container runtime: inspect one container by id and
return the metadata the attestor turns into selectors. The Docker SDK's
errors are translated into the attestor's error taxonomy here so the rest of
the attestor never sees SDK types.

Error translation:
    docker.errors.NotFound                 -> ContainerNotFoundError (retryable)
    requests ConnectionError / Timeout     -> DaemonUnavailableError (retryable)
    docker.errors.APIError, 5xx            -> DaemonUnavailableError (retryable)
    docker.errors.APIError, other          -> InspectionError (permanent)

Each request is bounded by the client timeout or by what is left of the
caller's deadline, whichever is shorter.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Protocol

import docker
import requests

from ..constants import Defaults, Timeouts
from ..context import AttestContext
from ..errors import (
    ConfigurationError,
    ContainerNotFoundError,
    DaemonUnavailableError,
    InspectionError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerMetadata:
    """Container metadata reported by the runtime daemon."""
    labels: Mapping[str, str] = field(default_factory=dict)
    image: str = ""

    def __post_init__(self):
        # Freeze the label mapping so a shared instance cannot change
        object.__setattr__(self, 'labels', MappingProxyType(dict(self.labels or {})))

    def __hash__(self) -> int:
        return hash((frozenset(self.labels.items()), self.image))

    @classmethod
    def from_inspect(cls, data: Optional[Dict[str, Any]]) -> 'ContainerMetadata':
        """Build from a Docker ``inspect_container`` response."""
        config = (data or {}).get('Config') or {}
        labels = config.get('Labels') or {}
        return cls(
            labels={str(k): str(v) for k, v in labels.items()},
            image=config.get('Image') or "",
        )


class ContainerInspector(Protocol):
    """The single runtime-daemon capability the attestor depends on."""

    def inspect_container(
        self,
        container_id: str,
        ctx: Optional[AttestContext] = None,
    ) -> ContainerMetadata:
        ...


class DockerDaemonClient:
    """
    ContainerInspector backed by the Docker Engine API.

    Usage:
        client = DockerDaemonClient(socket_path="unix:///var/run/docker.sock")
        metadata = client.inspect_container("2235ebef")
    """

    def __init__(
        self,
        socket_path: Optional[str] = None,
        version: Optional[str] = None,
        timeout: float = Timeouts.INSPECT_REQUEST,
        api_client: Optional[Any] = None,
    ):
        self.socket_path = socket_path or Defaults.DOCKER_SOCKET_PATH
        self.version = version or Defaults.DOCKER_VERSION
        self.timeout = timeout

        if api_client is not None:
            self._api = api_client
            return

        try:
            self._api = docker.APIClient(
                base_url=self.socket_path,
                version=self.version,
                timeout=self.timeout,
            )
        except docker.errors.DockerException as e:
            raise ConfigurationError(
                f"failed to create docker client for {self.socket_path}: {e}"
            ) from e

    def request_timeout(self, ctx: Optional[AttestContext] = None) -> float:
        """The client timeout, shortened to what is left of ctx's deadline."""
        remaining = ctx.remaining() if ctx is not None else None
        if remaining is None:
            return self.timeout
        return min(self.timeout, remaining)

    def inspect_container(
        self,
        container_id: str,
        ctx: Optional[AttestContext] = None,
    ) -> ContainerMetadata:
        if ctx is not None:
            ctx.check()

        try:
            # GET /containers/{id}/json with a per-request timeout
            url = self._api._url("/containers/{0}/json", container_id)
            response = self._api._get(url, timeout=self.request_timeout(ctx))
            data = self._api._result(response, True)
        except docker.errors.NotFound as e:
            raise ContainerNotFoundError(
                f"no such container: {container_id}: {e.explanation or e}",
                container_id=container_id,
            ) from e
        except docker.errors.APIError as e:
            if e.is_server_error():
                raise DaemonUnavailableError(
                    f"docker daemon error inspecting {container_id}: {e}",
                    container_id=container_id,
                ) from e
            raise InspectionError(
                f"docker daemon rejected inspect of {container_id}: {e}",
                container_id=container_id,
            ) from e
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            if ctx is not None:
                ctx.check()
            raise DaemonUnavailableError(
                f"docker daemon unavailable at {self.socket_path}: {e}",
                container_id=container_id,
            ) from e

        if ctx is not None:
            ctx.check()
        return ContainerMetadata.from_inspect(data)

    def close(self) -> None:
        self._api.close()


__all__ = [
    'ContainerMetadata',
    'ContainerInspector',
    'DockerDaemonClient',
]
